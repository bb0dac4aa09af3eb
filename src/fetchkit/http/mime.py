# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""MIME constants and content sniffing for multipart file parts.

``detect_content_type`` follows the WHATWG MIME sniffing table: it looks at no
more than the first 512 bytes and always returns a valid MIME type, falling back
to ``application/octet-stream``.
"""

from __future__ import annotations

MIME_JSON = "application/json"
MIME_XML = "application/xml"
MIME_TEXT_XML = "text/xml"
MIME_HTML = "text/html"
MIME_TEXT = "text/plain"
MIME_POST_FORM = "application/x-www-form-urlencoded"
MIME_MULTIPART_POST_FORM = "multipart/form-data"
MIME_OCTET_STREAM = "application/octet-stream"

SNIFF_LEN = 512

_WHITESPACE = b"\t\n\x0c\r "

_HTML_TAGS = (
    b"<!DOCTYPE HTML",
    b"<HTML",
    b"<HEAD",
    b"<SCRIPT",
    b"<IFRAME",
    b"<H1",
    b"<DIV",
    b"<FONT",
    b"<TABLE",
    b"<A",
    b"<STYLE",
    b"<TITLE",
    b"<B",
    b"<BODY",
    b"<BR",
    b"<P",
    b"<!--",
)

# (prefix, mime) pairs checked in order against the raw bytes
_EXACT_SIGNATURES = (
    (b"%PDF-", "application/pdf"),
    (b"%!PS-Adobe-", "application/postscript"),
    (b"\xfe\xff", "text/plain; charset=utf-16be"),
    (b"\xff\xfe", "text/plain; charset=utf-16le"),
    (b"\xef\xbb\xbf", "text/plain; charset=utf-8"),
    (b"\x00\x00\x01\x00", "image/x-icon"),
    (b"\x00\x00\x02\x00", "image/x-icon"),
    (b"BM", "image/bmp"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"OggS\x00", "application/ogg"),
    (b"MThd\x00\x00\x00\x06", "audio/midi"),
    (b"ID3", "audio/mpeg"),
    (b"\x1aE\xdf\xa3", "video/webm"),
    (b"\x1f\x8b\x08", "application/x-gzip"),
    (b"PK\x03\x04", "application/zip"),
    (b"Rar!\x1a\x07\x00", "application/x-rar-compressed"),
    (b"Rar!\x1a\x07\x01\x00", "application/x-rar-compressed"),
    (b"\x00asm", "application/wasm"),
    (b"wOFF", "font/woff"),
    (b"wOF2", "font/woff2"),
)

# RIFF containers: bytes 8..12 name the format
_RIFF_FORMATS = {
    b"WEBP": "image/webp",
    b"WAVE": "audio/wave",
    b"AVI ": "video/avi",
}


def _is_tag_terminator(byte: int) -> bool:
    return byte in b" >"


def _match_html(data: bytes) -> bool:
    stripped = data.lstrip(_WHITESPACE)
    upper = stripped[: 16].upper()
    for tag in _HTML_TAGS:
        if upper.startswith(tag) and len(stripped) > len(tag) and _is_tag_terminator(stripped[len(tag)]):
            return True
    return False


def _is_mp4(data: bytes) -> bool:
    if len(data) < 12:
        return False
    box_size = int.from_bytes(data[:4], "big")
    if box_size % 4 != 0 or len(data) < box_size or data[4:8] != b"ftyp":
        return False
    for start in range(8, box_size, 4):
        if start == 12:
            continue
        if data[start : start + 3] == b"mp4":
            return True
    return False


def _is_binary(data: bytes) -> bool:
    for byte in data:
        if byte <= 0x08 or byte == 0x0B or 0x0E <= byte <= 0x1A or 0x1C <= byte <= 0x1F:
            return True
    return False


def detect_content_type(data: bytes) -> str:
    """Return the sniffed MIME type of ``data``."""
    head = bytes(data[:SNIFF_LEN])
    if _match_html(head):
        return "text/html; charset=utf-8"
    if head.lstrip(_WHITESPACE).startswith(b"<?xml"):
        return "text/xml; charset=utf-8"
    for prefix, mime in _EXACT_SIGNATURES:
        if head.startswith(prefix):
            return mime
    if head.startswith(b"RIFF") and len(head) >= 12 and head[8:12] in _RIFF_FORMATS:
        return _RIFF_FORMATS[head[8:12]]
    if _is_mp4(head):
        return "video/mp4"
    if not _is_binary(head):
        return "text/plain; charset=utf-8"
    return MIME_OCTET_STREAM


__all__ = [
    "MIME_HTML",
    "MIME_JSON",
    "MIME_MULTIPART_POST_FORM",
    "MIME_OCTET_STREAM",
    "MIME_POST_FORM",
    "MIME_TEXT",
    "MIME_TEXT_XML",
    "MIME_XML",
    "SNIFF_LEN",
    "detect_content_type",
]
