# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Request body encoders.

Each encoder turns a payload into ``EncodedBody(content, content_type)``. Encoding
is deferred until dispatch; every failure surfaces as ``EncodingError`` before any
network I/O takes place.
"""

from __future__ import annotations

import dataclasses
import json
import mimetypes
import xml.etree.ElementTree as ET
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Any, Protocol

import httpx

from ..errors import EncodingError
from ..utils.scalar import to_strings
from .mime import MIME_JSON, MIME_OCTET_STREAM, MIME_POST_FORM, MIME_XML, detect_content_type
from .xml_body import dict_to_xml

# multipart is rendered in memory, the URL is never contacted
_MULTIPART_URL = "http://multipart.invalid/"


@dataclass(frozen=True)
class EncodedBody:
    content: bytes
    content_type: str


class Body(Protocol):
    def encode(self) -> EncodedBody: ...


def _json_default(value: Any) -> Any:
    """
    Serialize values ``json`` does not know natively.

    A ``Decimal`` becomes a JSON number only when a float holds it exactly; otherwise it is
    sent as a string so no digits are dropped. Non-finite decimals are rejected.
    """
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise ValueError(f"Out of range decimal value: {value}")
        as_float = float(value)
        if Decimal(repr(as_float)) == value:
            return as_float
        return str(value)
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class JSONBody:
    """``application/json``; str/bytes payloads are sent verbatim, anything else is serialized."""

    content_type = MIME_JSON

    def __init__(self, payload: Any):
        self.payload = payload

    def encode(self) -> EncodedBody:
        payload = self.payload
        if isinstance(payload, str):
            return EncodedBody(payload.encode("utf-8"), self.content_type)
        if isinstance(payload, (bytes, bytearray, memoryview)):
            return EncodedBody(bytes(payload), self.content_type)
        try:
            text = json.dumps(
                payload,
                default=_json_default,
                ensure_ascii=False,
                allow_nan=False,
                separators=(",", ":"),
            )
        except (TypeError, ValueError) as exc:
            raise EncodingError(f"json: {exc}") from exc
        return EncodedBody(text.encode("utf-8"), self.content_type)


class XMLBody:
    """``application/xml``; str/bytes verbatim, Elements and single-root dicts serialized."""

    content_type = MIME_XML

    def __init__(self, payload: Any):
        self.payload = payload

    def encode(self) -> EncodedBody:
        payload = self.payload
        if isinstance(payload, str):
            return EncodedBody(payload.encode("utf-8"), self.content_type)
        if isinstance(payload, (bytes, bytearray, memoryview)):
            return EncodedBody(bytes(payload), self.content_type)
        if dataclasses.is_dataclass(payload) and not isinstance(payload, type):
            payload = {type(payload).__name__: dataclasses.asdict(payload)}
        try:
            if isinstance(payload, ET.Element):
                content = ET.tostring(payload, encoding="utf-8", xml_declaration=True)
            elif isinstance(payload, dict):
                content = dict_to_xml(payload)
            else:
                raise TypeError(f"cannot encode {type(payload).__name__} as XML")
        except (TypeError, ValueError) as exc:
            raise EncodingError(f"xml: {exc}") from exc
        return EncodedBody(content, self.content_type)


def _form_pairs(values: Mapping[str, Any] | None) -> list[tuple[str, str]]:
    pairs: list[tuple[str, str]] = []
    for key, value in (values or {}).items():
        pairs.extend((str(key), item) for item in to_strings(value))
    return pairs


class FormBody:
    """``application/x-www-form-urlencoded`` built from scalar (or list-of-scalar) values."""

    content_type = MIME_POST_FORM

    def __init__(self, values: Mapping[str, Any] | None = None):
        self._values: list[tuple[str, Any]] = list((values or {}).items())

    def _replace(self, values: list[tuple[str, Any]]) -> FormBody:
        form = FormBody()
        form._values = values
        return form

    def add(self, key: str, value: Any) -> FormBody:
        return self._replace([*self._values, (key, value)])

    def set(self, key: str, value: Any) -> FormBody:
        return self._replace([(k, v) for k, v in self._values if k != key] + [(key, value)])

    def remove(self, key: str) -> FormBody:
        return self._replace([(k, v) for k, v in self._values if k != key])

    def encode(self) -> EncodedBody:
        try:
            pairs = [(key, item) for key, value in self._values for item in to_strings(value)]
        except (TypeError, UnicodeDecodeError) as exc:
            raise EncodingError(f"form: {exc}") from exc
        return EncodedBody(str(httpx.QueryParams(pairs)).encode("ascii"), self.content_type)


@dataclass(frozen=True)
class FormFile:
    """A file part of a multipart form. ``content_type=None`` sniffs it from the content."""

    field: str
    filename: str
    content: bytes
    content_type: str | None = None

    @classmethod
    def from_path(cls, field: str, path: str | Path, content_type: str | None = None) -> FormFile:
        file_path = Path(path)
        return cls(field=field, filename=file_path.name, content=file_path.read_bytes(), content_type=content_type)

    def resolved_content_type(self) -> str:
        if self.content_type:
            return self.content_type
        sniffed = detect_content_type(self.content)
        if sniffed != MIME_OCTET_STREAM:
            return sniffed
        guessed, _ = mimetypes.guess_type(self.filename)
        return guessed or MIME_OCTET_STREAM


class MultipartFormBody:
    """``multipart/form-data``; the boundary, and so the content type, exists only after encoding."""

    def __init__(self, values: Mapping[str, Any] | None = None, *files: FormFile, boundary: bytes | None = None):
        self.values = dict(values or {})
        self.files = tuple(files)
        self.boundary = boundary

    def encode(self) -> EncodedBody:
        try:
            # a part without a filename renders exactly like a plain form field
            parts: list[tuple[str, tuple[Any, ...]]] = [
                (key, (None, value.encode("utf-8"))) for key, value in _form_pairs(self.values)
            ]
            parts.extend(
                (item.field, (item.filename, bytes(item.content), item.resolved_content_type())) for item in self.files
            )
            headers = {}
            if self.boundary is not None:
                headers["Content-Type"] = f"multipart/form-data; boundary={self.boundary.decode('ascii')}"
            if not parts:
                raise ValueError("multipart form has no fields")
            request = httpx.Request("POST", _MULTIPART_URL, files=parts, headers=headers)
            content = request.read()
        except (TypeError, ValueError, UnicodeError) as exc:
            raise EncodingError(f"multipart: {exc}") from exc
        content_type = request.headers["Content-Type"]
        return EncodedBody(content, content_type)


__all__ = [
    "Body",
    "EncodedBody",
    "FormBody",
    "FormFile",
    "JSONBody",
    "MultipartFormBody",
    "XMLBody",
]
