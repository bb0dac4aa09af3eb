# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import math
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from decimal import Decimal

import pytest

from fetchkit.errors import EncodingError
from fetchkit.http.body import FormBody, FormFile, JSONBody, MultipartFormBody, XMLBody
from fetchkit.http.mime import detect_content_type

PNG_HEADER = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


@dataclass
class User:
    id: int
    name: str


def test_json_body_serializes_values_and_passes_text_through():
    encoded = JSONBody({"id": 1, "price": Decimal("9.5"), "tags": ("a",)}).encode()
    assert encoded.content == b'{"id":1,"price":9.5,"tags":["a"]}'
    assert encoded.content_type == "application/json"

    assert JSONBody(User(1, "ming")).encode().content == b'{"id":1,"name":"ming"}'
    assert JSONBody('{"raw":true}').encode().content == b'{"raw":true}'
    assert JSONBody(b"[1]").encode().content == b"[1]"


def test_json_body_failure_is_an_encoding_error():
    with pytest.raises(EncodingError):
        JSONBody({"bad": object()}).encode()
    with pytest.raises(EncodingError):
        JSONBody({1j: 1}).encode()


@pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf, Decimal("NaN"), Decimal("Infinity")])
def test_json_body_rejects_non_finite_numbers(value):
    with pytest.raises(EncodingError):
        JSONBody({"x": value}).encode()


def test_json_body_keeps_every_decimal_digit():
    assert JSONBody({"p": Decimal("0.1")}).encode().content == b'{"p":0.1}'
    assert JSONBody({"p": Decimal("1.00000000000000000001")}).encode().content == b'{"p":"1.00000000000000000001"}'
    assert JSONBody({"p": Decimal("123456789012345678901234567890")}).encode().content == (
        b'{"p":"123456789012345678901234567890"}'
    )


def test_xml_body_from_dict_element_and_dataclass():
    encoded = XMLBody({"user": {"@id": 7, "name": "ming", "tag": ["a", "b"]}}).encode()
    assert encoded.content_type == "application/xml"
    assert b'<user id="7"><name>ming</name><tag>a</tag><tag>b</tag></user>' in encoded.content

    element = ET.Element("ping")
    element.text = "1"
    assert b"<ping>1</ping>" in XMLBody(element).encode().content

    assert b"<User><id>1</id><name>ming</name></User>" in XMLBody(User(1, "ming")).encode().content
    assert XMLBody("<raw/>").encode().content == b"<raw/>"


def test_xml_body_rejects_unsupported_payloads():
    with pytest.raises(EncodingError):
        XMLBody({"a": 1, "b": 2}).encode()
    with pytest.raises(EncodingError):
        XMLBody(42).encode()


def test_form_body_encodes_scalars_and_lists():
    form = FormBody({"q": "a&b c", "n": [1, 2], "ok": True, "ratio": 0.5})
    encoded = form.encode()
    assert encoded.content == b"q=a%26b+c&n=1&n=2&ok=true&ratio=0.5"
    assert encoded.content_type == "application/x-www-form-urlencoded"


def test_form_body_helpers_return_new_forms():
    form = FormBody({"a": 1})
    extended = form.add("b", 2).add("b", 3).set("a", "x")
    assert form.encode().content == b"a=1"
    assert extended.encode().content == b"b=2&b=3&a=x"
    assert extended.remove("b").encode().content == b"a=x"

    with pytest.raises(EncodingError):
        FormBody({"a": object()}).encode()


def test_multipart_body_renders_fields_and_files():
    body = MultipartFormBody(
        {"name": "ming"},
        FormFile("avatar", "a.png", PNG_HEADER),
        FormFile("notes", "notes.bin", b"plain text notes", content_type="text/markdown"),
        boundary=b"testboundary",
    )
    encoded = body.encode()

    assert encoded.content_type == "multipart/form-data; boundary=testboundary"
    content = encoded.content
    assert content.startswith(b"--testboundary\r\n")
    assert content.endswith(b"--testboundary--\r\n")
    assert b'Content-Disposition: form-data; name="name"\r\n\r\nming\r\n' in content
    assert b'name="avatar"; filename="a.png"\r\nContent-Type: image/png\r\n\r\n' in content
    assert b'name="notes"; filename="notes.bin"\r\nContent-Type: text/markdown\r\n\r\n' in content


def test_multipart_boundary_is_generated_when_missing():
    encoded = MultipartFormBody({"a": "1"}).encode()
    boundary = encoded.content_type.split("boundary=", 1)[1]
    assert boundary
    assert encoded.content.startswith(f"--{boundary}\r\n".encode())


def test_multipart_without_parts_is_an_encoding_error():
    with pytest.raises(EncodingError):
        MultipartFormBody().encode()


def test_form_file_content_type_resolution(tmp_path):
    assert FormFile("f", "x.bin", b"hello world").resolved_content_type() == "text/plain; charset=utf-8"
    assert FormFile("f", "x.pdf", b"\x00\x01\x02").resolved_content_type() == "application/pdf"
    assert FormFile("f", "x.unknownext", b"\x00\x01\x02").resolved_content_type() == "application/octet-stream"

    path = tmp_path / "logo.png"
    path.write_bytes(PNG_HEADER)
    loaded = FormFile.from_path("logo", path)
    assert loaded.filename == "logo.png"
    assert loaded.content == PNG_HEADER
    assert loaded.resolved_content_type() == "image/png"


@pytest.mark.parametrize(
    "data,expected",
    [
        (b"  <html><body>hi</body></html>", "text/html; charset=utf-8"),
        (b"<?xml version='1.0'?><a/>", "text/xml; charset=utf-8"),
        (b"%PDF-1.7", "application/pdf"),
        (b"GIF89a....", "image/gif"),
        (b"\xff\xd8\xff\xe0", "image/jpeg"),
        (b"PK\x03\x04rest", "application/zip"),
        (b"RIFF\x00\x00\x00\x00WEBPVP8 ", "image/webp"),
        (b"just some text", "text/plain; charset=utf-8"),
        (b"\x00\x01\x02\x03", "application/octet-stream"),
    ],
)
def test_detect_content_type(data, expected):
    assert detect_content_type(data) == expected
