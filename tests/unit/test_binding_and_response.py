# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from dataclasses import dataclass, field

import httpx
import pytest

from fetchkit import Fetch
from fetchkit.config import FetchSettings
from fetchkit.errors import (
    DecodingError,
    NilResponseError,
    TransportError,
    UnknownBindingTypeError,
)
from fetchkit.http.adapters import StubTransport, stub_response
from fetchkit.http.binding import JSONBinder, XMLBinder, default_binders
from fetchkit.http.models import FetchResult, HttpResponse
from fetchkit.http.response import Response


@dataclass
class Team:
    name: str = ""


@dataclass
class Member:
    id: int = 0
    name: str = ""
    team: Team | None = None
    friends: list[Team] = field(default_factory=list)


@dataclass(frozen=True)
class FrozenMember:
    id: int = 0


class Plain:
    pass


class CsvBinder:
    name = "csv"

    def bind(self, body, target):
        target[:] = body.decode().strip().split(",")


def json_response(body: bytes) -> Response:
    return Response(stub_response(200, body, {"Content-Type": "application/json"}))


def test_bind_json_into_a_mapping():
    target = {"keep": True}
    result = json_response(b'{"code":0,"msg":"ok"}').bind("json", target)
    assert result is target
    assert target == {"keep": True, "code": 0, "msg": "ok"}


def test_bind_json_into_a_list_replaces_contents():
    target = ["stale"]
    json_response(b"[1, 2, 3]").bind_json(target)
    assert target == [1, 2, 3]


def test_bind_json_into_dataclass_builds_nested_values():
    member = Member()
    json_response(
        b'{"id": 7, "name": "ming", "team": {"name": "core"}, "friends": [{"name": "a"}], "extra": 1}'
    ).bind_json(member)

    assert member.id == 7
    assert member.name == "ming"
    assert member.team == Team("core")
    assert member.friends == [Team("a")]
    assert not hasattr(member, "extra")


def test_bind_json_into_plain_object_sets_attributes():
    target = Plain()
    json_response(b'{"a": 1, "b": "x"}').bind_json(target)
    assert target.a == 1
    assert target.b == "x"


@pytest.mark.parametrize("target", [None, 1, "text", (1, 2), FrozenMember()])
def test_bind_into_immutable_target_is_a_type_error(target):
    with pytest.raises(TypeError):
        json_response(b'{"id": 1}').bind_json(target)


def test_bind_decode_failures():
    with pytest.raises(DecodingError):
        json_response(b"not json").bind_json({})
    with pytest.raises(DecodingError):
        json_response(b"[1, 2]").bind_json({})
    with pytest.raises(DecodingError):
        Response(stub_response(200, b"<unclosed")).bind_xml({})


def test_bind_xml_uses_the_root_element_content():
    target = {}
    Response(stub_response(200, b'<user id="3"><name>ming</name><tag>a</tag><tag>b</tag></user>')).bind_xml(target)
    assert target == {"@id": "3", "name": "ming", "tag": ["a", "b"]}

    forced = {}
    XMLBinder(force_list={"tag"}).bind(b"<user><tag>a</tag></user>", forced)
    assert forced == {"tag": ["a"]}


def test_bind_without_response_is_nil_response():
    with pytest.raises(NilResponseError):
        Response(FetchResult(None, b'{"code":0}', None)).bind_json({})


def test_bind_with_unknown_name():
    with pytest.raises(UnknownBindingTypeError):
        json_response(b"{}").bind("csv", {})


def test_held_error_is_raised_before_binding():
    response = Response(FetchResult.failure(TransportError("refused")))
    with pytest.raises(TransportError):
        response.bind("csv", {})
    with pytest.raises(TransportError):
        response.raise_for_error()
    assert response.ok is False
    assert response.status_code is None
    assert len(response.headers) == 0


def test_response_accessors():
    response = Response(stub_response(201, "héllo".encode(), {"Content-Type": "text/plain; charset=utf-8"}))
    assert response.ok is True
    assert response.status_code == 201
    assert response.headers["content-type"].startswith("text/plain")
    assert response.bytes() == "héllo".encode()
    assert response.body == "héllo".encode()
    assert response.text() == "héllo"
    assert response.text("latin-1") == "héllo".encode().decode("latin-1")
    assert json_response(b'{"a": [1]}').json() == {"a": [1]}
    with pytest.raises(DecodingError):
        json_response(b"{").json()


def test_text_falls_back_to_utf8_for_unknown_charsets():
    headers = httpx.Headers({"Content-Type": "text/plain; charset=bogus"})
    response = Response(FetchResult(HttpResponse(200, headers=headers, encoding="bogus"), "héllo".encode(), None))
    assert response.text() == "héllo"
    assert response.text("no-such-codec") == "héllo"
    assert response.text("ascii") == "h\ufffd\ufffdllo"


def test_non_2xx_response_is_not_ok_but_binds():
    response = Response(stub_response(404, b'{"error":"missing"}'))
    assert response.ok is False
    assert response.error is None
    assert response.bind_json({}) == {"error": "missing"}


def test_default_binders_are_fresh_registries():
    first = default_binders()
    first["csv"] = CsvBinder()
    assert set(default_binders()) == {"json", "xml"}
    assert isinstance(first["json"], JSONBinder)


def test_custom_binder_registered_on_fetch():
    transport = StubTransport(default=stub_response(200, b"a,b,c"))
    fetch = Fetch("http://h/", transport=transport, settings=FetchSettings()).with_binder("csv", CsvBinder())
    target = []
    fetch.get("items").bind("csv", target)
    assert target == ["a", "b", "c"]

    with pytest.raises(TypeError):
        fetch.with_binder("broken", object())
    with pytest.raises(ValueError):
        fetch.with_binder("", CsvBinder())
