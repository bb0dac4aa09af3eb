# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import logging
import time
from decimal import Decimal

import httpx
import pytest

from fetchkit.errors import ErrorCategory, InvalidURLError
from fetchkit.http import debug
from fetchkit.http.headers import header_value, merge_headers, normalize_headers
from fetchkit.http.models import HttpRequest, HttpResponse
from fetchkit.http.url import merge_query, resolve_reference
from fetchkit.http.xml_body import dict_to_xml, xml_to_dict
from fetchkit.utils.context import RequestContext, background, current_context, request_context
from fetchkit.utils.scalar import to_string, to_strings


@pytest.mark.parametrize(
    "value,expected",
    [
        ("ming", "ming"),
        (b"bytes", "bytes"),
        (True, "true"),
        (False, "false"),
        (10, "10"),
        (-3, "-3"),
        (10.0, "10"),
        (1.5, "1.5"),
        (0.1, "0.1"),
        (1e20, "100000000000000000000"),
        (float("inf"), "+Inf"),
        (Decimal("2.50"), "2.5"),
    ],
)
def test_to_string_canonical_forms(value, expected):
    assert to_string(value) == expected


def test_to_string_rejects_unsupported_types():
    with pytest.raises(TypeError):
        to_string(None)
    with pytest.raises(TypeError):
        to_string({"a": 1})
    assert to_strings([1, True, "x"]) == ["1", "true", "x"]
    assert to_strings(7) == ["7"]


@pytest.mark.parametrize(
    "base,ref,expected",
    [
        ("http://h/v1/api/", "user/profile", "http://h/v1/api/user/profile"),
        ("http://h/v1/api/", "/user/profile", "http://h/user/profile"),
        ("http://h/v1/api/", "../order", "http://h/v1/order"),
        ("http://h/v1/api", "user/profile", "http://h/v1/user/profile"),
        ("", "https://h/x?y=1", "https://h/x?y=1"),
        ("", "", ""),
    ],
)
def test_resolve_reference(base, ref, expected):
    assert resolve_reference(base, ref) == expected


@pytest.mark.parametrize("base,ref", [("", "relative"), ("ftp://h/", "file"), ("http://h:99999/", "x")])
def test_resolve_reference_rejects_bad_urls(base, ref):
    with pytest.raises(InvalidURLError):
        resolve_reference(base, ref)


def test_merge_query_keeps_existing_values():
    merged = merge_query("http://h/a?x=1", httpx.QueryParams([("x", "2"), ("y", "a b")]))
    params = httpx.URL(merged).params
    assert params.get_list("x") == ["1", "2"]
    assert params["y"] == "a b"
    assert merge_query("http://h/a", httpx.QueryParams()) == "http://h/a"


def test_header_helpers():
    headers = normalize_headers({"X-Multi": ["a", "b"], "X-Skip": None, "X-Num": 3})
    assert headers.get_list("x-multi") == ["a", "b"]
    assert "x-skip" not in headers
    assert headers["x-num"] == "3"

    merged = merge_headers(headers, [("x-multi", "c")])
    assert merged.get_list("x-multi") == ["c"]
    assert headers.get_list("x-multi") == ["a", "b"]

    assert header_value({"Content-Type": " text/html "}, "content-type") == "text/html"
    assert header_value(None, "content-type", "none") == "none"


def test_http_request_helpers_return_copies():
    request = HttpRequest(url="http://h/a?x=1")
    derived = request.with_header("X-A", "1").with_added_header("X-A", "2").with_body(b"{}", "application/json")

    assert request.body is None
    assert "x-a" not in request.headers
    assert derived.headers.get_list("x-a") == ["1", "2"]
    assert derived.content_type == "application/json"
    assert derived.without_header("X-A").headers.get("x-a") is None
    assert derived.params["x"] == "1"
    assert derived.with_url("http://h/b").url == "http://h/b"


def test_context_cancel_is_shared_by_children():
    parent, cancel = background().with_cancel()
    child = parent.with_value("k", "v").with_timeout(60)
    assert not child.done()

    cancel()
    assert parent.cancelled()
    assert child.done()
    assert child.error().category is ErrorCategory.CANCELLED
    assert background().error() is None


def test_context_deadlines():
    context = background().with_timeout(60)
    assert 0 < context.remaining() <= 60
    assert context.with_timeout(None) is context
    assert context.with_timeout(0) is context
    assert context.with_timeout(120).deadline == context.deadline
    assert context.with_timeout(1).deadline < context.deadline

    expired = RequestContext(deadline=time.monotonic() - 1)
    assert expired.remaining() == 0.0
    assert expired.error().category is ErrorCategory.TIMEOUT
    assert background().remaining() is None


def test_request_context_installs_and_resets_ambient_context():
    assert current_context() is background()
    with request_context(background().with_value("trace_id", "t1"), timeout=5) as context:
        assert current_context() is context
        assert context.value("trace_id") == "t1"
        assert context.remaining() <= 5
    assert current_context() is background()


def test_xml_dict_round_trip_shapes():
    document = xml_to_dict(b'<ns:r xmlns:ns="urn:x" a="1">text<i>1</i><i>2</i><e/></ns:r>')
    assert document == {"r": {"@a": "1", "i": ["1", "2"], "e": None, "#text": "text"}}

    rendered = dict_to_xml({"r": {"@a": 1, "#text": "hi", "flag": True, "empty": None}})
    assert b'<r a="1">hi<flag>true</flag><empty /></r>' in rendered

    with pytest.raises(ValueError):
        dict_to_xml({})


def test_debug_dumps_log_request_and_response(caplog):
    caplog.set_level(logging.INFO, logger="fetchkit.http.debug")
    request = HttpRequest(url="http://h/a?x=1", method="POST", body=b"0123456789").with_header("X-A", "1")
    response = HttpResponse(status_code=200, headers=httpx.Headers({"X-B": "2"}), reason_phrase="OK")

    assert debug.dump_request(request, max_body=4) is True
    assert debug.dump_response(response, b"body") is True
    assert debug.dump_response(None, b"") is False

    text = "\n".join(record.getMessage() for record in caplog.records)
    assert "POST /a?x=1 HTTP/1.1" in text
    assert "Host: h" in text
    assert "0123... (6 more bytes)" in text
    assert "HTTP/1.1 200 OK" in text
    assert "body" in text


def test_debug_dump_failures_are_logged_and_ignored(monkeypatch, caplog):
    caplog.set_level(logging.INFO, logger="fetchkit.http.debug")

    def boom(*args, **kwargs):
        raise ValueError("cannot render")

    monkeypatch.setattr(debug, "format_request", boom)
    monkeypatch.setattr(debug, "format_response", boom)

    assert debug.dump_request(HttpRequest(url="http://h/")) is False
    assert debug.dump_response(HttpResponse(status_code=200), b"") is False
    warnings = [record for record in caplog.records if record.levelno == logging.WARNING]
    assert len(warnings) == 2
    assert "cannot render" in warnings[0].getMessage()
