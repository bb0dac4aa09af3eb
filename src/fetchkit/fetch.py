# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Fluent request builder.

``Fetch`` is an immutable client configuration: base URL, shared headers,
interceptors, binders, timeout, debug flag and transport. Every ``with_*``
call returns a new ``Fetch`` (and a new composed chain), so a configured
client can be shared between threads. ``Fetch.get/post/...`` start a
``RequestBuilder`` that owns the state of exactly one call and dispatches it
through the chain.

    api = Fetch("https://api.example.com/v1/", interceptors=[NamedInterceptor("log", LogInterceptor())])
    user = api.get("users/42").query("expand", "teams").bind_json({})
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable, Mapping
from typing import Any

import httpx

from .config import FetchSettings, load_fetch_settings
from .errors import FetchError, InvalidRequestError, InvalidURLError
from .http.binding import Binder, default_binders
from .http.body import Body, FormBody, FormFile, JSONBody, MultipartFormBody, XMLBody
from .http.chain import (
    NamedInterceptor,
    chain_interceptors,
    interceptor_names,
    register_interceptors,
    remove_interceptors,
)
from .http.client import Transport, create_default_transport
from .http.debug import dump_request, dump_response
from .http.headers import HEADER_CONTENT_TYPE, add_header, merge_headers, normalize_headers, set_header
from .http.models import FetchResult, HttpRequest, HttpResponse
from .http.response import Response
from .http.url import merge_query, resolve_reference
from .utils.context import RequestContext, current_context
from .utils.scalar import to_strings

logger = logging.getLogger(__name__)

METHODS_WITH_BODY = frozenset({"POST", "PUT", "PATCH"})


class Fetch:
    """Immutable HTTP client configuration; see the module docstring."""

    def __init__(
        self,
        base_url: str = "",
        *,
        transport: Transport | None = None,
        interceptors: Iterable[NamedInterceptor] = (),
        binders: Mapping[str, Binder] | None = None,
        timeout: float | None = None,
        debug: bool | None = None,
        headers: Any = None,
        settings: FetchSettings | None = None,
    ):
        self.settings = settings or load_fetch_settings()
        self.base_url = base_url or ""
        self.transport = transport or create_default_transport(self.settings)
        self.interceptors = register_interceptors((), *interceptors)
        self.binders: dict[str, Binder] = default_binders()
        for name, binder in (binders or {}).items():
            self.binders[name] = _check_binder(name, binder)
        self.timeout = timeout
        self.debug = self.settings.debug if debug is None else bool(debug)
        self.headers = normalize_headers(headers)
        self._chain = chain_interceptors(*self.interceptors)

    def __repr__(self) -> str:
        return f"<Fetch base_url={self.base_url!r} interceptors={self.interceptor_names}>"

    def __enter__(self) -> Fetch:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Close the transport; snapshots derived from this one share it."""
        self.transport.close()

    @property
    def interceptor_names(self) -> list[str]:
        return interceptor_names(self.interceptors)

    def _evolve(self, **changes: Any) -> Fetch:
        clone = copy.copy(self)
        clone.binders = dict(self.binders)
        for name, value in changes.items():
            setattr(clone, name, value)
        clone._chain = chain_interceptors(*clone.interceptors)
        return clone

    # configuration (copy-on-write)

    def with_interceptors(self, *interceptors: NamedInterceptor) -> Fetch:
        """Register interceptors; a name already registered keeps its position and gets the new handler."""
        return self._evolve(interceptors=register_interceptors(self.interceptors, *interceptors))

    def without_interceptors(self, *names: str) -> Fetch:
        return self._evolve(interceptors=remove_interceptors(self.interceptors, *names))

    def with_binder(self, name: str, binder: Binder) -> Fetch:
        return self.with_binders({name: binder})

    def with_binders(self, binders: Mapping[str, Binder]) -> Fetch:
        clone = self._evolve()
        for name, binder in binders.items():
            clone.binders[name] = _check_binder(name, binder)
        return clone

    def with_timeout(self, timeout: float | None) -> Fetch:
        return self._evolve(timeout=timeout)

    def with_debug(self, debug: bool = True) -> Fetch:
        return self._evolve(debug=bool(debug))

    def with_transport(self, transport: Transport) -> Fetch:
        return self._evolve(transport=transport)

    def with_base_url(self, base_url: str) -> Fetch:
        return self._evolve(base_url=base_url or "")

    def with_headers(self, headers: Any) -> Fetch:
        return self._evolve(headers=merge_headers(self.headers, headers))

    # request entry points

    def request(self, method: str, path: str, context: RequestContext | None = None) -> RequestBuilder:
        return RequestBuilder(self, method, path, context)

    def get(self, path: str, context: RequestContext | None = None) -> RequestBuilder:
        return self.request("GET", path, context)

    def post(self, path: str, context: RequestContext | None = None) -> RequestBuilder:
        return self.request("POST", path, context)

    def put(self, path: str, context: RequestContext | None = None) -> RequestBuilder:
        return self.request("PUT", path, context)

    def patch(self, path: str, context: RequestContext | None = None) -> RequestBuilder:
        return self.request("PATCH", path, context)

    def delete(self, path: str, context: RequestContext | None = None) -> RequestBuilder:
        return self.request("DELETE", path, context)

    def head(self, path: str, context: RequestContext | None = None) -> RequestBuilder:
        return self.request("HEAD", path, context)

    def options(self, path: str, context: RequestContext | None = None) -> RequestBuilder:
        return self.request("OPTIONS", path, context)

    def dispatch(self, context: RequestContext, request: HttpRequest) -> FetchResult:
        """Run an already built request through the interceptor chain and the transport."""
        return self._chain(context, request, self._send)

    def _send(self, context: RequestContext, request: HttpRequest) -> FetchResult:
        if not self.debug:
            return self.transport.send(context, request)
        max_body = self.settings.debug_max_body
        dump_request(request, max_body=max_body)
        result = self.transport.send(context, request)
        dump_response(result.response, result.body, max_body=max_body)
        return result


def _check_binder(name: str, binder: Binder) -> Binder:
    if not isinstance(name, str) or not name.strip():
        raise ValueError("binder name must be a non-empty string")
    if not callable(getattr(binder, "bind", None)):
        raise TypeError(f"binder {name!r} has no bind method")
    return binder


class RequestBuilder:
    """Per-call state of one request. Not thread-safe; create one per call."""

    def __init__(self, fetch: Fetch, method: str, path: str, context: RequestContext | None = None):
        self._fetch = fetch
        self._method = (method or "").strip().upper()
        self._path = path
        self._url = ""
        self._url_error: InvalidURLError | None = None
        try:
            self._url = resolve_reference(fetch.base_url, path)
        except InvalidURLError as exc:
            self._url_error = exc
        self._params = httpx.QueryParams()
        self._headers = httpx.Headers(fetch.headers.multi_items())
        self._body: Body | None = None
        self._timeout: float | None = None
        self._allow_redirects = fetch.settings.allow_redirects
        self._context: RequestContext | None = None
        if context is not None:
            self.context(context)

    def __repr__(self) -> str:
        return f"<RequestBuilder {self._method} {self._url or self._path!r}>"

    # query

    def add_query(self, key: str, value: Any) -> RequestBuilder:
        for item in to_strings(value):
            self._params = self._params.add(key, item)
        return self

    def set_query(self, key: str, value: Any) -> RequestBuilder:
        self._params = self._params.remove(key)
        return self.add_query(key, value)

    def query(self, *args: Any) -> RequestBuilder:
        """
        Add query parameters from alternating key/value pairs and mappings.

        ``query("id", 10, {"name": "ming"})`` adds ``id=10`` and ``name=ming``.
        """
        pending = list(args)
        while pending:
            item = pending.pop(0)
            if isinstance(item, Mapping):
                for key, value in item.items():
                    self.add_query(str(key), value)
                continue
            if not isinstance(item, str):
                raise TypeError(f"query key must be a string or a mapping, got {type(item).__name__}")
            if not pending:
                raise ValueError(f"query key {item!r} has no value")
            self.add_query(item, pending.pop(0))
        return self

    # headers

    def add_header(self, key: str, value: Any) -> RequestBuilder:
        self._headers = add_header(self._headers, key, value)
        return self

    def set_header(self, key: str, value: Any) -> RequestBuilder:
        self._headers = set_header(self._headers, key, value)
        return self

    def headers(self, headers: Any) -> RequestBuilder:
        self._headers = merge_headers(self._headers, headers)
        return self

    # body

    def body(self, body: Body | None) -> RequestBuilder:
        if body is not None:
            self._body = body
        return self

    def json(self, payload: Any) -> RequestBuilder:
        return self.body(JSONBody(payload))

    def xml(self, payload: Any) -> RequestBuilder:
        return self.body(XMLBody(payload))

    def form(self, values: Mapping[str, Any]) -> RequestBuilder:
        return self.body(FormBody(values))

    def multipart_form(self, values: Mapping[str, Any] | None = None, *files: FormFile) -> RequestBuilder:
        return self.body(MultipartFormBody(values, *files))

    # per-call settings

    def timeout(self, seconds: float | None) -> RequestBuilder:
        self._timeout = seconds
        return self

    def context(self, context: RequestContext) -> RequestBuilder:
        if not isinstance(context, RequestContext):
            raise TypeError(f"context must be a RequestContext, got {type(context).__name__}")
        self._context = context
        return self

    def allow_redirects(self, allow: bool = True) -> RequestBuilder:
        self._allow_redirects = bool(allow)
        return self

    # dispatch

    def build(self) -> tuple[RequestContext, HttpRequest]:
        """Validate the accumulated state and produce the context and request to dispatch."""
        if self._url_error is not None:
            raise self._url_error
        if not self._method:
            raise InvalidRequestError("request method is empty")
        if not self._url:
            raise InvalidRequestError("request URL is empty")

        headers = self._headers
        content: bytes | None = None
        if self._body is not None:
            if self._method not in METHODS_WITH_BODY:
                raise InvalidRequestError(f"{self._method} request cannot carry a body")
            encoded = self._body.encode()
            content = encoded.content
            if encoded.content_type:
                headers = set_header(headers, HEADER_CONTENT_TYPE, encoded.content_type)

        timeout = self._timeout if self._timeout is not None else self._fetch.timeout
        context = self._context if self._context is not None else current_context()
        request = HttpRequest(
            url=merge_query(self._url, self._params),
            method=self._method,
            headers=headers,
            body=content,
            timeout=timeout,
            allow_redirects=self._allow_redirects,
        )
        return context.with_timeout(timeout), request

    def do(self) -> Response:
        """Dispatch the request; failures are carried by the returned Response."""
        try:
            context, request = self.build()
        except FetchError as exc:
            logger.debug("%s %s rejected before dispatch: %s", self._method, self._url or self._path, exc)
            return Response(FetchResult.failure(exc), self._fetch.binders)
        return Response(self._fetch.dispatch(context, request), self._fetch.binders)

    def bind(self, name: str, target: Any) -> Any:
        return self.do().bind(name, target)

    def bind_json(self, target: Any) -> Any:
        return self.do().bind_json(target)

    def bind_xml(self, target: Any) -> Any:
        return self.do().bind_xml(target)

    def bytes(self) -> bytes:
        return self.do().bytes()

    def text(self, encoding: str | None = None) -> str:
        return self.do().text(encoding)

    def resp(self) -> HttpResponse | None:
        """Dispatch and return the response metadata, raising the held error."""
        return self.do().raise_for_error().response


def create_default_fetch(base_url: str = "", settings: FetchSettings | None = None, **options: Any) -> Fetch:
    """Build a Fetch with the httpx transport and environment-backed settings."""
    return Fetch(base_url, settings=settings or load_fetch_settings(), **options)


__all__ = ["METHODS_WITH_BODY", "Fetch", "RequestBuilder", "create_default_fetch"]
