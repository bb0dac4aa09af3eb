# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""In-process transports for tests and offline use."""

from __future__ import annotations

from collections.abc import Callable

import httpx

from ..errors import ErrorCategory, TransportError
from ..utils.context import RequestContext
from .client import Transport
from .models import FetchResult, HttpRequest, HttpResponse

StubReply = FetchResult | Callable[[RequestContext, HttpRequest], FetchResult]


def stub_response(
    status_code: int = 200,
    body: bytes | str = b"",
    headers: dict[str, str] | None = None,
    *,
    url: str | None = None,
) -> FetchResult:
    """Build a successful FetchResult for programming a StubTransport."""
    content = body.encode("utf-8") if isinstance(body, str) else bytes(body)
    response = HttpResponse(status_code=status_code, headers=httpx.Headers(headers or {}), url=url)
    return FetchResult(response, content, None)


class StubTransport(Transport):
    """Deterministic, programmable Transport for tests.

    Replies are looked up by the request URL without its query string. A reply is
    either a FetchResult or a callable receiving ``(context, request)``.
    """

    def __init__(self, replies: dict[str, StubReply] | None = None, default: StubReply | None = None):
        self._replies: dict[str, StubReply] = dict(replies or {})
        self._default = default
        self.requests: list[HttpRequest] = []
        self.closed = False

    def add(self, url: str, reply: StubReply) -> None:
        self._replies[url] = reply

    def send(self, context: RequestContext, request: HttpRequest) -> FetchResult:
        self.requests.append(request)
        context_error = context.error()
        if context_error is not None:
            return FetchResult.failure(context_error)

        key = request.url.split("?", 1)[0]
        reply = self._replies.get(key, self._replies.get(request.url, self._default))
        if reply is None:
            return FetchResult.failure(
                TransportError(f"no stubbed response configured for {key}", category=ErrorCategory.CONNECTION_ERROR)
            )
        if callable(reply) and not isinstance(reply, FetchResult):
            return reply(context, request)
        return reply

    def close(self) -> None:
        self.closed = True


__all__ = ["StubTransport", "stub_response"]
