# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Ready-made interceptors."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from typing import Any

from ..utils.context import RequestContext
from .chain import Handler, Interceptor
from .headers import normalize_headers
from .models import FetchResult, HttpRequest

logger = logging.getLogger(__name__)


def _clip(body: bytes | None, limit: int) -> str:
    if not body:
        return ""
    if limit > 0 and len(body) > limit:
        return body[:limit].decode("utf-8", errors="replace") + "..."
    return body.decode("utf-8", errors="replace")


class LogInterceptor:
    """Logs one line per dispatch: request, latency, status, response body and error."""

    def __init__(
        self,
        *,
        exclude_headers: Iterable[str] = (),
        max_request_body: int = 0,
        max_response_body: int = 0,
        log: logging.Logger | None = None,
        level: int = logging.INFO,
    ):
        self.exclude_headers = {name.lower() for name in exclude_headers}
        self.max_request_body = max_request_body
        self.max_response_body = max_response_body
        self.log = log or logger
        self.level = level

    def __call__(self, context: RequestContext, request: HttpRequest, next_handler: Handler) -> FetchResult:
        headers = {
            name: value for name, value in request.headers.multi_items() if name.lower() not in self.exclude_headers
        }
        request_body = _clip(request.body, self.max_request_body)

        start = time.monotonic()
        result = next_handler(context, request)
        latency = time.monotonic() - start

        status = result.response.status_code if result.response is not None else 0
        self.log.log(
            self.level,
            "[fetchkit] method: %s, url: %s, header: %s, body: '%s', latency: %.3fs, status: %d, resp: '%s', err: %s",
            request.method,
            request.url,
            headers,
            request_body,
            latency,
            status,
            _clip(result.body, self.max_response_body),
            result.error,
        )
        return result


def header_interceptor(headers: Any) -> Interceptor:
    """Interceptor that sets ``headers`` on every outgoing request (auth tokens, trace ids)."""
    fixed = normalize_headers(headers)

    def intercept(context: RequestContext, request: HttpRequest, next_handler: Handler) -> FetchResult:
        return next_handler(context, request.with_headers(fixed))

    return intercept


__all__ = ["LogInterceptor", "header_interceptor"]
