# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""httpx-backed Transport implementation."""

from __future__ import annotations

import logging
import threading

import httpx

from ..config import FetchSettings, load_fetch_settings
from ..errors import FetchError, TransportError
from ..utils.context import RequestContext
from .client import Transport
from .headers import HEADER_USER_AGENT
from .models import FetchResult, HttpRequest, HttpResponse

logger = logging.getLogger(__name__)

# how often a caller blocked on a cancellable send re-checks its context
CANCEL_POLL_INTERVAL = 0.05


class HttpxTransport(Transport):
    """Synchronous httpx client wrapper that drains each response body exactly once."""

    def __init__(self, settings: FetchSettings | None = None, client: httpx.Client | None = None):
        self.settings = settings or load_fetch_settings()
        self._client = client or httpx.Client(
            follow_redirects=self.settings.allow_redirects,
            timeout=self.settings.timeout,
            verify=self.settings.verify_ssl,
        )

    def _effective_timeout(self, context: RequestContext, request: HttpRequest) -> float | None:
        timeout = request.timeout if request.timeout is not None else self.settings.timeout
        remaining = context.remaining()
        if remaining is not None:
            timeout = remaining if timeout is None else min(timeout, remaining)
        return timeout

    def send(self, context: RequestContext, request: HttpRequest) -> FetchResult:
        context_error = context.error()
        if context_error is not None:
            return FetchResult.failure(context_error)
        if not context.cancel_events:
            return self._send(context, request)
        return self._send_cancellable(context, request)

    def _send_cancellable(self, context: RequestContext, request: HttpRequest) -> FetchResult:
        """
        Run the blocking send on a worker thread and return as soon as the context is cancelled.

        An abandoned worker stops draining at the next body chunk and releases its connection.
        """
        finished = threading.Event()
        outcome: list[FetchResult] = []

        def run() -> None:
            try:
                outcome.append(self._send(context, request))
            finally:
                finished.set()

        worker = threading.Thread(target=run, name="fetchkit-send", daemon=True)
        worker.start()
        while not finished.wait(CANCEL_POLL_INTERVAL):
            context_error = context.error()
            if context_error is not None:
                logger.debug("%s %s abandoned: %s", request.method, request.url, context_error)
                return FetchResult.failure(context_error)
        if not outcome:
            raise RuntimeError(f"send of {request.method} {request.url} ended without a result")
        return outcome[0]

    def _send(self, context: RequestContext, request: HttpRequest) -> FetchResult:
        headers = httpx.Headers(request.headers.multi_items())
        if HEADER_USER_AGENT not in headers:
            headers[HEADER_USER_AGENT] = self.settings.user_agent

        max_body_bytes = self.settings.max_body_bytes
        if max_body_bytes <= 0:
            max_body_bytes = 16 * 1024 * 1024

        interrupted: FetchError | None = None
        try:
            with self._client.stream(
                request.method,
                request.url,
                headers=headers,
                content=request.body,
                timeout=self._effective_timeout(context, request),
                follow_redirects=request.allow_redirects,
            ) as resp:
                content = bytearray()
                truncated = False
                for chunk in resp.iter_bytes():
                    interrupted = context.error()
                    if interrupted is not None:
                        break
                    if not chunk:
                        continue
                    remaining = max_body_bytes - len(content)
                    if remaining <= 0:
                        truncated = True
                        break
                    if len(chunk) > remaining:
                        content.extend(chunk[:remaining])
                        truncated = True
                        break
                    content.extend(chunk)
        except Exception as exc:  # noqa: BLE001
            error = TransportError.from_exception(exc)
            logger.debug("%s %s failed: %s (%s)", request.method, request.url, error, error.category.value)
            return FetchResult.failure(error)

        response = HttpResponse.from_httpx(
            resp,
            body_truncated=truncated,
            body_bytes_read=len(content),
            body_bytes_limit=max_body_bytes,
        )
        return FetchResult(response, bytes(content), interrupted)

    def close(self) -> None:
        self._client.close()
