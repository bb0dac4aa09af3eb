# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP request/response data models shared by the chain, transports and binders."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, NamedTuple

import httpx

from ..config import FetchSettings
from ..errors import FetchError
from .headers import HEADER_CONTENT_TYPE, add_header, merge_headers, remove_header, set_header


@dataclass(frozen=True)
class HttpRequest:
    """
    Immutable request description handed to interceptors and transports.

    ``url`` is absolute and already carries the merged query string. Interceptors
    that need a different request derive one with the ``with_*`` helpers and pass
    the copy to their continuation.
    """

    url: str
    method: str = "GET"
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    body: bytes | None = None
    timeout: float | None = None
    allow_redirects: bool = True

    @property
    def params(self) -> httpx.QueryParams:
        return httpx.URL(self.url).params

    @property
    def content_type(self) -> str | None:
        return self.headers.get(HEADER_CONTENT_TYPE)

    def with_header(self, name: str, value: Any) -> HttpRequest:
        return replace(self, headers=set_header(self.headers, name, value))

    def with_added_header(self, name: str, value: Any) -> HttpRequest:
        return replace(self, headers=add_header(self.headers, name, value))

    def with_headers(self, headers: Any) -> HttpRequest:
        return replace(self, headers=merge_headers(self.headers, headers))

    def without_header(self, name: str) -> HttpRequest:
        return replace(self, headers=remove_header(self.headers, name))

    def with_body(self, body: bytes | None, content_type: str | None = None) -> HttpRequest:
        headers = self.headers
        if content_type:
            headers = set_header(headers, HEADER_CONTENT_TYPE, content_type)
        return replace(self, body=body, headers=headers)

    def with_url(self, url: str) -> HttpRequest:
        return replace(self, url=url)


@dataclass
class HttpResponse:
    """Response metadata; the drained body travels next to it in FetchResult."""

    status_code: int
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    url: str | None = None
    reason_phrase: str = ""
    http_version: str = ""
    elapsed: float | None = None
    encoding: str | None = None
    meta: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def content_type(self) -> str:
        return self.headers.get(HEADER_CONTENT_TYPE, "")

    @classmethod
    def from_httpx(cls, response: httpx.Response, **meta: Any) -> HttpResponse:
        """Copy the metadata of an httpx response; the body is not touched."""
        try:
            elapsed = response.elapsed.total_seconds()
        except RuntimeError:
            # only known once the stream is closed
            elapsed = None
        return cls(
            status_code=response.status_code,
            headers=httpx.Headers(response.headers.multi_items()),
            url=str(response.url),
            reason_phrase=response.reason_phrase,
            http_version=response.http_version,
            elapsed=elapsed,
            encoding=response.charset_encoding,
            meta=dict(meta),
        )


class FetchResult(NamedTuple):
    """The (response, body, error) triple returned by handlers and interceptors."""

    response: HttpResponse | None
    body: bytes = b""
    error: FetchError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.response is not None

    @classmethod
    def failure(cls, error: FetchError, response: HttpResponse | None = None, body: bytes = b"") -> FetchResult:
        return cls(response, body, error)


@dataclass
class RetryConfig:
    """Retry policy for the retry helper and interceptor."""

    max_attempts: int = 2
    interval: float = 1.0
    backoff_factor: float = 1.0

    @classmethod
    def from_settings(cls, settings: FetchSettings) -> RetryConfig:
        """Build a retry config from the shared FetchSettings."""
        return cls(
            max_attempts=max(1, settings.max_retries),
            interval=settings.retry_interval,
            backoff_factor=settings.backoff_factor,
        )
