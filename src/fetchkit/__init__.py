# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
fetchkit package entrypoint.

A fluent HTTP request builder. Requests are assembled on a ``RequestBuilder``,
dispatched through a chain of named interceptors wrapping an injectable
transport (httpx by default), and the drained body is bound into caller-owned
values by named binders.
"""

from .config import FetchSettings, load_fetch_settings
from .errors import (
    DecodingError,
    EncodingError,
    ErrorCategory,
    FetchError,
    InvalidRequestError,
    InvalidURLError,
    NilResponseError,
    TransportError,
    UnknownBindingTypeError,
)
from .fetch import Fetch, RequestBuilder, create_default_fetch
from .http import (
    FetchResult,
    FormFile,
    HttpRequest,
    HttpResponse,
    HttpxTransport,
    LogInterceptor,
    NamedInterceptor,
    Response,
    RetryConfig,
    StubTransport,
    chain_interceptors,
    header_interceptor,
    retry_interceptor,
)
from .log import setup_logging
from .utils.context import RequestContext, background, request_context
from .version import __version__

__all__ = [
    "DecodingError",
    "EncodingError",
    "ErrorCategory",
    "Fetch",
    "FetchError",
    "FetchResult",
    "FetchSettings",
    "FormFile",
    "HttpRequest",
    "HttpResponse",
    "HttpxTransport",
    "InvalidRequestError",
    "InvalidURLError",
    "LogInterceptor",
    "NamedInterceptor",
    "NilResponseError",
    "RequestBuilder",
    "RequestContext",
    "Response",
    "RetryConfig",
    "StubTransport",
    "TransportError",
    "UnknownBindingTypeError",
    "__version__",
    "background",
    "chain_interceptors",
    "create_default_fetch",
    "header_interceptor",
    "load_fetch_settings",
    "request_context",
    "retry_interceptor",
    "setup_logging",
]
