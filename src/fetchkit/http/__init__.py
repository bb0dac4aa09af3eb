# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP layer exports."""

from .adapters import StubTransport, stub_response
from .binding import Binder, JSONBinder, XMLBinder, default_binders
from .body import Body, EncodedBody, FormBody, FormFile, JSONBody, MultipartFormBody, XMLBody
from .chain import Handler, Interceptor, NamedInterceptor, chain_interceptors, register_interceptors
from .client import Transport, create_default_transport
from .headers import header_value, normalize_headers
from .httpx_client import HttpxTransport
from .interceptors import LogInterceptor, header_interceptor
from .models import FetchResult, HttpRequest, HttpResponse, RetryConfig
from .response import Response
from .retry import build_default_retry_config, retry_interceptor

__all__ = [
    "Binder",
    "Body",
    "EncodedBody",
    "FetchResult",
    "FormBody",
    "FormFile",
    "Handler",
    "HttpRequest",
    "HttpResponse",
    "HttpxTransport",
    "Interceptor",
    "JSONBinder",
    "JSONBody",
    "LogInterceptor",
    "MultipartFormBody",
    "NamedInterceptor",
    "Response",
    "RetryConfig",
    "StubTransport",
    "Transport",
    "XMLBinder",
    "XMLBody",
    "build_default_retry_config",
    "chain_interceptors",
    "create_default_transport",
    "default_binders",
    "header_interceptor",
    "header_value",
    "normalize_headers",
    "register_interceptors",
    "retry_interceptor",
    "stub_response",
]
