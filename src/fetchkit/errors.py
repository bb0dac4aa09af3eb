# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

from enum import Enum


class ErrorCategory(str, Enum):
    TIMEOUT = "TIMEOUT"
    CANCELLED = "CANCELLED"
    SSL_ERROR = "SSL_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DNS_ERROR = "DNS_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class FetchError(Exception):
    """Base class for every error a dispatch can produce."""

    kind = "FetchError"


class InvalidRequestError(FetchError):
    """Missing method, empty URL or a body on a method that does not carry one."""

    kind = "InvalidRequest"


class InvalidURLError(FetchError):
    """The base URL and the request path could not be resolved into a URL."""

    kind = "InvalidURL"


class EncodingError(FetchError):
    """A request body could not be serialized."""

    kind = "EncodingError"


class TransportError(FetchError):
    """Network-level failure of the terminal call; the cause is kept on ``__cause__``."""

    kind = "TransportError"

    def __init__(self, message: str, *, category: ErrorCategory = ErrorCategory.UNKNOWN_ERROR):
        super().__init__(message)
        self.category = category

    @classmethod
    def from_exception(cls, exc: BaseException) -> TransportError:
        error = cls(str(exc) or type(exc).__name__, category=categorize_exception(exc))
        error.__cause__ = exc
        return error


class NilResponseError(FetchError):
    """A bind was attempted on a result that carries no response object."""

    kind = "NilResponse"


class UnknownBindingTypeError(FetchError):
    """A bind was requested under a name missing from the binder registry."""

    kind = "UnknownBindingType"


class DecodingError(FetchError):
    """A binder failed to decode the response body."""

    kind = "DecodingError"


def categorize_exception(exc: BaseException) -> ErrorCategory:
    """
    Map Python/httpx exceptions to ErrorCategory.
    """
    import socket
    import ssl as ssl_module

    import httpx

    if isinstance(exc, TransportError):
        return exc.category

    if isinstance(exc, (httpx.TimeoutException, TimeoutError)):
        return ErrorCategory.TIMEOUT

    if isinstance(exc, (ssl_module.SSLError, ssl_module.CertificateError)):
        return ErrorCategory.SSL_ERROR

    if isinstance(exc, (socket.gaierror, socket.herror)):
        return ErrorCategory.DNS_ERROR

    if isinstance(
        exc, (httpx.ConnectError, httpx.RemoteProtocolError, httpx.NetworkError, httpx.ProxyError)
    ):
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, (ConnectionError, ConnectionRefusedError, ConnectionResetError)):
        return ErrorCategory.CONNECTION_ERROR

    return ErrorCategory.UNKNOWN_ERROR


def error_category_to_reason(category: ErrorCategory | None) -> str:
    """User-facing reason string."""
    mapping = {
        ErrorCategory.TIMEOUT: "Request deadline exceeded",
        ErrorCategory.CANCELLED: "Request cancelled by caller",
        ErrorCategory.SSL_ERROR: "TLS/certificate issue",
        ErrorCategory.CONNECTION_ERROR: "Network connectivity issue",
        ErrorCategory.DNS_ERROR: "DNS resolution failure",
        ErrorCategory.UNKNOWN_ERROR: "Network error during request",
        None: "",
    }
    return mapping.get(category, "Request failed due to network error")


__all__ = [
    "DecodingError",
    "EncodingError",
    "ErrorCategory",
    "FetchError",
    "InvalidRequestError",
    "InvalidURLError",
    "NilResponseError",
    "TransportError",
    "UnknownBindingTypeError",
    "categorize_exception",
    "error_category_to_reason",
]
