# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Human-readable request/response dumps for debug mode.

Dumps are diagnostics only: a failure while rendering one is logged and
swallowed so it never changes the outcome of a dispatch.
"""

from __future__ import annotations

import logging

import httpx

from .models import HttpRequest, HttpResponse

logger = logging.getLogger(__name__)


def _render_body(body: bytes | None, max_body: int) -> str:
    if not body:
        return ""
    shown = body if max_body <= 0 else body[:max_body]
    text = shown.decode("utf-8", errors="replace")
    if len(shown) < len(body):
        text += f"... ({len(body) - len(shown)} more bytes)"
    return text


def format_request(request: HttpRequest, *, include_body: bool = True, max_body: int = 0) -> str:
    url = httpx.URL(request.url)
    target = url.raw_path.decode("ascii")
    lines = [f"{request.method} {target} HTTP/1.1", f"Host: {url.netloc.decode('ascii')}"]
    lines.extend(f"{name}: {value}" for name, value in request.headers.multi_items())
    text = "\r\n".join(lines) + "\r\n\r\n"
    if include_body:
        text += _render_body(request.body, max_body)
    return text


def format_response(
    response: HttpResponse,
    body: bytes | None,
    *,
    include_body: bool = True,
    max_body: int = 0,
) -> str:
    version = response.http_version or "HTTP/1.1"
    lines = [f"{version} {response.status_code} {response.reason_phrase}".rstrip()]
    lines.extend(f"{name}: {value}" for name, value in response.headers.multi_items())
    text = "\r\n".join(lines) + "\r\n\r\n"
    if include_body:
        text += _render_body(body, max_body)
    return text


def dump_request(request: HttpRequest, *, include_body: bool = True, max_body: int = 0) -> bool:
    """Log a dump of ``request``; returns False when the dump could not be produced."""
    try:
        dump = format_request(request, include_body=include_body, max_body=max_body)
    except Exception as exc:  # noqa: BLE001
        logger.warning("[fetchkit-debug] dump request failed: %s", exc)
        return False
    logger.info("[fetchkit-debug] request\n%s", dump)
    return True


def dump_response(
    response: HttpResponse | None,
    body: bytes | None,
    *,
    include_body: bool = True,
    max_body: int = 0,
) -> bool:
    """Log a dump of ``response``; returns False when the dump could not be produced."""
    if response is None:
        logger.info("[fetchkit-debug] no response")
        return False
    try:
        dump = format_response(response, body, include_body=include_body, max_body=max_body)
    except Exception as exc:  # noqa: BLE001
        logger.warning("[fetchkit-debug] dump response failed: %s", exc)
        return False
    logger.info("[fetchkit-debug] response\n%s", dump)
    return True


__all__ = ["dump_request", "dump_response", "format_request", "format_response"]
