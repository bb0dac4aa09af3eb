# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Header multimap utilities.

HTTP header field names are case-insensitive (RFC 9110) and a field may repeat.
Requests carry ``httpx.Headers``; the helpers below never mutate their input and
always return a fresh ``httpx.Headers`` so a dispatched request is left untouched.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

import httpx

from ..utils.scalar import to_strings

HEADER_CONTENT_TYPE = "Content-Type"
HEADER_USER_AGENT = "User-Agent"


def _coerce_header_items(headers: Any) -> list[tuple[str, str]]:
    """
    Best-effort coercion of "dict-like" header containers into (name, value) pairs.

    Accepts ``httpx.Headers``, plain mappings (a list/tuple value repeats the
    field) and iterables of pairs.
    """
    if not headers:
        return []
    if isinstance(headers, httpx.Headers):
        return list(headers.multi_items())
    if isinstance(headers, Mapping):
        pairs = headers.items()
    elif isinstance(headers, Iterable):
        pairs = headers
    else:
        raise TypeError(f"unsupported header container: {type(headers).__name__}")

    items: list[tuple[str, str]] = []
    for key, value in pairs:
        if key is None:
            continue
        name = str(key).strip()
        if not name:
            continue
        if value is None:
            continue
        items.extend((name, item) for item in to_strings(value))
    return items


def normalize_headers(headers: Any) -> httpx.Headers:
    """Return a new ``httpx.Headers`` built from any supported header container."""
    return httpx.Headers(_coerce_header_items(headers))


def add_header(headers: httpx.Headers, name: str, value: Any) -> httpx.Headers:
    """Return a copy of ``headers`` with ``value`` appended to field ``name``."""
    items = list(headers.multi_items())
    items.extend((name, item) for item in to_strings(value))
    return httpx.Headers(items)


def set_header(headers: httpx.Headers, name: str, value: Any) -> httpx.Headers:
    """Return a copy of ``headers`` where field ``name`` holds only ``value``."""
    lower = name.lower()
    items = [(key, val) for key, val in headers.multi_items() if key.lower() != lower]
    items.extend((name, item) for item in to_strings(value))
    return httpx.Headers(items)


def remove_header(headers: httpx.Headers, name: str) -> httpx.Headers:
    lower = name.lower()
    return httpx.Headers([(key, val) for key, val in headers.multi_items() if key.lower() != lower])


def merge_headers(base: httpx.Headers, overrides: Any) -> httpx.Headers:
    """Layer ``overrides`` onto ``base``; every overridden field replaces all of its base values."""
    merged = base
    override_items = _coerce_header_items(overrides)
    for name in {key.lower() for key, _ in override_items}:
        merged = remove_header(merged, name)
    items = list(merged.multi_items())
    items.extend(override_items)
    return httpx.Headers(items)


def header_value(headers: Any, name: str, default: str = "") -> str:
    """Return a header value using case-insensitive matching; repeated fields are comma-joined."""
    if not headers or not name:
        return default
    if not isinstance(headers, httpx.Headers):
        headers = normalize_headers(headers)
    value = headers.get(name)
    return default if value is None else value.strip()


__all__ = [
    "HEADER_CONTENT_TYPE",
    "HEADER_USER_AGENT",
    "add_header",
    "header_value",
    "merge_headers",
    "normalize_headers",
    "remove_header",
    "set_header",
]
