# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""URL helpers: base/path resolution and query merging."""

from __future__ import annotations

from urllib.parse import urljoin, urlsplit

import httpx

from ..errors import InvalidURLError


def resolve_reference(base_url: str, ref: str) -> str:
    """
    Resolve ``ref`` against ``base_url`` per RFC 3986 section 5.2.

    Examples with base ``http://h/v1/api/``:
      user/profile  -> http://h/v1/api/user/profile
      /user/profile -> http://h/user/profile
      ../order      -> http://h/v1/order

    Without the trailing slash (``http://h/v1/api``) a relative ref replaces the
    last segment: ``user/profile`` -> ``http://h/v1/user/profile``. An absolute
    ref ignores the base. An empty result is returned as ``""`` and rejected at
    dispatch; any other result must be an absolute http(s) URL.
    """
    base = str(base_url or "")
    reference = str(ref or "")
    try:
        resolved = urljoin(base, reference)
        if not resolved:
            return ""
        parts = urlsplit(resolved)
        parts.port  # raises ValueError for an out-of-range or non-numeric port
    except ValueError as exc:
        raise InvalidURLError(f"cannot resolve {reference!r} against {base!r}: {exc}") from exc

    if not parts.scheme or not parts.netloc:
        raise InvalidURLError(f"resolved URL {resolved!r} is not absolute (base={base!r}, path={reference!r})")
    if parts.scheme.lower() not in {"http", "https"}:
        raise InvalidURLError(f"unsupported URL scheme {parts.scheme!r} in {resolved!r}")
    return resolved


def merge_query(url: str, params: httpx.QueryParams) -> str:
    """Append ``params`` to the query already present on ``url``; existing values are kept."""
    if not params:
        return url
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as exc:
        raise InvalidURLError(f"invalid URL {url!r}: {exc}") from exc
    merged = parsed.params
    for key, value in params.multi_items():
        merged = merged.add(key, value)
    return str(parsed.copy_with(params=merged))


__all__ = ["merge_query", "resolve_reference"]
