# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for fetchkit."""

import os
from dataclasses import dataclass

from .version import __version__

DEFAULT_USER_AGENT = f"fetchkit/{__version__}"


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class FetchSettings:
    """Client defaults shared by every Fetch built from them."""

    timeout: float | None = 10.0
    max_retries: int = 2
    retry_interval: float = 1.0
    backoff_factor: float = 2.0
    user_agent: str = DEFAULT_USER_AGENT
    allow_redirects: bool = True
    verify_ssl: bool = True
    max_body_bytes: int = 16 * 1024 * 1024
    debug: bool = False
    debug_max_body: int = 4096

    @classmethod
    def from_env(cls) -> "FetchSettings":
        """Create settings from environment variables (evaluated at call time)."""
        timeout = _float_env("FETCHKIT_HTTP_TIMEOUT", cls.timeout)
        max_body_bytes = _int_env("FETCHKIT_HTTP_MAX_BODY_BYTES", cls.max_body_bytes)
        if max_body_bytes <= 0:
            max_body_bytes = cls.max_body_bytes
        return cls(
            timeout=timeout if timeout and timeout > 0 else None,
            max_retries=_int_env("FETCHKIT_HTTP_RETRIES", cls.max_retries),
            retry_interval=_float_env("FETCHKIT_HTTP_RETRY_INTERVAL", cls.retry_interval),
            backoff_factor=_float_env("FETCHKIT_HTTP_BACKOFF", cls.backoff_factor),
            user_agent=os.getenv("FETCHKIT_USER_AGENT", cls.user_agent),
            allow_redirects=_bool_env("FETCHKIT_HTTP_REDIRECTS", cls.allow_redirects),
            verify_ssl=_bool_env("FETCHKIT_HTTP_VERIFY_SSL", cls.verify_ssl),
            max_body_bytes=max_body_bytes,
            debug=_bool_env("FETCHKIT_DEBUG", cls.debug),
            debug_max_body=_int_env("FETCHKIT_DEBUG_MAX_BODY", cls.debug_max_body),
        )


def load_fetch_settings() -> FetchSettings:
    """Load client settings from environment with sensible defaults."""
    return FetchSettings.from_env()
