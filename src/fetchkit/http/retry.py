# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Generic retry helper and an opt-in retry interceptor built on it."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any, TypeVar

from ..config import load_fetch_settings
from ..errors import ErrorCategory, TransportError
from ..utils.context import RequestContext
from .chain import Handler, Interceptor
from .models import FetchResult, HttpRequest, RetryConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


def build_default_retry_config() -> RetryConfig:
    """Create a RetryConfig from environment-backed FetchSettings."""
    settings = load_fetch_settings()
    return RetryConfig.from_settings(settings)


def _has_error(value: Any) -> bool:
    return getattr(value, "error", None) is not None


def retry(
    fn: Callable[[int], T],
    *,
    interval: float,
    max_attempts: int,
    should_retry: Callable[[T], bool] = _has_error,
    backoff_factor: float = 1.0,
    retry_on: tuple[type[BaseException], ...] = (),
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Call ``fn(attempt)`` until ``should_retry`` rejects its result or attempts run out.

    ``attempt`` starts at 1. Between attempts the helper sleeps ``interval`` seconds,
    multiplied by ``backoff_factor`` after every attempt. Exceptions listed in
    ``retry_on`` are retried too; the last one is re-raised when attempts run out.
    The last result is returned when every attempt asked for a retry.
    """
    attempts = max(1, max_attempts)
    delay = interval
    for attempt in range(1, attempts + 1):
        try:
            result = fn(attempt)
        except retry_on:
            if attempt >= attempts:
                raise
        else:
            if attempt >= attempts or not should_retry(result):
                return result
        if delay > 0:
            sleep(delay)
        delay *= backoff_factor
    raise AssertionError("unreachable")  # pragma: no cover


def is_retryable_result(result: FetchResult) -> bool:
    """Only transport-level failures (no response at all) are worth retrying; cancellation is not."""
    if result.response is not None or not isinstance(result.error, TransportError):
        return False
    return result.error.category is not ErrorCategory.CANCELLED


def retry_interceptor(
    config: RetryConfig | None = None,
    *,
    predicate: Callable[[FetchResult], bool] | None = None,
) -> Interceptor:
    """Interceptor that re-invokes its continuation while ``predicate`` says so."""
    cfg = config or build_default_retry_config()
    should_retry = predicate or is_retryable_result

    def intercept(context: RequestContext, request: HttpRequest, next_handler: Handler) -> FetchResult:
        attempts = 0

        def attempt(n: int) -> FetchResult:
            nonlocal attempts
            attempts = n
            if n > 1:
                logger.debug("retrying %s %s (attempt %d/%d)", request.method, request.url, n, cfg.max_attempts)
            return next_handler(context, request)

        def bounded_sleep(delay: float) -> None:
            remaining = context.remaining()
            time.sleep(delay if remaining is None else min(delay, remaining))

        result = retry(
            attempt,
            interval=cfg.interval,
            max_attempts=cfg.max_attempts,
            should_retry=lambda res: should_retry(res) and not context.done(),
            backoff_factor=cfg.backoff_factor,
            sleep=bounded_sleep,
        )
        if result.response is not None and attempts > 1:
            result.response.meta["retry_count"] = attempts - 1
        return result

    return intercept


__all__ = [
    "build_default_retry_config",
    "is_retryable_result",
    "retry",
    "retry_interceptor",
]
