# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Per-request context: deadline, cancellation and request-scoped values.

A RequestContext is immutable. Deriving a context (``with_timeout``,
``with_cancel``, ``with_value``) returns a new instance that shares the
parent's cancel signals, so cancelling a parent cancels every context
derived from it. A ContextVar-backed ambient context is used by builders
that were not handed an explicit one.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any

from ..errors import ErrorCategory, TransportError


@dataclass(frozen=True)
class RequestContext:
    deadline: float | None = None
    cancel_events: tuple[threading.Event, ...] = ()
    values: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def with_deadline(self, deadline: float) -> RequestContext:
        """Derive a context whose deadline is the earlier of ``deadline`` and the current one."""
        if self.deadline is not None and self.deadline <= deadline:
            return self
        return replace(self, deadline=deadline)

    def with_timeout(self, timeout: float | None) -> RequestContext:
        """Derive a context that expires ``timeout`` seconds from now; ``None``/``<= 0`` keeps it as is."""
        if timeout is None or timeout <= 0:
            return self
        return self.with_deadline(time.monotonic() + timeout)

    def with_cancel(self) -> tuple[RequestContext, Callable[[], None]]:
        """Derive a cancellable context; the returned function cancels it and its children."""
        event = threading.Event()
        return replace(self, cancel_events=(*self.cancel_events, event)), event.set

    def with_value(self, key: str, value: Any) -> RequestContext:
        values = dict(self.values)
        values[key] = value
        return replace(self, values=MappingProxyType(values))

    def value(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    def remaining(self) -> float | None:
        """Seconds left before the deadline, ``None`` when there is no deadline."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def cancelled(self) -> bool:
        return any(event.is_set() for event in self.cancel_events)

    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    def done(self) -> bool:
        return self.cancelled() or self.expired()

    def error(self) -> TransportError | None:
        """Return the error describing why the context is done, or None."""
        if self.cancelled():
            return TransportError("context cancelled", category=ErrorCategory.CANCELLED)
        if self.expired():
            return TransportError("context deadline exceeded", category=ErrorCategory.TIMEOUT)
        return None


_BACKGROUND = RequestContext()
_current_context: ContextVar[RequestContext | None] = ContextVar("fetchkit_request_context", default=None)


def background() -> RequestContext:
    """Return the empty root context (no deadline, never cancelled)."""
    return _BACKGROUND


def current_context() -> RequestContext:
    """Return the current ambient request context."""
    return _current_context.get() or _BACKGROUND


@contextmanager
def request_context(context: RequestContext | None = None, *, timeout: float | None = None) -> Iterator[RequestContext]:
    """
    Context manager that installs an ambient RequestContext.

    ``context`` defaults to the current ambient one; ``timeout`` derives a deadline from it.
    """
    base = context if context is not None else current_context()
    new_context = base.with_timeout(timeout)
    token = _current_context.set(new_context)
    try:
        yield new_context
    finally:
        _current_context.reset(token)


__all__ = [
    "RequestContext",
    "background",
    "current_context",
    "request_context",
]
