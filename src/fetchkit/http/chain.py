# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Interceptor chaining.

An interceptor wraps the terminal handler (the network call). With interceptors
``one, two, three`` a dispatch runs the code each one executes before calling
its continuation in the order one, two, three, then the terminal handler, then
the code after the continuation returns in the order three, two, one.

An interceptor may:
  - derive a new request and pass it on (``request.with_header(...)``)
  - return without calling ``next_handler`` (short-circuit)
  - inspect or replace the response, the drained body or the error it gets back
  - call ``next_handler`` more than once (retry)

Exceptions raised by an interceptor are not caught here; they reach the caller.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Protocol

from ..utils.context import RequestContext
from .models import FetchResult, HttpRequest

Handler = Callable[[RequestContext, HttpRequest], FetchResult]


class Interceptor(Protocol):
    def __call__(self, context: RequestContext, request: HttpRequest, next_handler: Handler) -> FetchResult: ...


def _passthrough(context: RequestContext, request: HttpRequest, next_handler: Handler) -> FetchResult:
    return next_handler(context, request)


def chain_interceptors(*interceptors: Interceptor) -> Interceptor:
    """Compose ``interceptors`` into one interceptor with the same signature."""
    count = len(interceptors)
    if count == 0:
        return _passthrough
    if count == 1:
        return interceptors[0]

    links = tuple(interceptors)
    last = count - 1

    def chained(context: RequestContext, request: HttpRequest, next_handler: Handler) -> FetchResult:
        # per-dispatch position; never shared between dispatches
        position = 0

        def advance(current_context: RequestContext, current_request: HttpRequest) -> FetchResult:
            nonlocal position
            if position == last:
                return next_handler(current_context, current_request)
            position += 1
            try:
                return links[position](current_context, current_request, advance)
            finally:
                position -= 1

        return links[0](context, request, advance)

    return chained


@dataclass(frozen=True)
class NamedInterceptor:
    """An interceptor registered under a name; the name is its identity."""

    name: str
    handler: Interceptor

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("interceptor name must be a non-empty string")
        if not callable(self.handler):
            raise TypeError(f"interceptor {self.name!r} handler is not callable")

    def __call__(self, context: RequestContext, request: HttpRequest, next_handler: Handler) -> FetchResult:
        return self.handler(context, request, next_handler)


def register_interceptors(
    existing: Iterable[NamedInterceptor],
    *interceptors: NamedInterceptor,
) -> tuple[NamedInterceptor, ...]:
    """
    Return a new registration tuple with ``interceptors`` applied.

    A name already present keeps its position and gets the new handler;
    unknown names are appended in the order given.
    """
    registered = list(existing)
    for interceptor in interceptors:
        if not isinstance(interceptor, NamedInterceptor):
            raise TypeError(f"expected NamedInterceptor, got {type(interceptor).__name__}")
        for index, current in enumerate(registered):
            if current.name == interceptor.name:
                registered[index] = interceptor
                break
        else:
            registered.append(interceptor)
    return tuple(registered)


def remove_interceptors(existing: Iterable[NamedInterceptor], *names: str) -> tuple[NamedInterceptor, ...]:
    drop = set(names)
    return tuple(interceptor for interceptor in existing if interceptor.name not in drop)


def interceptor_names(interceptors: Iterable[NamedInterceptor]) -> list[str]:
    return [interceptor.name for interceptor in interceptors]


__all__ = [
    "Handler",
    "Interceptor",
    "NamedInterceptor",
    "chain_interceptors",
    "interceptor_names",
    "register_interceptors",
    "remove_interceptors",
]
