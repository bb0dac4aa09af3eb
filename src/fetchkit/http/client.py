# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Transport abstraction and factory."""

from typing import Protocol

from ..config import FetchSettings, load_fetch_settings
from ..utils.context import RequestContext
from .models import FetchResult, HttpRequest


class Transport(Protocol):
    """
    Performs the network call; ``send`` is the terminal handler of every chain.

    Implementations drain the response body once and report network failures as
    ``TransportError`` inside the returned FetchResult rather than raising.
    """

    def send(self, context: RequestContext, request: HttpRequest) -> FetchResult: ...

    def close(self) -> None:  # pragma: no cover - optional for adapters
        ...


def create_default_transport(settings: FetchSettings | None = None) -> Transport:
    """Factory for the default httpx-backed transport."""
    from .httpx_client import HttpxTransport

    return HttpxTransport(settings or load_fetch_settings())
