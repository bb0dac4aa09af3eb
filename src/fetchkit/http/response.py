# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Caller-facing wrapper around the (response, body, error) triple of a dispatch."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

import httpx

from ..errors import DecodingError, FetchError, NilResponseError, UnknownBindingTypeError
from .binding import Binder, default_binders
from .models import FetchResult, HttpResponse


class Response:
    """
    Accessor over a FetchResult.

    Metadata properties (``response``, ``status_code``, ``headers``, ``error``,
    ``ok``, ``body``) never raise. Data accessors (``bytes``, ``text``, ``json``,
    ``bind*``) raise the held error first.
    """

    def __init__(self, result: FetchResult, binders: Mapping[str, Binder] | None = None):
        self.result = result
        self._binders = dict(binders) if binders is not None else default_binders()

    def __repr__(self) -> str:
        return f"<Response status={self.status_code} error={self.error!r}>"

    @property
    def response(self) -> HttpResponse | None:
        return self.result.response

    @property
    def status_code(self) -> int | None:
        return self.result.response.status_code if self.result.response is not None else None

    @property
    def headers(self) -> httpx.Headers:
        if self.result.response is None:
            return httpx.Headers()
        return self.result.response.headers

    @property
    def error(self) -> FetchError | None:
        return self.result.error

    @property
    def ok(self) -> bool:
        return self.result.error is None and self.result.response is not None and self.result.response.ok

    @property
    def body(self) -> bytes:
        return self.result.body

    def raise_for_error(self) -> Response:
        if self.result.error is not None:
            raise self.result.error
        return self

    def bytes(self) -> bytes:
        self.raise_for_error()
        return self.result.body

    def text(self, encoding: str | None = None) -> str:
        self.raise_for_error()
        if encoding is None and self.result.response is not None:
            encoding = self.result.response.encoding
        try:
            return self.result.body.decode(encoding or "utf-8", errors="replace")
        except LookupError:
            return self.result.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        self.raise_for_error()
        try:
            return json.loads(self.result.body)
        except ValueError as exc:
            raise DecodingError(f"json: {exc}") from exc

    def bind(self, name: str, target: Any) -> Any:
        """Decode the body with the binder registered as ``name`` into ``target``; returns ``target``."""
        self.raise_for_error()
        if self.result.response is None:
            raise NilResponseError("no response to bind")
        binder = self._binders.get(name)
        if binder is None:
            raise UnknownBindingTypeError(f"unknown binding type {name!r}")
        binder.bind(self.result.body, target)
        return target

    def bind_json(self, target: Any) -> Any:
        return self.bind("json", target)

    def bind_xml(self, target: Any) -> Any:
        return self.bind("xml", target)


__all__ = ["Response"]
