# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Response binders.

A binder decodes a drained response body and writes the result into a
caller-owned target:
  - a mutable mapping is updated with the decoded keys
  - a mutable sequence has its contents replaced
  - any other object receives the decoded keys as attributes; dataclass
    fields typed as dataclasses (or lists of them) are built from nested mappings

Immutable targets (``None``, numbers, strings, tuples, frozen dataclasses) are
a programming error and raise ``TypeError``.
"""

from __future__ import annotations

import dataclasses
import json
import types
import typing
import xml.etree.ElementTree as ET
from collections.abc import Mapping, MutableMapping, MutableSequence
from decimal import Decimal
from typing import Any, Protocol

from ..errors import DecodingError
from .xml_body import xml_to_dict

_IMMUTABLE = (str, bytes, int, float, complex, Decimal, tuple, frozenset, type(None))


class Binder(Protocol):
    name: str

    def bind(self, body: bytes, target: Any) -> None: ...


def _field_types(cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls)
    except (NameError, TypeError):
        # unresolvable forward references; nested values stay plain
        return {}


def _convert(value: Any, annotation: Any) -> Any:
    if isinstance(annotation, type) and dataclasses.is_dataclass(annotation) and isinstance(value, Mapping):
        return _build_dataclass(annotation, value)
    origin = typing.get_origin(annotation)
    args = typing.get_args(annotation)
    if origin in (list, MutableSequence) and args and isinstance(value, list):
        return [_convert(item, args[0]) for item in value]
    if origin in (typing.Union, types.UnionType):
        for arg in args:
            if arg is not type(None) and isinstance(arg, type) and dataclasses.is_dataclass(arg):
                return _convert(value, arg)
    return value


def _build_dataclass(cls: type, data: Mapping[str, Any]) -> Any:
    hints = _field_types(cls)
    kwargs = {}
    for item in dataclasses.fields(cls):
        if item.init and item.name in data:
            kwargs[item.name] = _convert(data[item.name], hints.get(item.name))
    try:
        return cls(**kwargs)
    except TypeError as exc:
        raise DecodingError(f"cannot build {cls.__name__}: {exc}") from exc


def populate(target: Any, decoded: Any) -> None:
    """Write ``decoded`` into ``target`` in place."""
    if isinstance(target, _IMMUTABLE):
        raise TypeError(f"bind target of type {type(target).__name__} is immutable")

    if isinstance(target, MutableMapping):
        if not isinstance(decoded, Mapping):
            raise DecodingError(f"cannot bind {type(decoded).__name__} into a mapping")
        target.update(decoded)
        return

    if isinstance(target, MutableSequence):
        if not isinstance(decoded, list):
            raise DecodingError(f"cannot bind {type(decoded).__name__} into a sequence")
        target[:] = decoded
        return

    if not hasattr(target, "__dict__") and not hasattr(type(target), "__slots__"):
        raise TypeError(f"bind target of type {type(target).__name__} cannot hold attributes")
    if not isinstance(decoded, Mapping):
        raise DecodingError(f"cannot bind {type(decoded).__name__} into {type(target).__name__}")

    if dataclasses.is_dataclass(target):
        hints = _field_types(type(target))
        names = {item.name for item in dataclasses.fields(target)}
        # unknown keys are ignored, like missing struct fields
        values = {key: _convert(value, hints.get(key)) for key, value in decoded.items() if key in names}
    else:
        values = dict(decoded)

    for key, value in values.items():
        try:
            setattr(target, str(key), value)
        except AttributeError as exc:
            # frozen dataclasses and slot-restricted objects
            raise TypeError(f"cannot set {key!r} on {type(target).__name__}: {exc}") from exc


class JSONBinder:
    name = "json"

    def bind(self, body: bytes, target: Any) -> None:
        try:
            decoded = json.loads(body)
        except ValueError as exc:
            raise DecodingError(f"json: {exc}") from exc
        populate(target, decoded)


class XMLBinder:
    """Binds the content of the root element; the root tag itself is dropped."""

    name = "xml"

    def __init__(self, force_list: set[str] | None = None):
        self.force_list = set(force_list or ())

    def bind(self, body: bytes, target: Any) -> None:
        try:
            document = xml_to_dict(body, force_list=self.force_list)
        except ET.ParseError as exc:
            raise DecodingError(f"xml: {exc}") from exc
        content = next(iter(document.values()))
        if content is None:
            content = {}
        populate(target, content)


def default_binders() -> dict[str, Binder]:
    """Return a fresh registry seeded with the ``json`` and ``xml`` binders."""
    return {JSONBinder.name: JSONBinder(), XMLBinder.name: XMLBinder()}


__all__ = ["Binder", "JSONBinder", "XMLBinder", "default_binders", "populate"]
