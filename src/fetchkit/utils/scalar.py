# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Canonical string conversion for scalar query, header and form values.

Accepted variants are ``str``, ``bytes``/``bytearray``, ``bool``, ``int``,
``float`` and ``Decimal``. Booleans render as ``true``/``false`` and floats
use the shortest decimal form without an exponent, so ``10.0`` becomes
``10`` and ``1e20`` becomes ``100000000000000000000``.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from decimal import Decimal
from typing import Union

Scalar = Union[str, bytes, bytearray, bool, int, float, Decimal]


def _format_decimal(value: Decimal) -> str:
    if not value.is_finite():
        return "NaN" if value.is_nan() else ("-Inf" if value.is_signed() else "+Inf")
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def to_string(value: Scalar) -> str:
    """Return the canonical string form of a scalar value."""
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8")
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "+Inf" if value > 0 else "-Inf"
        return _format_decimal(Decimal(repr(value)))
    if isinstance(value, Decimal):
        return _format_decimal(value)
    raise TypeError(f"unsupported scalar type: {type(value).__name__}")


def to_strings(value: Scalar | Iterable[Scalar]) -> list[str]:
    """Convert a scalar, or a list/tuple/set of scalars, into strings."""
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_string(item) for item in value]
    return [to_string(value)]


__all__ = ["Scalar", "to_string", "to_strings"]
