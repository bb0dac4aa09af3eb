# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Utility exports."""

from .context import RequestContext, background, current_context, request_context
from .scalar import Scalar, to_string, to_strings

__all__ = [
    "RequestContext",
    "Scalar",
    "background",
    "current_context",
    "request_context",
    "to_string",
    "to_strings",
]
