# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Middleware exports."""

from .access_token import AccessTokenAuthorizable, AccessTokenMiddleware, AccessTokenType
from .base import Middleware
from .logging import LoggingMiddleware
from .network_activity import NetworkActivityCallback, NetworkActivityMiddleware, NetworkActivityStatus

__all__ = [
    "AccessTokenAuthorizable",
    "AccessTokenMiddleware",
    "AccessTokenType",
    "LoggingMiddleware",
    "Middleware",
    "NetworkActivityCallback",
    "NetworkActivityMiddleware",
    "NetworkActivityStatus",
]
