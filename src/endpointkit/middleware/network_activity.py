# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Began / ended notifications for activity indicators."""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING

from ..http.models import WireRequest
from .base import Middleware

if TYPE_CHECKING:
    from ..endpoint import Endpoint
    from ..response import Response
    from ..result import Result


class NetworkActivityStatus(str, Enum):
    BEGAN = "began"
    ENDED = "ended"


NetworkActivityCallback = Callable[[NetworkActivityStatus, "Endpoint"], None]


class NetworkActivityMiddleware(Middleware):
    def __init__(self, callback: NetworkActivityCallback):
        self.callback = callback

    def will_send(self, request: WireRequest, endpoint: Endpoint) -> None:
        self.callback(NetworkActivityStatus.BEGAN, endpoint)

    def did_receive(self, result: Result[Response], endpoint: Endpoint) -> None:
        self.callback(NetworkActivityStatus.ENDED, endpoint)


__all__ = ["NetworkActivityCallback", "NetworkActivityMiddleware", "NetworkActivityStatus"]
