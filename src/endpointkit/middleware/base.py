# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Middleware base class with identity / no-op hooks."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..http.models import WireRequest

if TYPE_CHECKING:
    from ..endpoint import Endpoint
    from ..response import Response
    from ..result import Result


class Middleware:
    """
    Lifecycle hooks around one logical request.

    `prepare`, `will_send` and `did_receive` run in registration order.
    `process` is folded left to right over the middleware list, so each
    middleware receives the previous one's output.
    """

    def prepare(self, request: WireRequest, endpoint: Endpoint) -> WireRequest:
        return request

    def will_send(self, request: WireRequest, endpoint: Endpoint) -> None:
        return None

    def did_receive(self, result: Result[Response], endpoint: Endpoint) -> None:
        return None

    def process(self, result: Result[Response], endpoint: Endpoint) -> Result[Response]:
        return result

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"{self.__class__.__name__}()"


__all__ = ["Middleware"]
