# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Request / response log lines."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..errors import NetworkError, categorize_exception
from ..http.models import WireRequest
from .base import Middleware

if TYPE_CHECKING:
    from ..endpoint import Endpoint
    from ..response import Response
    from ..result import Result

_default_logger = logging.getLogger("endpointkit.requests")


class LoggingMiddleware(Middleware):
    """Logs one line when a request is sent and one when its result arrives."""

    def __init__(self, logger: logging.Logger | None = None, level: int = logging.INFO):
        self.logger = logger or _default_logger
        self.level = level

    def will_send(self, request: WireRequest, endpoint: Endpoint) -> None:
        self.logger.log(self.level, "-> %s %s", request.method, request.url)

    def did_receive(self, result: Result[Response], endpoint: Endpoint) -> None:
        if result.is_success:
            response = result.value
            self.logger.log(self.level, "<- %s (%d bytes)", response.status_code, len(response.data))
            return

        error = result.error
        response = error.response
        if response is not None and not isinstance(error, NetworkError):
            self.logger.log(self.level, "<- %s rejected: %s", response.status_code, error)
            return
        category = categorize_exception(error)
        self.logger.log(self.level, "<- failed [%s]: %s", category.value, error)


__all__ = ["LoggingMiddleware"]
