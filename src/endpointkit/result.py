# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Discriminated result values and the transport-outcome mapper."""

from __future__ import annotations

from collections.abc import Container
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from .errors import EndpointKitError, InvalidStatusCodeError, NetworkError, TransportError, URLErrorCode
from .http.models import WireRequest
from .response import Response

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T

    @property
    def is_success(self) -> bool:
        return True

    @property
    def error(self) -> None:
        return None

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Failure:
    error: EndpointKitError

    @property
    def is_success(self) -> bool:
        return False

    @property
    def value(self) -> None:
        return None

    def unwrap(self) -> Any:
        raise self.error


Result = Success[T] | Failure


def _status_code_of(raw_response: Any) -> int | None:
    status = getattr(raw_response, "status_code", None)
    if isinstance(status, bool) or not isinstance(status, int):
        return None
    return status


def map_response_to_result(
    raw_response: Any | None,
    request: WireRequest | None,
    valid_status_codes: Container[int] | None,
    data: bytes | None,
    error: BaseException | None,
) -> Result[Response]:
    """
    Reconcile one transport outcome into a Result.

    A response without an error is validated against `valid_status_codes`
    (empty or None accepts any status). A response with an error is still
    attached to the NetworkError for diagnostics.
    """
    if raw_response is not None and error is None:
        status = _status_code_of(raw_response)
        if status is None:
            return Failure(NetworkError(TransportError(URLErrorCode.CANNOT_PARSE_RESPONSE)))
        response = Response(status, data or b"", request, raw_response)
        if valid_status_codes and status not in valid_status_codes:
            return Failure(InvalidStatusCodeError(response))
        return Success(response)

    if raw_response is not None and error is not None:
        status = _status_code_of(raw_response)
        if status is None:
            return Failure(NetworkError(TransportError(URLErrorCode.CANNOT_PARSE_RESPONSE)))
        return Failure(NetworkError(error, Response(status, data or b"", request, raw_response)))

    if error is not None:
        return Failure(NetworkError(error))

    return Failure(NetworkError(TransportError(URLErrorCode.UNKNOWN)))


__all__ = ["Failure", "Result", "Success", "map_response_to_result"]
