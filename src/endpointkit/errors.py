# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .response import Response


class ErrorCategory(str, Enum):
    TIMEOUT = "TIMEOUT"
    CANCELLED = "CANCELLED"
    SSL_ERROR = "SSL_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DNS_ERROR = "DNS_ERROR"
    HTTP_STATUS = "HTTP_STATUS"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    NONE = "NONE"


class URLErrorCode(IntEnum):
    """Transport-level failure codes surfaced when no richer exception exists."""

    UNKNOWN = -1
    CANCELLED = -999
    CANNOT_PARSE_RESPONSE = -1017


class TransportError(Exception):
    """Failure raised (or synthesized) by a transport for non-library conditions."""

    def __init__(self, code: URLErrorCode, message: str | None = None):
        self.code = code
        self.message = message or _TRANSPORT_MESSAGES.get(code, "Unknown transport error")
        super().__init__(self.message)

    @property
    def is_cancelled(self) -> bool:
        return self.code is URLErrorCode.CANCELLED

    def __repr__(self) -> str:
        return f"TransportError(code={self.code.name}, message={self.message!r})"


_TRANSPORT_MESSAGES = {
    URLErrorCode.UNKNOWN: "Unknown transport error",
    URLErrorCode.CANCELLED: "cancelled",
    URLErrorCode.CANNOT_PARSE_RESPONSE: "Cannot parse response",
}


class MisconfigurationError(RuntimeError):
    """Programming error in provider or endpoint configuration. Never delivered as a Result."""


# Parameter encoding failure reasons


@dataclass(frozen=True)
class MissingURL:
    def __str__(self) -> str:
        return "The request has no URL"


@dataclass(frozen=True)
class JSONEncodingFailed:
    error: BaseException

    def __str__(self) -> str:
        return f"Encoding failed: {self.error}"


ParameterEncodingFailureReason = MissingURL | JSONEncodingFailed


class EndpointKitError(Exception):
    """Base class for every failure delivered through a Failure result."""

    @property
    def response(self) -> Optional["Response"]:
        return None


class JSONMappingError(EndpointKitError):
    def __init__(self, response: "Response"):
        self._response = response
        super().__init__("Failed to map data to a JSON object / collection")

    @property
    def response(self) -> "Response":
        return self._response


class StringMappingError(EndpointKitError):
    def __init__(self, response: "Response"):
        self._response = response
        super().__init__("Failed to map data to a string")

    @property
    def response(self) -> "Response":
        return self._response


class DecodableMappingError(EndpointKitError):
    def __init__(self, error: BaseException, response: "Response"):
        self.error = error
        self._response = response
        super().__init__(f"Failed to map data to a decodable object with error: {error}")

    @property
    def response(self) -> "Response":
        return self._response


class EncodableMappingError(EndpointKitError):
    def __init__(self, error: BaseException):
        self.error = error
        super().__init__(f"Failed to encode object into data with error: {error}")


class InvalidStatusCodeError(EndpointKitError):
    def __init__(self, response: "Response"):
        self._response = response
        super().__init__(f"Invalid status code: {response.status_code}")

    @property
    def response(self) -> "Response":
        return self._response


class NetworkError(EndpointKitError):
    """Transport-level failure, optionally carrying the partial response."""

    def __init__(self, error: BaseException, response: Optional["Response"] = None):
        self.error = error
        self._response = response
        super().__init__(str(error) or type(error).__name__)

    @property
    def response(self) -> Optional["Response"]:
        return self._response

    @property
    def is_cancelled(self) -> bool:
        return isinstance(self.error, TransportError) and self.error.is_cancelled

    @property
    def category(self) -> ErrorCategory:
        return categorize_exception(self.error)


class RequestMappingError(EndpointKitError):
    def __init__(self, url: str):
        self.url = url
        super().__init__(f"Failed to generate a request for {url!r}")


class ParameterEncodingError(EndpointKitError):
    def __init__(self, reason: ParameterEncodingFailureReason):
        self.reason = reason
        super().__init__(f"Failed to encode parameters for request with error: {reason}")


def cancellation_error() -> NetworkError:
    """Canonical failure delivered for cancelled operations."""
    return NetworkError(TransportError(URLErrorCode.CANCELLED))


def categorize_exception(exc: BaseException) -> ErrorCategory:
    """
    Map Python/httpx exceptions to ErrorCategory.
    """
    import socket
    import ssl as ssl_module

    import httpx

    if isinstance(exc, TransportError):
        return ErrorCategory.CANCELLED if exc.is_cancelled else ErrorCategory.UNKNOWN_ERROR

    if isinstance(exc, InvalidStatusCodeError):
        return ErrorCategory.HTTP_STATUS

    if isinstance(exc, NetworkError):
        return categorize_exception(exc.error)

    if isinstance(exc, httpx.TimeoutException):
        return ErrorCategory.TIMEOUT

    if isinstance(exc, (httpx.ConnectError, httpx.RemoteProtocolError, httpx.NetworkError, httpx.ProxyError)):
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, (ssl_module.SSLError, ssl_module.CertificateError)):
        return ErrorCategory.SSL_ERROR

    if isinstance(exc, (socket.gaierror, socket.herror)):
        return ErrorCategory.DNS_ERROR

    if isinstance(exc, (ConnectionError, ConnectionRefusedError, ConnectionResetError)):
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, TimeoutError):
        return ErrorCategory.TIMEOUT

    return ErrorCategory.UNKNOWN_ERROR


def error_category_to_reason(category: Optional[ErrorCategory]) -> str:
    """User-facing reason string."""
    mapping = {
        ErrorCategory.TIMEOUT: "Network timeout",
        ErrorCategory.CANCELLED: "Request cancelled",
        ErrorCategory.SSL_ERROR: "TLS/certificate issue",
        ErrorCategory.CONNECTION_ERROR: "Network connectivity issue",
        ErrorCategory.DNS_ERROR: "DNS resolution failure",
        ErrorCategory.HTTP_STATUS: "Unexpected HTTP status code",
        ErrorCategory.UNKNOWN_ERROR: "Network error",
        ErrorCategory.NONE: "",
    }
    return mapping.get(category or ErrorCategory.NONE, "Network error")


__all__ = [
    "DecodableMappingError",
    "EncodableMappingError",
    "EndpointKitError",
    "ErrorCategory",
    "InvalidStatusCodeError",
    "JSONEncodingFailed",
    "JSONMappingError",
    "MisconfigurationError",
    "MissingURL",
    "NetworkError",
    "ParameterEncodingError",
    "ParameterEncodingFailureReason",
    "RequestMappingError",
    "StringMappingError",
    "TransportError",
    "URLErrorCode",
    "cancellation_error",
    "categorize_exception",
    "error_category_to_reason",
]
