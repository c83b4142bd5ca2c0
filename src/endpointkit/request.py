# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Request values and their resolution into wire requests."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from functools import cached_property
from typing import Any

from .endpoint import (
    CompositeData,
    CompositeParameters,
    Data,
    Download,
    DownloadParameters,
    HTTPMethod,
    JSONEncodable,
    Parameters,
    Plain,
    RequestType,
    _method_name,
)
from .errors import (
    EncodableMappingError,
    EndpointKitError,
    JSONEncodingFailed,
    MisconfigurationError,
    ParameterEncodingError,
    RequestMappingError,
)
from .http.encoding import JSON_CONTENT_TYPE, JSONBodyEncoder, ParameterEncoding, URLEncoding
from .http.headers import merge_headers
from .http.models import WireRequest
from .http.url import is_absolute_url

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SampleNetworkResponse:
    status_code: int
    data: bytes = b""


@dataclass(frozen=True)
class SampleCustomResponse:
    """A caller-built raw response; its `status_code` is used for validation."""

    response: Any
    data: bytes = b""


@dataclass(frozen=True)
class SampleNetworkError:
    error: BaseException


SampleResponse = SampleNetworkResponse | SampleCustomResponse | SampleNetworkError
SampleResponseFactory = Callable[[], SampleResponse]


@dataclass(frozen=True, eq=False)
class Request:
    """
    Immutable snapshot of one endpoint evaluation.

    Two requests are equal when they resolve to equal wire requests. When
    neither resolves, equality falls back to the URL hash. The resolved form is
    computed once per instance.
    """

    url: str
    sample_response: SampleResponseFactory
    method: HTTPMethod | str = HTTPMethod.GET
    request_type: RequestType = field(default_factory=Plain)
    headers: Mapping[str, str] | None = None

    def __post_init__(self) -> None:
        logger.debug("Built %s request for %s (%s)", _method_name(self.method), self.url, self.request_type.name)

    def adding_headers(self, headers: Mapping[str, str]) -> Request:
        return replace(self, headers=merge_headers(self.headers, headers))

    def replacing_request_type(self, request_type: RequestType) -> Request:
        return replace(self, request_type=request_type)

    def wire_request(self) -> WireRequest:
        """Resolve into a transport-ready request, raising an EndpointKitError on failure."""
        if not is_absolute_url(self.url):
            raise RequestMappingError(self.url)

        request = WireRequest(url=self.url, method=_method_name(self.method), headers=dict(self.headers or {}))
        request_type = self.request_type

        if isinstance(request_type, (Plain, Download)):
            return request
        if isinstance(request_type, Data):
            return request.with_body(request_type.data)
        if isinstance(request_type, JSONEncodable):
            return _encode_json(request, request_type)
        if isinstance(request_type, (Parameters, DownloadParameters)):
            return _encode_parameters(request, request_type.parameters, request_type.encoding)
        if isinstance(request_type, CompositeData):
            return _encode_parameters(
                request.with_body(request_type.body), request_type.url_parameters, URLEncoding.query_string()
            )
        if isinstance(request_type, CompositeParameters):
            with_body = _encode_parameters(request, request_type.body_parameters, request_type.body_encoding)
            return _encode_parameters(with_body, request_type.url_parameters, URLEncoding.query_string())

        raise MisconfigurationError(f"Unsupported request type: {request_type!r}")

    @cached_property
    def _resolved(self) -> WireRequest | None:
        try:
            return self.wire_request()
        except EndpointKitError:
            return None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Request):
            return NotImplemented
        mine, theirs = self._resolved, other._resolved
        if mine is not None and theirs is not None:
            return mine == theirs
        if mine is None and theirs is None:
            return hash(self.url) == hash(other.url)
        return False

    def __hash__(self) -> int:
        resolved = self._resolved
        return hash(resolved) if resolved is not None else hash(self.url)


def _encode_json(request: WireRequest, request_type: JSONEncodable) -> WireRequest:
    try:
        data = json.dumps(request_type.value, cls=request_type.encoder or JSONBodyEncoder)
    except MisconfigurationError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise EncodableMappingError(exc) from exc
    if request.header("Content-Type") is None:
        request = request.with_header("Content-Type", JSON_CONTENT_TYPE)
    return request.with_body(data.encode("utf-8"))


def _encode_parameters(request: WireRequest, parameters: Mapping[str, Any], encoding: ParameterEncoding) -> WireRequest:
    try:
        return encoding.encode(request, parameters)
    except (ParameterEncodingError, MisconfigurationError):
        raise
    except Exception as exc:  # noqa: BLE001
        raise ParameterEncodingError(JSONEncodingFailed(exc)) from exc


__all__ = [
    "Request",
    "SampleCustomResponse",
    "SampleNetworkError",
    "SampleNetworkResponse",
    "SampleResponse",
    "SampleResponseFactory",
]
