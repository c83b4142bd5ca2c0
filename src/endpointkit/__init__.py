# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
endpointkit package entrypoint.

Endpoints are declared as data, turned into Requests by a Provider, and either
stubbed or sent over an injectable transport (httpx by default). Middleware
hooks wrap each call, and results are delivered as Success / Failure values to
a completion callback on a configurable execution context.
"""

from .config import TransportSettings, load_transport_settings
from .dispatch import ExecutionContext, ExecutorContext, InlineContext, SerialContext, main_context
from .endpoint import (
    CompositeData,
    CompositeParameters,
    Data,
    Download,
    DownloadParameters,
    Endpoint,
    HTTPMethod,
    JSONEncodable,
    Parameters,
    Plain,
    RequestValidation,
    endpoint_url,
)
from .errors import (
    DecodableMappingError,
    EncodableMappingError,
    EndpointKitError,
    ErrorCategory,
    InvalidStatusCodeError,
    JSONMappingError,
    MisconfigurationError,
    NetworkError,
    ParameterEncodingError,
    RequestMappingError,
    StringMappingError,
    TransportError,
    URLErrorCode,
)
from .http import JSONEncoding, StubTransport, URLEncoding, WireRequest, create_default_transport
from .log import setup_logging
from .middleware import (
    AccessTokenAuthorizable,
    AccessTokenMiddleware,
    AccessTokenType,
    LoggingMiddleware,
    Middleware,
    NetworkActivityMiddleware,
    NetworkActivityStatus,
)
from .operation import DeferredRequestOperation, RequestOperation
from .provider import (
    Provider,
    StubBehavior,
    default_endpoint_mapping,
    default_request_mapping,
    delayed_stub,
    immediately_stub,
    never_stub,
)
from .request import Request, SampleCustomResponse, SampleNetworkError, SampleNetworkResponse
from .response import Response
from .result import Failure, Result, Success, map_response_to_result
from .version import __version__

__all__ = [
    "AccessTokenAuthorizable",
    "AccessTokenMiddleware",
    "AccessTokenType",
    "CompositeData",
    "CompositeParameters",
    "Data",
    "DecodableMappingError",
    "DeferredRequestOperation",
    "Download",
    "DownloadParameters",
    "EncodableMappingError",
    "Endpoint",
    "EndpointKitError",
    "ErrorCategory",
    "ExecutionContext",
    "ExecutorContext",
    "Failure",
    "HTTPMethod",
    "InlineContext",
    "InvalidStatusCodeError",
    "JSONEncodable",
    "JSONEncoding",
    "JSONMappingError",
    "LoggingMiddleware",
    "Middleware",
    "MisconfigurationError",
    "NetworkActivityMiddleware",
    "NetworkActivityStatus",
    "NetworkError",
    "ParameterEncodingError",
    "Parameters",
    "Plain",
    "Provider",
    "Request",
    "RequestMappingError",
    "RequestOperation",
    "RequestValidation",
    "Response",
    "Result",
    "SampleCustomResponse",
    "SampleNetworkError",
    "SampleNetworkResponse",
    "SerialContext",
    "StringMappingError",
    "StubBehavior",
    "StubTransport",
    "Success",
    "TransportError",
    "TransportSettings",
    "URLEncoding",
    "URLErrorCode",
    "WireRequest",
    "create_default_transport",
    "default_endpoint_mapping",
    "default_request_mapping",
    "delayed_stub",
    "endpoint_url",
    "immediately_stub",
    "load_transport_settings",
    "main_context",
    "never_stub",
    "setup_logging",
    "__version__",
]
