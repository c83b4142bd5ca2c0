# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Wire-level exports: requests, encoders and transports."""

from .adapters import StubbedReply, StubTask, StubTransport
from .encoding import (
    FORM_CONTENT_TYPE,
    JSON_CONTENT_TYPE,
    ArrayEncoding,
    BoolEncoding,
    Destination,
    JSONBodyEncoder,
    JSONEncoding,
    ParameterEncoding,
    Parameters,
    URLEncoding,
)
from .headers import header_value, normalize_headers
from .httpx_transport import HttpxTask, HttpxTransport
from .models import Headers, WireRequest
from .transport import TaskState, Transport, TransportTask, create_default_transport
from .url import append_path, is_absolute_url

__all__ = [
    "FORM_CONTENT_TYPE",
    "JSON_CONTENT_TYPE",
    "ArrayEncoding",
    "BoolEncoding",
    "Destination",
    "Headers",
    "HttpxTask",
    "HttpxTransport",
    "JSONBodyEncoder",
    "JSONEncoding",
    "ParameterEncoding",
    "Parameters",
    "StubTask",
    "StubTransport",
    "StubbedReply",
    "TaskState",
    "Transport",
    "TransportTask",
    "URLEncoding",
    "WireRequest",
    "append_path",
    "create_default_transport",
    "header_value",
    "is_absolute_url",
    "normalize_headers",
]
