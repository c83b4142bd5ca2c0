# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Parameter encoders.

Encoders are pure: they take a WireRequest plus parameters and return a new
WireRequest with the parameters applied to the query string or the body.
"""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Mapping
from datetime import date, datetime
from enum import Enum
from typing import Any, Protocol, runtime_checkable
from urllib.parse import quote

from ..errors import JSONEncodingFailed, MissingURL, ParameterEncodingError
from .models import WireRequest
from .url import append_query

Parameters = Mapping[str, Any]

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded; charset=utf-8"
JSON_CONTENT_TYPE = "application/json"

# RFC 3986 query characters minus the ones that delimit key/value pairs.
_QUERY_SAFE = "-._~!$'()*,;:@/?"


@runtime_checkable
class ParameterEncoding(Protocol):
    """Applies a collection of parameters to a WireRequest."""

    def encode(self, request: WireRequest, parameters: Parameters | None) -> WireRequest: ...


class Destination(str, Enum):
    """Where URL-encoded parameters go."""

    METHOD_DEPENDENT = "method-dependent"
    QUERY_STRING = "query-string"
    HTTP_BODY = "http-body"


class ArrayEncoding(str, Enum):
    BRACKETS = "brackets"
    NO_BRACKETS = "no-brackets"

    def encode(self, key: str) -> str:
        return f"{key}[]" if self is ArrayEncoding.BRACKETS else key


class BoolEncoding(str, Enum):
    NUMERIC = "numeric"
    LITERAL = "literal"

    def encode(self, value: bool) -> str:
        if self is BoolEncoding.NUMERIC:
            return "1" if value else "0"
        return "true" if value else "false"


_URL_ENCODED_METHODS = {"GET", "HEAD", "DELETE"}


@dataclasses.dataclass(frozen=True)
class URLEncoding:
    """
    Encodes parameters as a percent-escaped `key=value&...` string.

    Arrays encode as `foo[]=1&foo[]=2` (or `foo=1&foo=2` with NO_BRACKETS) and
    nested mappings as `foo[bar]=baz`. When the body is the destination, the
    `Content-Type` header defaults to `application/x-www-form-urlencoded`.
    """

    destination: Destination = Destination.METHOD_DEPENDENT
    array_encoding: ArrayEncoding = ArrayEncoding.BRACKETS
    bool_encoding: BoolEncoding = BoolEncoding.NUMERIC

    @classmethod
    def method_dependent(cls) -> URLEncoding:
        return cls()

    @classmethod
    def query_string(cls) -> URLEncoding:
        return cls(destination=Destination.QUERY_STRING)

    @classmethod
    def http_body(cls) -> URLEncoding:
        return cls(destination=Destination.HTTP_BODY)

    def encode(self, request: WireRequest, parameters: Parameters | None) -> WireRequest:
        if parameters is None:
            return request

        if self._encodes_in_url(request.method):
            if not request.url:
                raise ParameterEncodingError(MissingURL())
            if not parameters:
                return request
            return request.with_url(append_query(request.url, self.query(parameters)))

        if request.header("Content-Type") is None:
            request = request.with_header("Content-Type", FORM_CONTENT_TYPE)
        return request.with_body(self.query(parameters).encode("utf-8"))

    def query_components(self, key: str, value: Any) -> list[tuple[str, str]]:
        """Recursively flatten one key/value pair into escaped query components."""
        components: list[tuple[str, str]] = []
        if isinstance(value, Mapping):
            for nested_key in sorted(value, key=str):
                components += self.query_components(f"{key}[{nested_key}]", value[nested_key])
        elif isinstance(value, (list, tuple, set, frozenset)):
            for item in value:
                components += self.query_components(self.array_encoding.encode(key), item)
        elif isinstance(value, bool):
            components.append((self.escape(key), self.escape(self.bool_encoding.encode(value))))
        elif isinstance(value, Enum):
            components.append((self.escape(key), self.escape(str(value.value))))
        else:
            components.append((self.escape(key), self.escape(str(value))))
        return components

    @staticmethod
    def escape(text: str) -> str:
        return quote(text, safe=_QUERY_SAFE)

    def query(self, parameters: Parameters) -> str:
        components: list[tuple[str, str]] = []
        for key in sorted(parameters, key=str):
            value = parameters[key]
            if value is None:
                continue
            components += self.query_components(str(key), value)
        return "&".join(f"{name}={value}" for name, value in components)

    def _encodes_in_url(self, method: str) -> bool:
        if self.destination is Destination.QUERY_STRING:
            return True
        if self.destination is Destination.HTTP_BODY:
            return False
        return (method or "GET").upper() in _URL_ENCODED_METHODS


class JSONBodyEncoder(json.JSONEncoder):
    """JSON encoder for request bodies built from dataclasses and model objects."""

    def default(self, o: Any) -> Any:
        if dataclasses.is_dataclass(o) and not isinstance(o, type):
            return dataclasses.asdict(o)
        to_mapping = getattr(o, "to_mapping", None)
        if callable(to_mapping):
            return to_mapping()
        if isinstance(o, Enum):
            return o.value
        if isinstance(o, (datetime, date)):
            return o.isoformat()
        if isinstance(o, (set, frozenset, tuple)):
            return list(o)
        return super().default(o)


@dataclasses.dataclass(frozen=True)
class JSONEncoding:
    """Serializes parameters as the JSON body, defaulting `Content-Type` to `application/json`."""

    indent: int | None = None
    sort_keys: bool = False

    @classmethod
    def pretty_printed(cls) -> JSONEncoding:
        return cls(indent=2)

    def encode(self, request: WireRequest, parameters: Parameters | None) -> WireRequest:
        if parameters is None:
            return request
        return self.encode_json_object(request, parameters)

    def encode_json_object(self, request: WireRequest, json_object: Any = None) -> WireRequest:
        if json_object is None:
            return request
        try:
            data = json.dumps(json_object, cls=JSONBodyEncoder, indent=self.indent, sort_keys=self.sort_keys)
        except (TypeError, ValueError) as exc:
            raise ParameterEncodingError(JSONEncodingFailed(exc)) from exc
        if request.header("Content-Type") is None:
            request = request.with_header("Content-Type", JSON_CONTENT_TYPE)
        return request.with_body(data.encode("utf-8"))


__all__ = [
    "ArrayEncoding",
    "BoolEncoding",
    "Destination",
    "FORM_CONTENT_TYPE",
    "JSONBodyEncoder",
    "JSONEncoding",
    "JSON_CONTENT_TYPE",
    "ParameterEncoding",
    "Parameters",
    "URLEncoding",
]
