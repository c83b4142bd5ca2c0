# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Declarative endpoint descriptors."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar

from .errors import MisconfigurationError
from .http.encoding import Destination, ParameterEncoding, URLEncoding
from .http.url import append_path

# (temporary_path, raw_response)
DownloadDestination = Callable[[str | None, Any | None], None]


class HTTPMethod(str, Enum):
    GET = "GET"
    HEAD = "HEAD"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    OPTIONS = "OPTIONS"
    TRACE = "TRACE"
    CONNECT = "CONNECT"


@dataclass(frozen=True)
class RequestValidation:
    """Accepted status codes; an empty set accepts any status."""

    codes: frozenset[int] = frozenset()

    @classmethod
    def none(cls) -> RequestValidation:
        return cls()

    @classmethod
    def success_codes(cls) -> RequestValidation:
        return cls(frozenset(range(200, 300)))

    @classmethod
    def success_and_redirect_codes(cls) -> RequestValidation:
        return cls(frozenset(range(200, 400)))

    @classmethod
    def custom(cls, codes: Iterable[int]) -> RequestValidation:
        return cls(frozenset(int(code) for code in codes))

    def accepts(self, status_code: int) -> bool:
        return not self.codes or status_code in self.codes


# Request body / parameter variants. Exactly one is active per endpoint.


@dataclass(frozen=True)
class Plain:
    name: ClassVar[str] = "plain"
    is_download: ClassVar[bool] = False


@dataclass(frozen=True)
class Data:
    data: bytes

    name: ClassVar[str] = "data"
    is_download: ClassVar[bool] = False


@dataclass(frozen=True)
class JSONEncodable:
    """An object serialized as the JSON body, optionally with a custom JSONEncoder subclass."""

    value: Any
    encoder: type[json.JSONEncoder] | None = None

    name: ClassVar[str] = "json-encodable"
    is_download: ClassVar[bool] = False


@dataclass(frozen=True)
class Parameters:
    parameters: Mapping[str, Any]
    encoding: ParameterEncoding = field(default_factory=URLEncoding)

    name: ClassVar[str] = "parameters"
    is_download: ClassVar[bool] = False


@dataclass(frozen=True)
class CompositeData:
    """Raw body bytes plus parameters encoded into the URL query."""

    body: bytes
    url_parameters: Mapping[str, Any]

    name: ClassVar[str] = "composite-data"
    is_download: ClassVar[bool] = False


@dataclass(frozen=True)
class CompositeParameters:
    """Body parameters plus URL query parameters; the body encoding must target the body."""

    body_parameters: Mapping[str, Any]
    body_encoding: ParameterEncoding
    url_parameters: Mapping[str, Any]

    name: ClassVar[str] = "composite-parameters"
    is_download: ClassVar[bool] = False

    def __post_init__(self) -> None:
        encoding = self.body_encoding
        if isinstance(encoding, URLEncoding) and encoding.destination is not Destination.HTTP_BODY:
            raise MisconfigurationError(
                "CompositeParameters requires a URLEncoding that targets the HTTP body, "
                f"got destination={encoding.destination.value}"
            )


@dataclass(frozen=True)
class Download:
    destination: DownloadDestination

    name: ClassVar[str] = "download"
    is_download: ClassVar[bool] = True


@dataclass(frozen=True)
class DownloadParameters:
    parameters: Mapping[str, Any]
    encoding: ParameterEncoding
    destination: DownloadDestination

    name: ClassVar[str] = "download-parameters"
    is_download: ClassVar[bool] = True


RequestType = Plain | Data | JSONEncodable | Parameters | CompositeData | CompositeParameters | Download | DownloadParameters


class Endpoint(ABC):
    """
    Describes one remote operation.

    Subclasses provide `base_url`, `path` and `method`, either as properties or
    plain class attributes, and override the defaulted members as needed.
    """

    request_type: RequestType = Plain()
    validation: RequestValidation = RequestValidation()
    headers: Mapping[str, str] | None = None
    test_data: bytes = b""

    @property
    @abstractmethod
    def base_url(self) -> str: ...

    @property
    @abstractmethod
    def path(self) -> str: ...

    @property
    @abstractmethod
    def method(self) -> HTTPMethod: ...

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"{self.__class__.__name__}({_method_name(self.method)} {endpoint_url(self)})"


def endpoint_url(endpoint: Endpoint) -> str:
    """Join the endpoint path onto its base URL as a single path component."""
    return append_path(endpoint.base_url, endpoint.path)


def _method_name(method: HTTPMethod | str) -> str:
    return method.value if isinstance(method, HTTPMethod) else str(method).upper()


__all__ = [
    "CompositeData",
    "CompositeParameters",
    "Data",
    "Download",
    "DownloadDestination",
    "DownloadParameters",
    "Endpoint",
    "HTTPMethod",
    "JSONEncodable",
    "Parameters",
    "Plain",
    "RequestType",
    "RequestValidation",
    "endpoint_url",
]
