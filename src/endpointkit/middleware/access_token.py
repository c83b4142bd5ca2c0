# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Authorization header injection for endpoints that opt in."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from ..http.models import WireRequest
from .base import Middleware

if TYPE_CHECKING:
    from ..endpoint import Endpoint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccessTokenType:
    """Authorization scheme; `value` is the header prefix, or None for no header."""

    scheme: str | None

    @classmethod
    def none(cls) -> AccessTokenType:
        return cls(None)

    @classmethod
    def basic(cls) -> AccessTokenType:
        return cls("Basic")

    @classmethod
    def bearer(cls) -> AccessTokenType:
        return cls("Bearer")

    @classmethod
    def custom(cls, scheme: str) -> AccessTokenType:
        return cls(scheme)

    @property
    def value(self) -> str | None:
        return self.scheme


@runtime_checkable
class AccessTokenAuthorizable(Protocol):
    @property
    def access_token_type(self) -> AccessTokenType: ...


class AccessTokenMiddleware(Middleware):
    """Adds `Authorization: <scheme> <token>` to requests of authorizable endpoints."""

    def __init__(self, token_provider: Callable[[], str]):
        self.token_provider = token_provider

    def prepare(self, request: WireRequest, endpoint: Endpoint) -> WireRequest:
        if not isinstance(endpoint, AccessTokenAuthorizable):
            logger.debug("%r is not token-authorizable, leaving request untouched", endpoint)
            return request

        scheme = endpoint.access_token_type.value
        if scheme is None:
            return request

        return request.with_header("Authorization", f"{scheme} {self.token_provider()}")


__all__ = ["AccessTokenAuthorizable", "AccessTokenMiddleware", "AccessTokenType"]
