# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Wire-level request model consumed by transports and middleware."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace

from .headers import add_header, header_value, normalize_headers, set_header

Headers = dict[str, str]


@dataclass(frozen=True, eq=False)
class WireRequest:
    """Resolved request ready for a transport: URL, method, headers and encoded body."""

    url: str | None
    method: str = "GET"
    headers: Headers = field(default_factory=dict)
    body: bytes | None = None

    def header(self, name: str) -> str | None:
        return header_value(self.headers, name)

    def with_header(self, name: str, value: str) -> WireRequest:
        return replace(self, headers=set_header(self.headers, name, value))

    def adding_header(self, name: str, value: str) -> WireRequest:
        return replace(self, headers=add_header(self.headers, name, value))

    def with_headers(self, headers: Mapping[str, str]) -> WireRequest:
        return replace(self, headers=dict(headers))

    def with_body(self, body: bytes | None) -> WireRequest:
        return replace(self, body=body)

    def with_url(self, url: str | None) -> WireRequest:
        return replace(self, url=url)

    def _key(self) -> tuple:
        return (
            self.url,
            self.method.upper(),
            frozenset(normalize_headers(self.headers).items()),
            self.body,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WireRequest):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())


__all__ = ["Headers", "WireRequest"]
