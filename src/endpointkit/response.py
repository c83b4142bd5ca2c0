# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Response value and body mapping helpers."""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Callable, Container, Mapping
from typing import Any, TypeVar

from .errors import DecodableMappingError, InvalidStatusCodeError, JSONMappingError, StringMappingError
from .http.headers import normalize_headers
from .http.models import WireRequest

T = TypeVar("T")

_MISSING = object()


@dataclasses.dataclass(eq=False)
class Response:
    """Status code and body of a completed call, plus the wire request and raw transport response."""

    status_code: int
    data: bytes = b""
    request: WireRequest | None = None
    response: Any | None = None

    @property
    def headers(self) -> dict[str, str]:
        if self.response is None:
            return {}
        return normalize_headers(getattr(self.response, "headers", None))

    @property
    def text(self) -> str:
        return self.data.decode("utf-8", errors="replace")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Response):
            return NotImplemented
        return (
            self.status_code == other.status_code
            and self.data == other.data
            and self.response == other.response
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Status Code: {self.status_code}, Data Length: {len(self.data)}"

    # Status filters

    def filter_status_codes(self, codes: Container[int]) -> Response:
        if self.status_code not in codes:
            raise InvalidStatusCodeError(self)
        return self

    def filter_status_code(self, code: int) -> Response:
        return self.filter_status_codes((code,))

    def filter_successful_status_codes(self) -> Response:
        return self.filter_status_codes(range(200, 300))

    def filter_successful_status_and_redirect_codes(self) -> Response:
        return self.filter_status_codes(range(200, 400))

    # Body mapping

    def map_json(self, fails_on_empty_data: bool = True) -> Any:
        """Parse the body as JSON; an empty body maps to None when `fails_on_empty_data` is False."""
        try:
            return json.loads(self.data)
        except ValueError as exc:
            if not self.data and not fails_on_empty_data:
                return None
            raise JSONMappingError(self) from exc

    def map_string(self, key_path: str | None = None) -> str:
        """Return the body as UTF-8 text, or the string at a dotted `key_path` in the JSON body."""
        if key_path:
            try:
                root = self.map_json()
            except JSONMappingError as exc:
                raise StringMappingError(self) from exc
            value = _value_at_key_path(root, key_path)
            if not isinstance(value, str):
                raise StringMappingError(self)
            return value

        try:
            return self.data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise StringMappingError(self) from exc

    def map(
        self,
        target: Callable[..., T] | type[T],
        key_path: str | None = None,
        decoder: Callable[[bytes], Any] = json.loads,
        fails_on_empty_data: bool = True,
    ) -> T:
        """
        Build `target` from the body.

        `target.from_mapping(obj)` is preferred when present, dataclasses are
        built from keyword arguments, and anything else is called with the
        decoded value. An empty body with `fails_on_empty_data=False` tries an
        empty object, then an empty list.
        """
        if key_path:
            value = _value_at_key_path(self.map_json(fails_on_empty_data=fails_on_empty_data), key_path)
            if value is _MISSING:
                raise JSONMappingError(self)
            try:
                return _build(target, value)
            except (TypeError, ValueError, KeyError) as exc:
                raise DecodableMappingError(exc, self) from exc

        candidates = [self.data]
        if not self.data and not fails_on_empty_data:
            candidates = [b"{}", b"[]"]

        last_error: Exception | None = None
        for candidate in candidates:
            try:
                return _build(target, decoder(candidate))
            except (TypeError, ValueError, KeyError) as exc:
                last_error = exc
        raise DecodableMappingError(last_error, self) from last_error


def _value_at_key_path(root: Any, key_path: str) -> Any:
    current = root
    for part in key_path.split("."):
        if isinstance(current, Mapping) and part in current:
            current = current[part]
        else:
            return _MISSING
    return current


def _build(target: Any, value: Any) -> Any:
    from_mapping = getattr(target, "from_mapping", None)
    if callable(from_mapping) and isinstance(value, Mapping):
        return from_mapping(value)
    if dataclasses.is_dataclass(target) and isinstance(target, type):
        if not isinstance(value, Mapping):
            raise TypeError(f"{target.__name__} expects a JSON object, got {type(value).__name__}")
        return target(**value)
    return target(value)


__all__ = ["Response"]
