# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Header helpers.

HTTP header field names are case-insensitive (RFC 9110). Wire requests keep the
caller's original casing for transmission, so every lookup and replacement here
matches names case-insensitively.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


def _coerce_headers_mapping(headers: Any) -> Mapping[object, object] | None:
    """
    Best-effort coercion of "dict-like" header containers into a Mapping.

    Accepts plain dicts, httpx.Headers, objects exposing `.items()` and
    iterables of pairs.
    """
    if not headers:
        return None
    if isinstance(headers, Mapping):
        return headers

    items = getattr(headers, "items", None)
    if callable(items):
        try:
            return dict(items())
        except (TypeError, ValueError):
            pass

    try:
        return dict(headers)
    except (TypeError, ValueError):
        return None


def normalize_headers(headers: Any) -> dict[str, str]:
    """Return a lowercase-keyed copy of a header mapping."""
    coerced = _coerce_headers_mapping(headers)
    if not coerced:
        return {}
    out: dict[str, str] = {}
    for key, value in coerced.items():
        if key is None:
            continue
        name = str(key).strip().lower()
        if not name:
            continue
        out[name] = "" if value is None else str(value)
    return out


def header_value(headers: Any, name: str, default: str | None = None) -> str | None:
    """Return a header value using case-insensitive key matching."""
    if not headers or not name:
        return default

    coerced = _coerce_headers_mapping(headers)
    if not coerced:
        return default

    if name in coerced:
        value = coerced[name]
        return default if value is None else str(value)

    lower = name.lower()
    for key, value in coerced.items():
        if key is None:
            continue
        if str(key).lower() == lower:
            return default if value is None else str(value)

    return default


def set_header(headers: Mapping[str, str] | None, name: str, value: str) -> dict[str, str]:
    """Return a copy of `headers` with `name` replaced, dropping other casings of it."""
    lower = name.lower()
    out = {key: val for key, val in (headers or {}).items() if key.lower() != lower}
    out[name] = value
    return out


def add_header(headers: Mapping[str, str] | None, name: str, value: str) -> dict[str, str]:
    """Return a copy of `headers` with `value` appended to `name` (comma-combined)."""
    existing = header_value(headers, name)
    if existing is None:
        return set_header(headers, name, value)
    lower = name.lower()
    original_name = next(key for key in (headers or {}) if key.lower() == lower)
    return set_header(headers, original_name, f"{existing},{value}")


def merge_headers(base: Mapping[str, str] | None, extra: Mapping[str, str] | None) -> dict[str, str]:
    """Merge `extra` over `base`; keys from `extra` win."""
    out = dict(base or {})
    for key, value in (extra or {}).items():
        out = set_header(out, key, value)
    return out


__all__ = ["add_header", "header_value", "merge_headers", "normalize_headers", "set_header"]
