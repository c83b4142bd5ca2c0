# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""URL helpers shared by endpoints and encoders."""

from __future__ import annotations

from urllib.parse import SplitResult, urlsplit, urlunsplit


def append_path(base_url: str, path: str) -> str:
    """
    Append `path` to `base_url` as a path component.

    Example:
      https://api.github.com + /zen -> https://api.github.com/zen
    """
    base = str(base_url or "")
    if not path:
        return base
    return base.rstrip("/") + "/" + str(path).lstrip("/")


def split_absolute_url(raw: str | None) -> SplitResult | None:
    """Return the parsed URL when `raw` is an absolute URL, otherwise None."""
    if not raw or any(ch.isspace() for ch in raw):
        return None
    try:
        parts = urlsplit(raw)
    except ValueError:
        return None
    if not parts.scheme or not parts.netloc:
        return None
    return parts


def is_absolute_url(raw: str | None) -> bool:
    return split_absolute_url(raw) is not None


def append_query(url: str, query: str) -> str:
    """Append an already percent-encoded query string, joining with `&`."""
    parts = urlsplit(url)
    combined = f"{parts.query}&{query}" if parts.query else query
    return urlunsplit((parts.scheme, parts.netloc, parts.path, combined, parts.fragment))


__all__ = ["append_path", "append_query", "is_absolute_url", "split_absolute_url"]
