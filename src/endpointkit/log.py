# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Logging helpers for endpointkit."""

from __future__ import annotations

import logging
import os

DEFAULT_LOG_LEVEL = "WARNING"
LOG_FORMAT = "%(levelname)s %(name)s [%(threadName)s]: %(message)s"


def resolve_log_level(level: str | None = None) -> int:
    name = (level or os.getenv("ENDPOINTKIT_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper()
    value = getattr(logging, name, None)
    return value if isinstance(value, int) else logging.WARNING


def setup_logging(level: str | None = None) -> None:
    """Configure stdlib logging for CLI use; `level` overrides ENDPOINTKIT_LOG_LEVEL."""
    numeric = resolve_log_level(level)
    logging.basicConfig(level=numeric, format=LOG_FORMAT)
    # httpx logs every request at INFO; keep it behind our own request log lines.
    if numeric > logging.DEBUG:
        logging.getLogger("httpx").setLevel(max(numeric, logging.WARNING))


__all__ = ["resolve_log_level", "setup_logging"]
