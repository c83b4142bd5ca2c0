# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for endpointkit."""

import os
from dataclasses import dataclass

from .version import __version__

DEFAULT_USER_AGENT = f"endpointkit/{__version__}"


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _positive_int_env(name: str, default: int) -> int:
    value = _int_env(name, default)
    return value if value > 0 else default


@dataclass
class TransportSettings:
    """Transport defaults shared by providers and the httpx transport."""

    timeout: float = 30.0
    allow_redirects: bool = True
    verify_ssl: bool = True
    user_agent: str = DEFAULT_USER_AGENT
    max_body_bytes: int = 16 * 1024 * 1024
    max_workers: int = 8
    chunk_size: int = 64 * 1024

    @classmethod
    def from_env(cls) -> "TransportSettings":
        """Create settings from environment variables (evaluated at call time)."""
        return cls(
            timeout=_float_env("ENDPOINTKIT_HTTP_TIMEOUT", cls.timeout),
            allow_redirects=_bool_env("ENDPOINTKIT_HTTP_REDIRECTS", cls.allow_redirects),
            verify_ssl=_bool_env("ENDPOINTKIT_HTTP_VERIFY_SSL", cls.verify_ssl),
            user_agent=os.getenv("ENDPOINTKIT_USER_AGENT", cls.user_agent),
            max_body_bytes=_positive_int_env("ENDPOINTKIT_HTTP_MAX_BODY_BYTES", cls.max_body_bytes),
            max_workers=_positive_int_env("ENDPOINTKIT_TRANSPORT_WORKERS", cls.max_workers),
            chunk_size=_positive_int_env("ENDPOINTKIT_HTTP_CHUNK_SIZE", cls.chunk_size),
        )


def load_transport_settings() -> TransportSettings:
    """Load transport settings from environment with sensible defaults."""
    return TransportSettings.from_env()
