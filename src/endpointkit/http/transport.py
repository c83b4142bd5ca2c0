# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Transport abstraction and factory."""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Any, Protocol

from ..config import TransportSettings, load_transport_settings
from .models import WireRequest

# (body, raw_response, error)
DataCompletion = Callable[[bytes | None, Any | None, BaseException | None], None]
# (temporary_path, raw_response, error)
DownloadCompletion = Callable[[str | None, Any | None, BaseException | None], None]


class TaskState(str, Enum):
    RUNNING = "running"
    SUSPENDED = "suspended"
    CANCELING = "canceling"
    COMPLETED = "completed"


class TransportTask(Protocol):
    """Handle for one in-flight transport call."""

    @property
    def state(self) -> TaskState: ...

    def cancel(self) -> None: ...


class Transport(Protocol):
    """Minimal protocol for the network layer used by a Provider."""

    def send(self, request: WireRequest, completion: DataCompletion) -> TransportTask: ...

    def download(self, request: WireRequest, completion: DownloadCompletion) -> TransportTask: ...

    def close(self) -> None:  # pragma: no cover - optional for adapters
        ...


def create_default_transport(settings: TransportSettings | None = None) -> Transport:
    """Factory for the default httpx-backed transport."""
    from .httpx_transport import HttpxTransport

    return HttpxTransport(settings or load_transport_settings())


__all__ = [
    "DataCompletion",
    "DownloadCompletion",
    "TaskState",
    "Transport",
    "TransportTask",
    "create_default_transport",
]
