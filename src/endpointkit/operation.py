# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Cancellable handles for in-flight calls."""

from __future__ import annotations

import logging
import threading
from typing import Protocol

from .http.transport import TaskState, TransportTask

logger = logging.getLogger(__name__)


class Cancellable(Protocol):
    @property
    def cancelled(self) -> bool: ...

    def cancel(self) -> None: ...


class RequestOperation:
    """
    Latching cancellation flag, optionally bound to a transport task.

    Cancelling propagates to the task only while it is still running or
    suspended; a finished task is left alone.
    """

    def __init__(self, task: TransportTask | None = None):
        self.task = task
        self._lock = threading.Lock()
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        with self._lock:
            return self._cancelled

    def attach(self, task: TransportTask) -> None:
        """Bind the transport task; a cancel that arrived first is applied now."""
        with self._lock:
            self.task = task
            cancelled = self._cancelled
        if cancelled:
            self._cancel_task(task)

    def cancel(self) -> None:
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
            task = self.task

        if task is not None:
            self._cancel_task(task)

    @staticmethod
    def _cancel_task(task: TransportTask) -> None:
        if task.state in (TaskState.RUNNING, TaskState.SUSPENDED):
            task.cancel()
        else:
            logger.debug("Cancel ignored, task already %s", task.state.value)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"RequestOperation(cancelled={self._cancelled}, task={self.task!r})"


class DeferredRequestOperation:
    """Handle returned before the real operation exists; `bind` attaches it later."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._cancelled = False
        self._inner: Cancellable | None = None

    @property
    def cancelled(self) -> bool:
        with self._lock:
            return self._cancelled

    @property
    def inner(self) -> Cancellable | None:
        return self._inner

    def bind(self, operation: Cancellable) -> None:
        with self._lock:
            self._inner = operation
            cancel_now = self._cancelled
        if cancel_now:
            logger.debug("Applying pending cancellation on bind")
            operation.cancel()

    def cancel(self) -> None:
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
            inner = self._inner
        if inner is not None:
            inner.cancel()

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"DeferredRequestOperation(cancelled={self._cancelled}, bound={self._inner is not None})"


__all__ = ["Cancellable", "DeferredRequestOperation", "RequestOperation"]
