# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Execution contexts that completions are delivered on."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Protocol

logger = logging.getLogger(__name__)

Callback = Callable[[], None]


class ExecutionContext(Protocol):
    def dispatch(self, fn: Callback) -> None: ...

    def dispatch_after(self, delay: float, fn: Callback) -> None: ...


def _run_logged(fn: Callback) -> None:
    try:
        fn()
    except Exception:  # noqa: BLE001
        logger.exception("Callback raised on execution context")


def _start_timer(delay: float, fn: Callback) -> threading.Timer:
    timer = threading.Timer(max(float(delay), 0.0), fn)
    timer.daemon = True
    timer.name = "endpointkit-timer"
    timer.start()
    return timer


class InlineContext:
    """Runs work on the calling thread; delayed work fires on a timer thread."""

    def dispatch(self, fn: Callback) -> None:
        fn()

    def dispatch_after(self, delay: float, fn: Callback) -> None:
        _start_timer(delay, lambda: _run_logged(fn))


class ExecutorContext:
    def __init__(self, executor: Executor):
        self.executor = executor

    def dispatch(self, fn: Callback) -> None:
        self.executor.submit(_run_logged, fn)

    def dispatch_after(self, delay: float, fn: Callback) -> None:
        _start_timer(delay, lambda: self.dispatch(fn))

    def close(self) -> None:
        self.executor.shutdown(wait=True)


class SerialContext(ExecutorContext):
    """Single worker thread; work runs in submission order."""

    def __init__(self, name: str = "endpointkit-serial"):
        self.name = name
        super().__init__(ThreadPoolExecutor(max_workers=1, thread_name_prefix=name))

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"SerialContext({self.name!r})"


_main_lock = threading.Lock()
_main: SerialContext | None = None


def main_context() -> SerialContext:
    """Process-wide default foreground context, created on first use."""
    global _main
    with _main_lock:
        if _main is None:
            _main = SerialContext("endpointkit-main")
        return _main


__all__ = [
    "Callback",
    "ExecutionContext",
    "ExecutorContext",
    "InlineContext",
    "SerialContext",
    "main_context",
]
