# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Deterministic, programmable transport for tests and offline runs."""

from __future__ import annotations

import tempfile
import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from urllib.parse import urlsplit, urlunsplit

import httpx

from ..errors import TransportError, URLErrorCode
from .models import WireRequest
from .transport import DataCompletion, DownloadCompletion, TaskState


@dataclass
class StubbedReply:
    status_code: int = 200
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)
    error: BaseException | None = None


class StubTask:
    def __init__(self, request: WireRequest):
        self.request = request
        self._lock = threading.Lock()
        self._state = TaskState.RUNNING
        self.cancel_calls = 0

    @property
    def state(self) -> TaskState:
        with self._lock:
            return self._state

    def cancel(self) -> None:
        with self._lock:
            self.cancel_calls += 1
            if self._state in (TaskState.RUNNING, TaskState.SUSPENDED):
                self._state = TaskState.CANCELING

    def _finish(self) -> bool:
        """Mark completed; returns True when the task had been cancelled."""
        with self._lock:
            was_cancelled = self._state is TaskState.CANCELING
            self._state = TaskState.COMPLETED
            return was_cancelled


class StubTransport:
    """
    Transport that answers from a URL-keyed table instead of the network.

    With `auto_complete=False`, calls stay in flight until `complete_pending()`.
    """

    def __init__(self, replies: Mapping[str, StubbedReply] | None = None, *, auto_complete: bool = True):
        self._replies: dict[str, StubbedReply] = dict(replies or {})
        self.auto_complete = auto_complete
        self.requests: list[WireRequest] = []
        self.tasks: list[StubTask] = []
        self._pending: list[Callable[[], None]] = []
        self._lock = threading.Lock()
        self.closed = False

    def add(
        self,
        url: str,
        *,
        status_code: int = 200,
        body: bytes | str = b"",
        headers: Mapping[str, str] | None = None,
        error: BaseException | None = None,
    ) -> None:
        data = body.encode("utf-8") if isinstance(body, str) else bytes(body)
        self._replies[url] = StubbedReply(status_code=status_code, body=data, headers=dict(headers or {}), error=error)

    def send(self, request: WireRequest, completion: DataCompletion) -> StubTask:
        task = self._start(request)

        def fire() -> None:
            if task._finish():
                completion(None, None, TransportError(URLErrorCode.CANCELLED))
                return
            reply, response = self._reply_for(request)
            if reply is None:
                completion(None, None, TransportError(URLErrorCode.UNKNOWN, f"No stubbed response configured for {request.url}"))
                return
            completion(None if reply.error and response is None else reply.body, response, reply.error)

        self._schedule(fire)
        return task

    def download(self, request: WireRequest, completion: DownloadCompletion) -> StubTask:
        task = self._start(request)

        def fire() -> None:
            if task._finish():
                completion(None, None, TransportError(URLErrorCode.CANCELLED))
                return
            reply, response = self._reply_for(request)
            if reply is None:
                completion(None, None, TransportError(URLErrorCode.UNKNOWN, f"No stubbed response configured for {request.url}"))
                return
            if reply.error is not None:
                completion(None, response, reply.error)
                return
            with tempfile.NamedTemporaryFile(prefix="endpointkit-stub-", suffix=".download", delete=False) as handle:
                handle.write(reply.body)
            completion(handle.name, response, None)

        self._schedule(fire)
        return task

    def complete_pending(self) -> int:
        """Fire every held call in submission order; returns how many fired."""
        with self._lock:
            pending, self._pending = self._pending, []
        for fire in pending:
            fire()
        return len(pending)

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def close(self) -> None:
        self.closed = True

    def _start(self, request: WireRequest) -> StubTask:
        task = StubTask(request)
        with self._lock:
            self.requests.append(request)
            self.tasks.append(task)
        return task

    def _schedule(self, fire: Callable[[], None]) -> None:
        if self.auto_complete:
            fire()
            return
        with self._lock:
            self._pending.append(fire)

    def _reply_for(self, request: WireRequest) -> tuple[StubbedReply | None, httpx.Response | None]:
        url = request.url or ""
        reply = self._replies.get(url)
        if reply is None:
            parts = urlsplit(url)
            reply = self._replies.get(urlunsplit((parts.scheme, parts.netloc, parts.path, "", "")))
        if reply is None:
            return None, None
        if reply.error is not None and reply.status_code <= 0:
            return reply, None
        response = httpx.Response(
            reply.status_code,
            headers=reply.headers,
            content=reply.body,
            request=httpx.Request(request.method, url),
        )
        return reply, response


__all__ = ["StubTask", "StubTransport", "StubbedReply"]
