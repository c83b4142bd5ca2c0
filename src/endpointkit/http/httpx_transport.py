# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""httpx-backed Transport implementation."""

from __future__ import annotations

import logging
import os
import tempfile
import threading
from collections.abc import Callable
from concurrent.futures import Executor, ThreadPoolExecutor

import httpx

from ..config import TransportSettings, load_transport_settings
from ..errors import TransportError, URLErrorCode
from .models import WireRequest
from .transport import DataCompletion, DownloadCompletion, TaskState

logger = logging.getLogger(__name__)

# Returns False to stop reading.
ChunkSink = Callable[[bytes], bool]


class HttpxTask:
    """Cooperative task handle; workers poll `cancelled` between chunks."""

    def __init__(self, request: WireRequest):
        self.request = request
        self._lock = threading.Lock()
        self._state = TaskState.RUNNING

    @property
    def state(self) -> TaskState:
        with self._lock:
            return self._state

    @property
    def cancelled(self) -> bool:
        return self.state is TaskState.CANCELING

    def cancel(self) -> None:
        with self._lock:
            if self._state in (TaskState.RUNNING, TaskState.SUSPENDED):
                self._state = TaskState.CANCELING

    def _finish(self) -> None:
        with self._lock:
            self._state = TaskState.COMPLETED

    def __repr__(self) -> str:
        return f"HttpxTask({self.request.method} {self.request.url}, state={self._state.value})"


class HttpxTransport:
    """Runs each call on a worker pool using a shared synchronous httpx client."""

    def __init__(
        self,
        settings: TransportSettings | None = None,
        client: httpx.Client | None = None,
        executor: Executor | None = None,
    ):
        self.settings = settings or load_transport_settings()
        self._client = client or httpx.Client(
            follow_redirects=self.settings.allow_redirects,
            timeout=self.settings.timeout,
            verify=self.settings.verify_ssl,
        )
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=self.settings.max_workers,
            thread_name_prefix="endpointkit-transport",
        )

    def send(self, request: WireRequest, completion: DataCompletion) -> HttpxTask:
        task = HttpxTask(request)
        self._executor.submit(self._run_data, task, completion)
        return task

    def download(self, request: WireRequest, completion: DownloadCompletion) -> HttpxTask:
        task = HttpxTask(request)
        self._executor.submit(self._run_download, task, completion)
        return task

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=False)
        self._client.close()

    def _run_data(self, task: HttpxTask, completion: DataCompletion) -> None:
        max_body_bytes = self.settings.max_body_bytes
        content = bytearray()

        def sink(chunk: bytes) -> bool:
            remaining = max_body_bytes - len(content)
            if len(chunk) > remaining:
                content.extend(chunk[:remaining])
                logger.debug("Body of %s truncated at %d bytes", task.request.url, max_body_bytes)
                return False
            content.extend(chunk)
            return True

        response, error = self._execute(task, sink)
        task._finish()
        body = None if error is not None and response is None else bytes(content)
        self._complete(completion, body, response, error)

    def _run_download(self, task: HttpxTask, completion: DownloadCompletion) -> None:
        handle = tempfile.NamedTemporaryFile(prefix="endpointkit-", suffix=".download", delete=False)
        with handle:
            response, error = self._execute(task, lambda chunk: handle.write(chunk) >= 0)
        task._finish()
        path: str | None = handle.name
        if error is not None:
            os.unlink(handle.name)
            path = None
        self._complete(completion, path, response, error)

    def _execute(self, task: HttpxTask, sink: ChunkSink) -> tuple[httpx.Response | None, BaseException | None]:
        request = task.request
        if task.cancelled:
            return None, TransportError(URLErrorCode.CANCELLED)

        headers = dict(request.headers)
        if request.header("User-Agent") is None:
            headers["User-Agent"] = self.settings.user_agent

        try:
            with self._client.stream(
                request.method,
                request.url or "",
                headers=headers,
                content=request.body,
                timeout=self.settings.timeout,
                follow_redirects=self.settings.allow_redirects,
            ) as resp:
                for chunk in resp.iter_bytes(self.settings.chunk_size):
                    if task.cancelled:
                        logger.debug("Task %r cancelled while streaming", task)
                        return resp, TransportError(URLErrorCode.CANCELLED)
                    if not chunk:
                        continue
                    if not sink(chunk):
                        break
            return resp, None
        except Exception as exc:  # noqa: BLE001
            logger.debug("Transport failure for %s %s: %s", request.method, request.url, exc)
            return None, exc

    @staticmethod
    def _complete(completion, payload, response, error) -> None:  # noqa: ANN001
        try:
            completion(payload, response, error)
        except Exception:  # noqa: BLE001
            logger.exception("Transport completion raised")


__all__ = ["HttpxTask", "HttpxTransport"]
