# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Request orchestration.

A Provider turns an Endpoint into a Request, resolves it into a WireRequest,
decides between a stubbed or a live call, runs middleware hooks around it and
delivers a Result to the caller's completion. With `track_in_progress=True`
identical concurrent requests share one underlying call.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum

from .config import TransportSettings, load_transport_settings
from .dispatch import ExecutionContext, main_context
from .endpoint import Download, DownloadParameters, Endpoint, endpoint_url
from .errors import (
    EndpointKitError,
    InvalidStatusCodeError,
    MisconfigurationError,
    NetworkError,
    cancellation_error,
)
from .http.models import WireRequest
from .http.transport import Transport, create_default_transport
from .middleware.base import Middleware
from .operation import DeferredRequestOperation, RequestOperation
from .request import Request, SampleCustomResponse, SampleNetworkError, SampleNetworkResponse
from .response import Response
from .result import Failure, Result, Success, map_response_to_result

logger = logging.getLogger(__name__)

Completion = Callable[[Result[Response]], None]
RequestResultCallback = Callable[[Result[WireRequest]], None]
EndpointMapping = Callable[[Endpoint], Request]
RequestMapping = Callable[[Request, RequestResultCallback], None]


class StubKind(str, Enum):
    NEVER = "never"
    IMMEDIATE = "immediate"
    DELAYED = "delayed"


@dataclass(frozen=True)
class StubBehavior:
    kind: StubKind = StubKind.NEVER
    delay: float = 0.0

    @classmethod
    def never(cls) -> StubBehavior:
        return cls(StubKind.NEVER)

    @classmethod
    def immediate(cls) -> StubBehavior:
        return cls(StubKind.IMMEDIATE)

    @classmethod
    def delayed(cls, seconds: float) -> StubBehavior:
        return cls(StubKind.DELAYED, float(seconds))


StubDecision = Callable[[Endpoint], StubBehavior]


def never_stub(_endpoint: Endpoint) -> StubBehavior:
    return StubBehavior.never()


def immediately_stub(_endpoint: Endpoint) -> StubBehavior:
    return StubBehavior.immediate()


def delayed_stub(seconds: float) -> StubDecision:
    behavior = StubBehavior.delayed(seconds)

    def decide(_endpoint: Endpoint) -> StubBehavior:
        return behavior

    return decide


def default_endpoint_mapping(endpoint: Endpoint) -> Request:
    test_data = endpoint.test_data
    return Request(
        url=endpoint_url(endpoint),
        sample_response=lambda: SampleNetworkResponse(200, test_data),
        method=endpoint.method,
        request_type=endpoint.request_type,
        headers=endpoint.headers,
    )


def default_request_mapping(request: Request, callback: RequestResultCallback) -> None:
    """Resolve synchronously; runtime failures become a Failure, misconfiguration propagates."""
    try:
        wire_request = request.wire_request()
    except MisconfigurationError:
        raise
    except EndpointKitError as exc:
        callback(Failure(exc))
        return
    except Exception as exc:  # noqa: BLE001
        callback(Failure(NetworkError(exc)))
        return
    callback(Success(wire_request))


class Provider:
    """
    Orchestrates the request lifecycle for any Endpoint.

    Completions are delivered on the per-call context, else the instance
    context, else `main_context()`. Immediate stubs without any context run
    inline on the calling thread.
    """

    def __init__(
        self,
        endpoint_mapping: EndpointMapping = default_endpoint_mapping,
        request_mapping: RequestMapping = default_request_mapping,
        stub_decision: StubDecision = never_stub,
        context: ExecutionContext | None = None,
        transport: Transport | None = None,
        settings: TransportSettings | None = None,
        middleware: Sequence[Middleware] = (),
        track_in_progress: bool = False,
    ):
        self.endpoint_mapping = endpoint_mapping
        self.request_mapping = request_mapping
        self.stub_decision = stub_decision
        self.context = context
        self.settings = settings or load_transport_settings()
        self.transport = transport or create_default_transport(self.settings)
        self.middleware: tuple[Middleware, ...] = tuple(middleware)
        self.track_in_progress = track_in_progress
        self._lock = threading.Lock()
        self._in_progress: dict[Request, list[Completion]] = {}

    @property
    def in_progress(self) -> dict[Request, list[Completion]]:
        """Snapshot of the in-flight table."""
        with self._lock:
            return {request: list(waiters) for request, waiters in self._in_progress.items()}

    def request_for(self, endpoint: Endpoint) -> Request:
        return self.endpoint_mapping(endpoint)

    def request(
        self,
        endpoint: Endpoint,
        completion: Completion,
        *,
        context: ExecutionContext | None = None,
    ) -> DeferredRequestOperation:
        request = self.request_for(endpoint)
        stub_behavior = self.stub_decision(endpoint)
        operation = DeferredRequestOperation()

        def processed(result: Result[Response]) -> None:
            for middleware in self.middleware:
                result = middleware.process(result, endpoint)
            completion(result)

        if self.track_in_progress:
            with self._lock:
                waiters = self._in_progress.get(request)
                if waiters is not None:
                    waiters.append(processed)
                    logger.debug("Joined in-flight %s (%d waiters)", request.url, len(waiters))
                    return operation
                self._in_progress[request] = [processed]
            network_completion = self._tracked_completion(request, processed)
        else:
            network_completion = processed

        def perform(request_result: Result[WireRequest]) -> None:
            if isinstance(request_result, Failure):
                logger.debug("Resolution failed for %s: %s", request.url, request_result.error)
                network_completion(request_result)
                return

            delivered = threading.Event()

            def deliver(result: Result[Response]) -> None:
                delivered.set()
                network_completion(result)

            try:
                prepared = self._prepare(request_result.value, endpoint)
                if operation.cancelled:
                    logger.debug("Cancelled before dispatch: %s", request.url)
                    self._cancel_completion(deliver, endpoint)
                    return

                inner = self._perform_request(endpoint, prepared, deliver, request, stub_behavior, context)
            except MisconfigurationError:
                raise
            except Exception as exc:  # noqa: BLE001
                # An inline completion that raised has already been delivered.
                if delivered.is_set():
                    raise
                logger.warning("Dispatch failed for %s: %s", request.url, exc)
                network_completion(Failure(NetworkError(exc)))
                return
            operation.bind(inner)

        self.request_mapping(request, perform)
        return operation

    def stub_request(
        self,
        endpoint: Endpoint,
        wire_request: WireRequest,
        completion: Completion,
        request: Request,
        stub_behavior: StubBehavior,
        *,
        context: ExecutionContext | None = None,
    ) -> RequestOperation:
        if stub_behavior.kind is StubKind.NEVER:
            raise MisconfigurationError("stub_request requires an immediate or delayed stub behavior")

        operation = RequestOperation()
        self._notify_will_send(wire_request, endpoint)
        stub = self._stub_function(operation, endpoint, wire_request, completion, request)
        target = context or self.context

        if stub_behavior.kind is StubKind.IMMEDIATE:
            logger.debug("Stubbing %s immediately", wire_request.url)
            if target is None:
                stub()
            else:
                target.dispatch(stub)
        else:
            logger.debug("Stubbing %s after %.3fs", wire_request.url, stub_behavior.delay)
            (target or main_context()).dispatch_after(stub_behavior.delay, stub)
        return operation

    def close(self) -> None:
        self.transport.close()

    def __enter__(self) -> Provider:
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:  # noqa: ANN001
        self.close()

    # Internals

    def _tracked_completion(self, request: Request, fallback: Completion) -> Completion:
        def complete(result: Result[Response]) -> None:
            with self._lock:
                waiters = self._in_progress.pop(request, [fallback])
            for waiter in waiters:
                waiter(result)

        return complete

    def _prepare(self, wire_request: WireRequest, endpoint: Endpoint) -> WireRequest:
        for middleware in self.middleware:
            wire_request = middleware.prepare(wire_request, endpoint)
        return wire_request

    def _notify_will_send(self, wire_request: WireRequest, endpoint: Endpoint) -> None:
        for middleware in self.middleware:
            middleware.will_send(wire_request, endpoint)

    def _notify_did_receive(self, result: Result[Response], endpoint: Endpoint) -> None:
        for middleware in self.middleware:
            middleware.did_receive(result, endpoint)

    def _cancel_completion(self, completion: Completion, endpoint: Endpoint) -> None:
        result: Result[Response] = Failure(cancellation_error())
        self._notify_did_receive(result, endpoint)
        completion(result)

    def _delivery_context(self, context: ExecutionContext | None) -> ExecutionContext:
        return context or self.context or main_context()

    def _perform_request(
        self,
        endpoint: Endpoint,
        wire_request: WireRequest,
        completion: Completion,
        request: Request,
        stub_behavior: StubBehavior,
        context: ExecutionContext | None,
    ) -> RequestOperation:
        if stub_behavior.kind is not StubKind.NEVER:
            return self.stub_request(endpoint, wire_request, completion, request, stub_behavior, context=context)

        if request.request_type.is_download:
            return self._send_download(endpoint, wire_request, completion, request, context)
        return self._send(endpoint, wire_request, completion, context)

    def _send(
        self,
        endpoint: Endpoint,
        wire_request: WireRequest,
        completion: Completion,
        context: ExecutionContext | None,
    ) -> RequestOperation:
        operation = RequestOperation()
        codes = endpoint.validation.codes

        def on_complete(data, raw_response, error) -> None:  # noqa: ANN001
            result = map_response_to_result(raw_response, wire_request, codes, data, error)
            self._notify_did_receive(result, endpoint)
            self._delivery_context(context).dispatch(lambda: completion(result))

        self._notify_will_send(wire_request, endpoint)
        operation.attach(self.transport.send(wire_request, on_complete))
        return operation

    def _send_download(
        self,
        endpoint: Endpoint,
        wire_request: WireRequest,
        completion: Completion,
        request: Request,
        context: ExecutionContext | None,
    ) -> RequestOperation:
        operation = RequestOperation()
        codes = endpoint.validation.codes
        request_type = request.request_type
        destination = request_type.destination if isinstance(request_type, (Download, DownloadParameters)) else None

        def on_complete(path, raw_response, error) -> None:  # noqa: ANN001
            result = map_response_to_result(raw_response, wire_request, codes, b"", error)
            self._notify_did_receive(result, endpoint)

            def deliver() -> None:
                final = result
                if destination is not None:
                    try:
                        destination(path, raw_response)
                    except Exception as exc:  # noqa: BLE001
                        logger.debug("Download destination raised for %s: %s", wire_request.url, exc)
                        final = Failure(NetworkError(exc, result.value if result.is_success else None))
                completion(final)

            self._delivery_context(context).dispatch(deliver)

        self._notify_will_send(wire_request, endpoint)
        operation.attach(self.transport.download(wire_request, on_complete))
        return operation

    def _stub_function(
        self,
        operation: RequestOperation,
        endpoint: Endpoint,
        wire_request: WireRequest,
        completion: Completion,
        request: Request,
    ) -> Callable[[], None]:
        codes = endpoint.validation.codes

        def stub() -> None:
            if operation.cancelled:
                logger.debug("Stub for %s cancelled", wire_request.url)
                self._cancel_completion(completion, endpoint)
                return

            sample = request.sample_response()
            result: Result[Response]
            if isinstance(sample, SampleNetworkResponse):
                response = Response(sample.status_code, sample.data, wire_request)
                if codes and sample.status_code not in codes:
                    result = Failure(InvalidStatusCodeError(response))
                else:
                    result = Success(response)
            elif isinstance(sample, SampleCustomResponse):
                result = map_response_to_result(sample.response, wire_request, codes, sample.data, None)
            elif isinstance(sample, SampleNetworkError):
                result = Failure(NetworkError(sample.error))
            else:
                raise MisconfigurationError(f"Unsupported sample response: {sample!r}")

            self._notify_did_receive(result, endpoint)
            completion(result)

        return stub


__all__ = [
    "Completion",
    "EndpointMapping",
    "Provider",
    "RequestMapping",
    "RequestResultCallback",
    "StubBehavior",
    "StubDecision",
    "StubKind",
    "default_endpoint_mapping",
    "default_request_mapping",
    "delayed_stub",
    "immediately_stub",
    "never_stub",
]
