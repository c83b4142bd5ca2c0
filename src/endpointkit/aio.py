# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""asyncio adapters over the callback-based Provider API."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable, Container, Generator
from typing import TYPE_CHECKING, Any, TypeVar

from .response import Response
from .result import Result

if TYPE_CHECKING:
    from .dispatch import ExecutionContext
    from .endpoint import Endpoint
    from .provider import Provider

T = TypeVar("T")


def _settle(future: asyncio.Future, result: Result[Response]) -> None:
    if future.done():
        return
    if result.is_success:
        future.set_result(result.value)
    else:
        future.set_exception(result.error)


async def request(provider: Provider, endpoint: Endpoint, *, context: ExecutionContext | None = None) -> Response:
    """
    Issue one request and await its Response.

    Raises the delivered EndpointKitError on failure. Cancelling the awaiting
    task cancels the underlying operation.
    """
    loop = asyncio.get_running_loop()
    future: asyncio.Future = loop.create_future()

    def completion(result: Result[Response]) -> None:
        if not loop.is_closed():
            loop.call_soon_threadsafe(_settle, future, result)

    operation = provider.request(endpoint, completion, context=context)
    try:
        return await future
    except asyncio.CancelledError:
        operation.cancel()
        raise


class ResponseSingle:
    """
    Cold awaitable for one endpoint; each await issues a new request.

    Filters chain and return a new single. Mappers await the response and
    decode it.
    """

    def __init__(
        self,
        provider: Provider,
        endpoint: Endpoint,
        context: ExecutionContext | None = None,
        _transforms: tuple[Callable[[Response], Response], ...] = (),
    ):
        self.provider = provider
        self.endpoint = endpoint
        self.context = context
        self._transforms = _transforms

    def __await__(self) -> Generator[Any, None, Response]:
        return self._run().__await__()

    async def _run(self) -> Response:
        response = await request(self.provider, self.endpoint, context=self.context)
        for transform in self._transforms:
            response = transform(response)
        return response

    def _then(self, transform: Callable[[Response], Response]) -> ResponseSingle:
        return ResponseSingle(self.provider, self.endpoint, self.context, self._transforms + (transform,))

    def filter_status_codes(self, codes: Container[int]) -> ResponseSingle:
        return self._then(lambda response: response.filter_status_codes(codes))

    def filter_status_code(self, code: int) -> ResponseSingle:
        return self._then(lambda response: response.filter_status_code(code))

    def filter_successful_status_codes(self) -> ResponseSingle:
        return self._then(Response.filter_successful_status_codes)

    def filter_successful_status_and_redirect_codes(self) -> ResponseSingle:
        return self._then(Response.filter_successful_status_and_redirect_codes)

    async def map_json(self, fails_on_empty_data: bool = True) -> Any:
        return (await self).map_json(fails_on_empty_data=fails_on_empty_data)

    async def map_string(self, key_path: str | None = None) -> str:
        return (await self).map_string(key_path)

    async def map(
        self,
        target: Callable[..., T] | type[T],
        key_path: str | None = None,
        decoder: Callable[[bytes], Any] = json.loads,
        fails_on_empty_data: bool = True,
    ) -> T:
        return (await self).map(target, key_path=key_path, decoder=decoder, fails_on_empty_data=fails_on_empty_data)


__all__ = ["ResponseSingle", "request"]
