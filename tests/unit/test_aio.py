# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import asyncio
from dataclasses import dataclass

import pytest

from endpointkit import aio
from endpointkit.dispatch import InlineContext
from endpointkit.endpoint import Endpoint, HTTPMethod
from endpointkit.errors import InvalidStatusCodeError, NetworkError
from endpointkit.http.adapters import StubTransport
from endpointkit.provider import Provider, immediately_stub


class Octocat(Endpoint):
    base_url = "https://api.github.com"
    path = "users/octocat"
    method = HTTPMethod.GET
    test_data = b'{"login": "octocat", "id": 583231}'


@dataclass
class User:
    login: str
    id: int


def test_request_resolves_with_response():
    provider = Provider(stub_decision=immediately_stub, transport=StubTransport())
    response = asyncio.run(aio.request(provider, Octocat()))
    assert response.status_code == 200
    assert response.map_json()["login"] == "octocat"


def test_request_raises_delivered_error():
    transport = StubTransport()
    provider = Provider(transport=transport, context=InlineContext())
    with pytest.raises(NetworkError):
        asyncio.run(aio.request(provider, Octocat()))


def test_task_cancellation_cancels_operation():
    transport = StubTransport(auto_complete=False)
    transport.add("https://api.github.com/users/octocat", body="{}")
    provider = Provider(transport=transport, context=InlineContext())

    async def scenario():
        task = asyncio.ensure_future(aio.request(provider, Octocat()))
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())
    assert transport.tasks[0].cancel_calls == 1


def test_response_single_is_cold_and_chains_filters():
    transport = StubTransport()
    transport.add("https://api.github.com/users/octocat", status_code=200, body=Octocat.test_data)
    provider = Provider(transport=transport, context=InlineContext())
    single = aio.ResponseSingle(provider, Octocat())

    async def scenario():
        user = await single.filter_successful_status_codes().map(User)
        login = await single.map_string("login")
        data = await single.map_json()
        return user, login, data

    user, login, data = asyncio.run(scenario())
    assert user == User("octocat", 583231)
    assert login == "octocat"
    assert data["id"] == 583231
    assert len(transport.requests) == 3


def test_response_single_filter_failure():
    transport = StubTransport()
    transport.add("https://api.github.com/users/octocat", status_code=404, body="{}")
    provider = Provider(transport=transport, context=InlineContext())

    async def scenario():
        await aio.ResponseSingle(provider, Octocat()).filter_status_code(200)

    with pytest.raises(InvalidStatusCodeError):
        asyncio.run(scenario())
