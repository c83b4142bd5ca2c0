# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import dataclasses
import json
import os
from datetime import date
from enum import Enum

import httpx
import pytest

from endpointkit.config import TransportSettings
from endpointkit.errors import JSONEncodingFailed, MissingURL, ParameterEncodingError, TransportError
from endpointkit.http.encoding import (
    FORM_CONTENT_TYPE,
    ArrayEncoding,
    BoolEncoding,
    JSONEncoding,
    URLEncoding,
)
from endpointkit.http.headers import add_header, header_value, merge_headers, normalize_headers, set_header
from endpointkit.http.httpx_transport import HttpxTransport
from endpointkit.http.models import WireRequest
from endpointkit.http.transport import TaskState
from endpointkit.http.url import append_path, append_query, is_absolute_url


class ImmediateExecutor:
    def submit(self, fn, *args):
        fn(*args)

    def shutdown(self, wait=True):  # noqa: ARG002
        self.shut_down = True


def test_header_helpers_are_case_insensitive():
    headers = {"Content-Type": "text/plain", "X-Token": "abc"}
    assert header_value(headers, "content-type") == "text/plain"
    assert header_value(headers, "missing", "fallback") == "fallback"
    assert header_value(httpx.Headers({"X-A": "1"}), "x-a") == "1"
    assert header_value([("X-B", "2")], "x-b") == "2"
    assert normalize_headers({"X-A": None, "": "skip"}) == {"x-a": ""}

    replaced = set_header(headers, "content-type", "application/json")
    assert replaced == {"X-Token": "abc", "content-type": "application/json"}

    combined = add_header({"Accept": "text/html"}, "accept", "application/json")
    assert combined == {"Accept": "text/html,application/json"}

    merged = merge_headers({"A": "1", "B": "2"}, {"b": "3"})
    assert merged == {"A": "1", "b": "3"}


def test_url_helpers():
    assert append_path("https://api.github.com", "/zen") == "https://api.github.com/zen"
    assert append_path("https://api.github.com/", "users/me") == "https://api.github.com/users/me"
    assert append_path("https://api.github.com/v1", "") == "https://api.github.com/v1"
    assert is_absolute_url("https://example.com/a?b=c")
    assert not is_absolute_url("/relative/path")
    assert not is_absolute_url("https://exa mple.com")
    assert not is_absolute_url("")
    assert append_query("https://x/a?one=1", "two=2") == "https://x/a?one=1&two=2"
    assert append_query("https://x/a", "two=2") == "https://x/a?two=2"


def test_wire_request_equality_ignores_header_name_case():
    first = WireRequest("https://x", "get", {"X-Token": "a"}, b"body")
    second = WireRequest("https://x", "GET", {"x-token": "a"}, b"body")
    assert first == second
    assert hash(first) == hash(second)
    assert first != second.with_body(b"other")
    assert first.with_header("x-token", "b").headers == {"x-token": "b"}
    assert first.adding_header("X-Token", "b").header("x-token") == "a,b"


def test_url_encoding_query_string_example():
    request = WireRequest("https://api.example.com/villains", "POST")
    encoded = URLEncoding.query_string().encode(request, {"Baddie": "DarthVader"})
    assert encoded.url.endswith("?Baddie=DarthVader")
    assert encoded.body is None


def test_url_encoding_method_dependent_destination():
    params = {"b": 2, "a": "x y"}
    get = URLEncoding().encode(WireRequest("https://x/s", "GET"), params)
    assert get.url == "https://x/s?a=x%20y&b=2"
    assert get.body is None

    post = URLEncoding().encode(WireRequest("https://x/s", "POST"), params)
    assert post.url == "https://x/s"
    assert post.body == b"a=x%20y&b=2"
    assert post.header("Content-Type") == FORM_CONTENT_TYPE

    keep = URLEncoding.http_body().encode(WireRequest("https://x", "GET", {"content-type": "text/custom"}), params)
    assert keep.header("Content-Type") == "text/custom"


def test_url_encoding_nested_arrays_and_bools():
    params = {"tags": ["a", "b"], "filter": {"z": 1, "k": True}, "skip": None, "q": "a&b=c"}
    query = URLEncoding().query(params)
    assert query == "filter%5Bk%5D=1&filter%5Bz%5D=1&q=a%26b%3Dc&tags%5B%5D=a&tags%5B%5D=b"

    plain = URLEncoding(array_encoding=ArrayEncoding.NO_BRACKETS, bool_encoding=BoolEncoding.LITERAL)
    assert plain.query({"ids": [1, 2], "on": False}) == "ids=1&ids=2&on=false"


def test_url_encoding_appends_to_existing_query_and_skips_empty():
    request = WireRequest("https://x/s?page=1", "GET")
    assert URLEncoding().encode(request, {"size": 10}).url == "https://x/s?page=1&size=10"
    assert URLEncoding().encode(request, {}).url == "https://x/s?page=1"
    assert URLEncoding().encode(request, None) is request


def test_url_encoding_requires_url():
    with pytest.raises(ParameterEncodingError) as excinfo:
        URLEncoding.query_string().encode(WireRequest(None), {"a": 1})
    assert isinstance(excinfo.value.reason, MissingURL)


class Color(Enum):
    RED = "red"


@dataclasses.dataclass
class Point:
    x: int
    y: int


def test_json_encoding_body_and_content_type():
    request = WireRequest("https://x", "POST")
    encoded = JSONEncoding().encode(request, {"p": Point(1, 2), "c": Color.RED, "d": date(2024, 1, 2), "t": (1, 2)})
    assert json.loads(encoded.body) == {"p": {"x": 1, "y": 2}, "c": "red", "d": "2024-01-02", "t": [1, 2]}
    assert encoded.header("Content-Type") == "application/json"

    pretty = JSONEncoding.pretty_printed().encode_json_object(request, [1])
    assert pretty.body == b"[\n  1\n]"

    custom = JSONEncoding().encode(request.with_header("Content-Type", "application/vnd.api+json"), {"a": 1})
    assert custom.header("content-type") == "application/vnd.api+json"


def test_json_encoding_failure_is_wrapped():
    with pytest.raises(ParameterEncodingError) as excinfo:
        JSONEncoding().encode(WireRequest("https://x", "POST"), {"bad": object()})
    assert isinstance(excinfo.value.reason, JSONEncodingFailed)
    assert isinstance(excinfo.value.reason.error, TypeError)


def _fake_client(calls, chunks=(b"hello ", b"world"), status_code=200):
    class Resp:
        def __init__(self):
            self.status_code = status_code
            self.headers = httpx.Headers({"Content-Type": "text/plain"})

        def iter_bytes(self, chunk_size=None):  # noqa: ARG002
            yield from chunks

    class _Ctx:
        def __enter__(self):
            return Resp()

        def __exit__(self, exc_type, exc, tb):  # noqa: ARG002
            return None

    class FakeHttpxClient:
        def stream(self, method, url, headers=None, content=None, timeout=None, follow_redirects=None):
            calls.append(
                {
                    "method": method,
                    "url": url,
                    "headers": headers,
                    "content": content,
                    "timeout": timeout,
                    "follow_redirects": follow_redirects,
                }
            )
            return _Ctx()

        def close(self):
            calls.append({"closed": True})

    return FakeHttpxClient()


def test_httpx_transport_send_collects_body():
    calls, outcomes = [], []
    settings = TransportSettings(user_agent="UA/1.0", timeout=1.5, allow_redirects=False)
    transport = HttpxTransport(settings, client=_fake_client(calls), executor=ImmediateExecutor())

    task = transport.send(
        WireRequest("https://x/a", "POST", {"X": "1"}, b"payload"),
        lambda body, raw, error: outcomes.append((body, raw, error)),
    )

    body, raw, error = outcomes[0]
    assert error is None
    assert body == b"hello world"
    assert raw.status_code == 200
    assert task.state is TaskState.COMPLETED
    assert calls[0]["headers"] == {"X": "1", "User-Agent": "UA/1.0"}
    assert calls[0]["content"] == b"payload"
    assert calls[0]["timeout"] == 1.5
    assert calls[0]["follow_redirects"] is False

    transport.close()
    assert calls[-1] == {"closed": True}


def test_httpx_transport_caps_body_size():
    outcomes = []
    settings = TransportSettings(max_body_bytes=8)
    transport = HttpxTransport(settings, client=_fake_client([]), executor=ImmediateExecutor())
    transport.send(WireRequest("https://x"), lambda body, raw, error: outcomes.append(body))
    assert outcomes == [b"hello wo"]


def test_httpx_transport_reports_library_errors():
    class ErrorClient:
        def stream(self, *_, **__):
            raise httpx.ConnectError("refused")

    outcomes = []
    transport = HttpxTransport(TransportSettings(), client=ErrorClient(), executor=ImmediateExecutor())
    transport.send(WireRequest("https://x"), lambda body, raw, error: outcomes.append((body, raw, error)))
    body, raw, error = outcomes[0]
    assert body is None and raw is None
    assert isinstance(error, httpx.ConnectError)


def test_httpx_transport_stops_when_cancelled_between_chunks():
    outcomes = []
    holder = {}

    def chunks():
        yield b"first"
        holder["task"].cancel()
        yield b"second"

    class DeferredExecutor:
        def __init__(self):
            self.jobs = []

        def submit(self, fn, *args):
            self.jobs.append((fn, args))

    executor = DeferredExecutor()
    transport = HttpxTransport(TransportSettings(), client=_fake_client([], chunks=chunks()), executor=executor)
    holder["task"] = transport.send(WireRequest("https://x"), lambda body, raw, error: outcomes.append((body, raw, error)))
    fn, args = executor.jobs.pop()
    fn(*args)

    body, raw, error = outcomes[0]
    assert isinstance(error, TransportError) and error.is_cancelled
    assert raw is not None
    assert holder["task"].state is TaskState.COMPLETED


def test_httpx_transport_skips_call_cancelled_before_start():
    calls, outcomes = [], []

    class DeferredExecutor:
        def __init__(self):
            self.jobs = []

        def submit(self, fn, *args):
            self.jobs.append((fn, args))

    executor = DeferredExecutor()
    transport = HttpxTransport(TransportSettings(), client=_fake_client(calls), executor=executor)
    task = transport.send(WireRequest("https://x"), lambda body, raw, error: outcomes.append(error))
    task.cancel()
    fn, args = executor.jobs.pop()
    fn(*args)

    assert calls == []
    assert outcomes[0].is_cancelled


def test_httpx_transport_download_writes_temp_file():
    outcomes = []
    transport = HttpxTransport(TransportSettings(), client=_fake_client([]), executor=ImmediateExecutor())
    transport.download(WireRequest("https://x/file"), lambda path, raw, error: outcomes.append((path, raw, error)))

    path, raw, error = outcomes[0]
    assert error is None
    try:
        with open(path, "rb") as handle:
            assert handle.read() == b"hello world"
    finally:
        os.unlink(path)
