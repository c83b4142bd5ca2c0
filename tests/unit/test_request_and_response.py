# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import json
from dataclasses import dataclass

import httpx
import pytest

from endpointkit.endpoint import (
    CompositeData,
    CompositeParameters,
    Data,
    Download,
    DownloadParameters,
    HTTPMethod,
    JSONEncodable,
    Parameters,
    Plain,
)
from endpointkit.errors import (
    DecodableMappingError,
    EncodableMappingError,
    InvalidStatusCodeError,
    JSONEncodingFailed,
    JSONMappingError,
    MisconfigurationError,
    ParameterEncodingError,
    RequestMappingError,
    StringMappingError,
)
from endpointkit.http.encoding import JSONEncoding, URLEncoding
from endpointkit.request import Request, SampleNetworkResponse
from endpointkit.response import Response


def _sample():
    return SampleNetworkResponse(200, b"")


def make_request(url="https://api.example.com/items", method=HTTPMethod.GET, request_type=None, headers=None):
    return Request(url, _sample, method, request_type or Plain(), headers)


def test_plain_and_data_resolution():
    wire = make_request(headers={"Accept": "text/plain"}).wire_request()
    assert wire.url == "https://api.example.com/items"
    assert wire.method == "GET"
    assert wire.body is None
    assert wire.header("accept") == "text/plain"

    data = make_request(method=HTTPMethod.PUT, request_type=Data(b"raw")).wire_request()
    assert data.method == "PUT"
    assert data.body == b"raw"


def test_json_encodable_sets_content_type_only_when_absent():
    wire = make_request(method=HTTPMethod.POST, request_type=JSONEncodable({"a": 1})).wire_request()
    assert json.loads(wire.body) == {"a": 1}
    assert wire.header("Content-Type") == "application/json"

    custom = make_request(
        method=HTTPMethod.POST,
        request_type=JSONEncodable({"a": 1}),
        headers={"content-type": "application/merge-patch+json"},
    ).wire_request()
    assert custom.header("Content-Type") == "application/merge-patch+json"


def test_json_encodable_custom_encoder_and_failure():
    class Money:
        def __init__(self, cents):
            self.cents = cents

    class MoneyEncoder(json.JSONEncoder):
        def default(self, o):
            if isinstance(o, Money):
                return f"{o.cents / 100:.2f}"
            return super().default(o)

    wire = make_request(method=HTTPMethod.POST, request_type=JSONEncodable({"price": Money(150)}, MoneyEncoder)).wire_request()
    assert json.loads(wire.body) == {"price": "1.50"}

    with pytest.raises(EncodableMappingError) as excinfo:
        make_request(method=HTTPMethod.POST, request_type=JSONEncodable({"price": Money(1)})).wire_request()
    assert isinstance(excinfo.value.error, TypeError)


def test_parameters_and_composite_resolution():
    get = make_request(request_type=Parameters({"q": "a b"})).wire_request()
    assert get.url == "https://api.example.com/items?q=a%20b"

    composite = make_request(
        method=HTTPMethod.POST, request_type=CompositeData(b"payload", {"page": 2})
    ).wire_request()
    assert composite.body == b"payload"
    assert composite.url.endswith("?page=2")

    both = make_request(
        method=HTTPMethod.POST,
        request_type=CompositeParameters({"name": "x"}, JSONEncoding(), {"dry_run": True}),
    ).wire_request()
    assert json.loads(both.body) == {"name": "x"}
    assert both.url.endswith("?dry_run=1")


def test_download_variants_resolution():
    def destination(path, raw):  # noqa: ARG001
        return None

    assert make_request(request_type=Download(destination)).wire_request().body is None
    wire = make_request(request_type=DownloadParameters({"v": 1}, URLEncoding(), destination)).wire_request()
    assert wire.url.endswith("?v=1")
    assert Download(destination).is_download and DownloadParameters({}, URLEncoding(), destination).is_download
    assert not Plain().is_download
    assert Download(destination).name == "download"


def test_composite_parameters_rejects_non_body_url_encoding():
    with pytest.raises(MisconfigurationError):
        CompositeParameters({"a": 1}, URLEncoding.query_string(), {})
    with pytest.raises(MisconfigurationError):
        CompositeParameters({"a": 1}, URLEncoding(), {})
    CompositeParameters({"a": 1}, URLEncoding.http_body(), {})


def test_invalid_url_raises_request_mapping_error():
    with pytest.raises(RequestMappingError) as excinfo:
        make_request(url="not a url").wire_request()
    assert excinfo.value.url == "not a url"


def test_encoder_failures_are_wrapped():
    class ExplodingEncoding:
        def encode(self, request, parameters):  # noqa: ARG002
            raise RuntimeError("boom")

    with pytest.raises(ParameterEncodingError) as excinfo:
        make_request(request_type=Parameters({"a": 1}, ExplodingEncoding())).wire_request()
    assert isinstance(excinfo.value.reason, JSONEncodingFailed)
    assert str(excinfo.value.reason.error) == "boom"


def test_body_model_errors_are_wrapped_and_keep_hashing_safe():
    class Payload:
        def to_mapping(self):
            raise RuntimeError("boom")

    request = make_request(method=HTTPMethod.POST, request_type=JSONEncodable(Payload()))
    with pytest.raises(EncodableMappingError) as excinfo:
        request.wire_request()
    assert isinstance(excinfo.value.error, RuntimeError)
    assert hash(request) == hash(request.url)


def test_request_equality_follows_resolution():
    first = make_request(request_type=Parameters({"a": 1, "b": 2}))
    second = make_request(request_type=Parameters({"b": 2, "a": 1}))
    assert first == second
    assert hash(first) == hash(second)
    assert first == first

    other = make_request(request_type=Parameters({"a": 2}))
    assert first != other

    # Same resolved form through different variants.
    explicit = Request("https://api.example.com/items?a=1&b=2", _sample)
    assert explicit == first


def test_unresolvable_requests_compare_by_url():
    broken_a = make_request(url="bad url")
    broken_b = make_request(url="bad url", method=HTTPMethod.POST)
    assert broken_a == broken_b
    assert hash(broken_a) == hash(broken_b)
    assert broken_a != make_request()


def test_adding_headers_and_replacing_request_type():
    request = make_request(headers={"A": "1"})
    updated = request.adding_headers({"a": "2", "B": "3"})
    assert updated.headers == {"a": "2", "B": "3"}
    assert request.headers == {"A": "1"}
    assert updated != request

    replaced = request.replacing_request_type(Data(b"x"))
    assert isinstance(replaced.request_type, Data)
    assert isinstance(request.request_type, Plain)


def test_response_equality_and_repr():
    raw = object()
    assert Response(200, b"a", response=raw) == Response(200, b"a", response=raw)
    assert Response(200, b"a") != Response(201, b"a")
    assert Response(200, b"a", response=raw) != Response(200, b"a", response=object())
    assert repr(Response(204, b"abc")) == "Status Code: 204, Data Length: 3"


def test_response_headers_come_from_raw_response():
    raw = httpx.Response(200, headers={"X-Rate-Limit": "10"})
    assert Response(200, b"", response=raw).headers["x-rate-limit"] == "10"
    assert Response(200).headers == {}


def test_response_status_filters():
    ok = Response(204)
    assert ok.filter_successful_status_codes() is ok
    assert ok.filter_status_code(204) is ok
    assert Response(302).filter_successful_status_and_redirect_codes().status_code == 302

    with pytest.raises(InvalidStatusCodeError) as excinfo:
        Response(302).filter_successful_status_codes()
    assert excinfo.value.response.status_code == 302
    with pytest.raises(InvalidStatusCodeError):
        Response(500).filter_status_codes([200, 201])


def test_response_map_json_and_string():
    response = Response(200, b'{"user": {"name": "Ada", "age": 36}}')
    assert response.map_json() == {"user": {"name": "Ada", "age": 36}}
    assert response.map_string("user.name") == "Ada"

    with pytest.raises(StringMappingError):
        response.map_string("user.age")
    with pytest.raises(StringMappingError):
        Response(200, b"\xff\xfe").map_string()
    with pytest.raises(JSONMappingError):
        Response(200, b"not json").map_json()

    assert Response(200, b"").map_json(fails_on_empty_data=False) is None
    with pytest.raises(JSONMappingError):
        Response(200, b"").map_json()
    assert Response(200, b"plain text").map_string() == "plain text"


@dataclass
class User:
    name: str
    age: int


class Repo:
    def __init__(self, full_name):
        self.full_name = full_name

    @classmethod
    def from_mapping(cls, data):
        return cls(data["full_name"])


def test_response_map_typed_objects():
    response = Response(200, b'{"user": {"name": "Ada", "age": 36}, "repo": {"full_name": "a/b"}}')
    assert response.map(User, key_path="user") == User("Ada", 36)
    assert response.map(Repo, key_path="repo").full_name == "a/b"
    assert Response(200, b"[1, 2]").map(list) == [1, 2]

    with pytest.raises(DecodableMappingError):
        Response(200, b'{"name": "Ada"}').map(User)
    with pytest.raises(JSONMappingError):
        response.map(User, key_path="missing")


def test_response_map_empty_body_fallbacks():
    assert Response(200, b"").map(dict, fails_on_empty_data=False) == {}
    assert Response(200, b"").map(list, fails_on_empty_data=False) == []

    with pytest.raises(DecodableMappingError):
        Response(200, b"").map(dict)
