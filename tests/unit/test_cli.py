# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import importlib
import json

import pytest

from endpointkit.cli.main import build_endpoint, build_parser, parse_status_codes, result_to_dict
from endpointkit.endpoint import CompositeData, CompositeParameters, Data, JSONEncodable, Parameters, Plain
from endpointkit.errors import InvalidStatusCodeError, NetworkError, TransportError, URLErrorCode
from endpointkit.http.adapters import StubTransport
from endpointkit.middleware import AccessTokenAuthorizable
from endpointkit.provider import Provider
from endpointkit.response import Response
from endpointkit.result import Failure, Success

cli = importlib.import_module("endpointkit.cli.main")


def test_build_parser_defaults():
    args = build_parser().parse_args(["https://example.com", "--json"])
    assert args.url == "https://example.com"
    assert args.method == "GET"
    assert args.json is True
    assert args.header == [] and args.param == []
    assert args.stub is None


def test_build_endpoint_request_types():
    parser = build_parser()

    plain = build_endpoint(parser.parse_args(["https://x"]))
    assert isinstance(plain.request_type, Plain)
    assert plain.headers is None

    params = build_endpoint(parser.parse_args(["https://x", "-p", "a=1", "-p", "b=2"]))
    assert isinstance(params.request_type, Parameters)
    assert params.request_type.parameters == {"a": "1", "b": "2"}

    data = build_endpoint(parser.parse_args(["https://x", "-X", "post", "--data", "raw", "-H", "X-A: 1"]))
    assert isinstance(data.request_type, Data)
    assert data.method.value == "POST"
    assert data.headers == {"X-A": "1"}

    composite = build_endpoint(parser.parse_args(["https://x", "--data", "raw", "-p", "page=2"]))
    assert isinstance(composite.request_type, CompositeData)

    json_body = build_endpoint(parser.parse_args(["https://x", "--json-body", '{"a": 1}']))
    assert isinstance(json_body.request_type, JSONEncodable)

    both = build_endpoint(parser.parse_args(["https://x", "--json-body", '{"a": 1}', "-p", "dry=1"]))
    assert isinstance(both.request_type, CompositeParameters)


def test_build_endpoint_rejects_bad_input():
    parser = build_parser()
    with pytest.raises(ValueError):
        build_endpoint(parser.parse_args(["https://x", "-H", "no-colon"]))
    with pytest.raises(ValueError):
        build_endpoint(parser.parse_args(["https://x", "--json-body", "[1]", "-p", "a=1"]))


def test_token_and_validation_options():
    args = build_parser().parse_args(["https://x", "--token", "t", "--token-type", "Token", "--expect-status", "200-202,204"])
    endpoint = build_endpoint(args)
    assert isinstance(endpoint, AccessTokenAuthorizable)
    assert endpoint.access_token_type.value == "Token"
    assert endpoint.validation.codes == frozenset({200, 201, 202, 204})
    assert parse_status_codes("404").codes == frozenset({404})


def test_result_to_dict_success_and_failure():
    ok = result_to_dict(Success(Response(200, b"hi")))
    assert ok == {"ok": True, "status_code": 200, "headers": {}, "body": "hi"}

    rejected = result_to_dict(Failure(InvalidStatusCodeError(Response(404, b"nope"))))
    assert rejected["ok"] is False
    assert rejected["category"] == "HTTP_STATUS"
    assert rejected["status_code"] == 404

    cancelled = result_to_dict(Failure(NetworkError(TransportError(URLErrorCode.CANCELLED))))
    assert cancelled["reason"] == "Request cancelled"
    assert "status_code" not in cancelled


def test_main_with_stub_prints_json(capsys, monkeypatch):
    monkeypatch.setattr(cli, "setup_logging", lambda level=None: None)
    code = cli.main(["https://api.github.com/zen", "--stub", "Half measures", "--json"])
    payload = json.loads(capsys.readouterr().out)
    assert code == 0
    assert payload["ok"] is True
    assert payload["body"] == "Half measures"


def test_main_reports_failure_exit_code(capsys, monkeypatch):
    monkeypatch.setattr(cli, "setup_logging", lambda level=None: None)
    transport = StubTransport()
    transport.add("https://api.example.com/missing", status_code=404, body="gone")

    original = Provider.__init__

    def with_stub_transport(self, *args, **kwargs):
        kwargs["transport"] = transport
        original(self, *args, **kwargs)

    monkeypatch.setattr(Provider, "__init__", with_stub_transport)
    code = cli.main(["https://api.example.com/missing", "--expect-status", "200"])
    captured = capsys.readouterr()
    assert code == 1
    assert "Unexpected HTTP status code" in captured.err
    assert transport.requests[0].url == "https://api.example.com/missing"
