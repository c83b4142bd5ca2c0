from __future__ import annotations

"""
endpointkit, declarative HTTP endpoint client with stubbing and middleware.
Copyright (C) 2025  Theori Inc.

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU Affero General Public License as published
by the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.

This program is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
GNU Affero General Public License for more details.

You should have received a copy of the GNU Affero General Public License
along with this program.  If not, see <https://www.gnu.org/licenses/>.
"""

"""endpointkit CLI."""

import argparse
import json
import sys
import threading
from collections.abc import Mapping
from typing import Any

from ..config import TransportSettings, load_transport_settings
from ..dispatch import InlineContext
from ..endpoint import (
    CompositeData,
    CompositeParameters,
    Data,
    Endpoint,
    HTTPMethod,
    JSONEncodable,
    Parameters,
    Plain,
    RequestType,
    RequestValidation,
)
from ..errors import EndpointKitError, categorize_exception, error_category_to_reason
from ..http.encoding import JSONEncoding, URLEncoding
from ..log import setup_logging
from ..middleware import AccessTokenMiddleware, AccessTokenType, LoggingMiddleware, Middleware
from ..provider import Provider, StubDecision, delayed_stub, immediately_stub, never_stub
from ..response import Response
from ..result import Result

CLI_TEXT_TRUNCATION_BYTES = 4096
_TOKEN_TYPES = {
    "bearer": AccessTokenType.bearer,
    "basic": AccessTokenType.basic,
}


class CommandLineEndpoint(Endpoint):
    """One-off endpoint assembled from command-line arguments."""

    path = ""

    def __init__(
        self,
        url: str,
        method: HTTPMethod,
        *,
        request_type: RequestType,
        headers: Mapping[str, str] | None,
        validation: RequestValidation,
        test_data: bytes,
        access_token_type: AccessTokenType,
    ):
        self._url = url
        self._method = method
        self.request_type = request_type
        self.headers = headers
        self.validation = validation
        self.test_data = test_data
        self.access_token_type = access_token_type

    @property
    def base_url(self) -> str:
        return self._url

    @property
    def method(self) -> HTTPMethod:
        return self._method


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="endpointkit HTTP client (stubbing, middleware, validation)")
    parser.add_argument("url", help="Absolute URL to request")
    parser.add_argument(
        "-X",
        "--method",
        default="GET",
        type=str.upper,
        choices=[method.value for method in HTTPMethod],
        help="HTTP method (default: GET)",
    )
    parser.add_argument(
        "-H",
        "--header",
        action="append",
        default=[],
        metavar="NAME:VALUE",
        help="Request header, may be repeated",
    )
    body = parser.add_mutually_exclusive_group()
    body.add_argument("--data", help="Raw request body")
    body.add_argument("--json-body", help="JSON document sent as the request body")
    parser.add_argument(
        "-p",
        "--param",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Parameter, may be repeated; goes to the query string alongside a body",
    )
    parser.add_argument("--token", help="Access token sent in the Authorization header")
    parser.add_argument(
        "--token-type",
        default="bearer",
        help="Authorization scheme: bearer, basic or any custom prefix (default: bearer)",
    )
    parser.add_argument(
        "--expect-status",
        metavar="CODES",
        help="Accepted status codes, e.g. '200,201' or '200-299'; anything else is a failure",
    )
    parser.add_argument("--stub", metavar="TEXT", help="Answer with TEXT (status 200) instead of calling the network")
    parser.add_argument("--stub-delay", type=float, default=0.0, metavar="S", help="Delay stubbed answers by S seconds")
    parser.add_argument("--timeout", type=float, help="Request timeout in seconds")
    parser.add_argument(
        "--ignore-ssl-errors",
        action="store_true",
        help="Skip TLS verification (useful for lab/self-signed targets)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output JSON instead of the raw body",
    )
    parser.add_argument("--log-level", help="Logging level (default: ENDPOINTKIT_LOG_LEVEL or WARNING)")
    return parser


def parse_header(raw: str) -> tuple[str, str]:
    name, sep, value = raw.partition(":")
    if not sep or not name.strip():
        raise ValueError(f"Invalid header {raw!r}, expected NAME:VALUE")
    return name.strip(), value.strip()


def parse_param(raw: str) -> tuple[str, str]:
    key, sep, value = raw.partition("=")
    if not sep or not key:
        raise ValueError(f"Invalid parameter {raw!r}, expected KEY=VALUE")
    return key, value


def parse_status_codes(raw: str) -> RequestValidation:
    codes: set[int] = set()
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            low, _, high = part.partition("-")
            codes.update(range(int(low), int(high) + 1))
        else:
            codes.add(int(part))
    return RequestValidation.custom(codes)


def _build_request_type(args: argparse.Namespace) -> RequestType:
    params = dict(parse_param(raw) for raw in args.param)

    if args.json_body is not None:
        document = json.loads(args.json_body)
        if params:
            if not isinstance(document, dict):
                raise ValueError("--json-body must be a JSON object when combined with --param")
            return CompositeParameters(document, JSONEncoding(), params)
        return JSONEncodable(document)

    if args.data is not None:
        body = args.data.encode("utf-8")
        return CompositeData(body, params) if params else Data(body)

    if params:
        return Parameters(params, URLEncoding.method_dependent())
    return Plain()


def _token_type(raw: str) -> AccessTokenType:
    factory = _TOKEN_TYPES.get(raw.lower())
    return factory() if factory else AccessTokenType.custom(raw)


def build_endpoint(args: argparse.Namespace) -> CommandLineEndpoint:
    return CommandLineEndpoint(
        args.url,
        HTTPMethod(args.method),
        request_type=_build_request_type(args),
        headers=dict(parse_header(raw) for raw in args.header) or None,
        validation=parse_status_codes(args.expect_status) if args.expect_status else RequestValidation.none(),
        test_data=(args.stub or "").encode("utf-8"),
        access_token_type=_token_type(args.token_type) if args.token else AccessTokenType.none(),
    )


def _stub_decision(args: argparse.Namespace) -> StubDecision:
    if args.stub is None:
        return never_stub
    if args.stub_delay > 0:
        return delayed_stub(args.stub_delay)
    return immediately_stub


def _truncate_text_bytes(text: str, max_bytes: int) -> str:
    raw = text.encode("utf-8")
    if len(raw) <= max_bytes:
        return text
    suffix = "...[truncated]"
    keep = max_bytes - len(suffix)
    if keep <= 0:
        return suffix[:max_bytes]
    return raw[:keep].decode("utf-8", errors="ignore") + suffix


def result_to_dict(result: Result[Response]) -> dict[str, Any]:
    if result.is_success:
        response = result.value
        return {
            "ok": True,
            "status_code": response.status_code,
            "headers": response.headers,
            "body": _truncate_text_bytes(response.text, CLI_TEXT_TRUNCATION_BYTES),
        }

    error = result.error
    category = categorize_exception(error)
    payload: dict[str, Any] = {
        "ok": False,
        "error": str(error),
        "error_type": type(error).__name__,
        "category": category.value,
        "reason": error_category_to_reason(category),
    }
    if error.response is not None:
        payload["status_code"] = error.response.status_code
        payload["body"] = _truncate_text_bytes(error.response.text, CLI_TEXT_TRUNCATION_BYTES)
    return payload


def _print_json(data: dict[str, Any]) -> None:
    json.dump(data, sys.stdout, indent=2, sort_keys=True)
    sys.stdout.write("\n")


def _pretty_print(result: Result[Response]) -> None:
    if result.is_success:
        response = result.value
        print(f"[endpointkit] HTTP {response.status_code}", file=sys.stderr)
        sys.stdout.write(response.text)
        if response.data and not response.text.endswith("\n"):
            sys.stdout.write("\n")
        return

    error: EndpointKitError = result.error
    reason = error_category_to_reason(categorize_exception(error))
    print(f"[endpointkit] {reason}: {error}", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    try:
        endpoint = build_endpoint(args)
    except ValueError as exc:
        parser.error(str(exc))

    settings: TransportSettings = load_transport_settings()
    if args.timeout is not None:
        settings.timeout = args.timeout
    if args.ignore_ssl_errors:
        settings.verify_ssl = False

    middleware: list[Middleware] = [LoggingMiddleware()]
    if args.token:
        token = args.token
        middleware.append(AccessTokenMiddleware(lambda: token))

    done = threading.Event()
    outcome: list[Result[Response]] = []

    def completion(result: Result[Response]) -> None:
        outcome.append(result)
        done.set()

    with Provider(
        stub_decision=_stub_decision(args),
        context=InlineContext(),
        settings=settings,
        middleware=middleware,
    ) as provider:
        operation = provider.request(endpoint, completion)
        try:
            done.wait()
        except KeyboardInterrupt:
            operation.cancel()
            done.wait(timeout=settings.timeout)
            return 130

    result = outcome[0]
    if args.json:
        _print_json(result_to_dict(result))
    else:
        _pretty_print(result)
    return 0 if result.is_success else 1


if __name__ == "__main__":
    raise SystemExit(main())
