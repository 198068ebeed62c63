"""
QuickNote - API Gateway Event Translation
===========================================

What:  Pure functions between AWS Lambda event envelopes and plain HTTP
       request/response data.
How:   Detects the envelope kind, extracts method, path, query, headers,
       body and source IP into a GatewayRequest, and packs an HTTP response
       back into the envelope API Gateway expects. No I/O, no app access.
Who:   Used by gateway.handler; unit-tested directly with literal events.

Supported envelopes:
    v2    API Gateway HTTP API (payload 2.0): requestContext.http.method
    v1    API Gateway REST API proxy (payload 1.0): httpMethod
    test  Lambda console test event: any non-empty object without
          requestContext / httpMethod / rawPath, served as GET /
"""

import base64
import binascii
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Tuple
from urllib.parse import urlencode

UNSUPPORTED_EVENT_MESSAGE = (
    "Unsupported event format. This function expects API Gateway REST API v1, "
    "HTTP API v2 events, or test events from Lambda console."
)

# Content types returned to API Gateway as text; everything else is base64
_TEXT_MARKERS = ("json", "xml", "javascript", "x-www-form-urlencoded")


class UnsupportedEventError(ValueError):
    """The Lambda event is none of the supported envelopes."""


@dataclass(frozen=True)
class GatewayRequest:
    """An HTTP request extracted from a Lambda event."""

    method: str
    path: str
    query_string: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""
    source_ip: str = ""

    @property
    def target(self) -> str:
        """Path plus query string, as sent on the request line."""
        if self.query_string:
            return f"{self.path}?{self.query_string}"
        return self.path


# ── Detection ─────────────────────────────────────────────────────────────


def detect_event_kind(event: Any) -> str:
    """
    Return "v2", "v1" or "test" for `event`.

    Raises:
        UnsupportedEventError: anything else (empty object, non-object,
            partial API Gateway envelope)
    """
    if not isinstance(event, Mapping):
        raise UnsupportedEventError(f"event is a {type(event).__name__}, not an object")

    request_context = event.get("requestContext")
    if isinstance(request_context, Mapping):
        http = request_context.get("http")
        if isinstance(http, Mapping) and http.get("method"):
            return "v2"

    if event.get("httpMethod"):
        return "v1"

    if event and not any(key in event for key in ("requestContext", "httpMethod", "rawPath")):
        return "test"

    raise UnsupportedEventError(f"unrecognized event with keys {sorted(event)}")


# ── Event → request ───────────────────────────────────────────────────────


def _decode_body(body: Any, is_base64: bool) -> bytes:
    if not body:
        return b""
    if is_base64:
        try:
            return base64.b64decode(body)
        except (binascii.Error, ValueError) as e:
            raise UnsupportedEventError("body is flagged base64 but does not decode") from e
    return str(body).encode("utf-8")


def request_from_v2(event: Mapping[str, Any]) -> GatewayRequest:
    """
    Build a GatewayRequest from an HTTP API (payload 2.0) event.

    rawPath includes any stage prefix, which the catch-all route and the
    share URL both keep. The separate "cookies" list is folded back into a
    Cookie header.
    """
    http = event["requestContext"]["http"]
    headers: Dict[str, str] = {str(k).lower(): str(v) for k, v in (event.get("headers") or {}).items()}

    cookies = event.get("cookies") or []
    if cookies:
        headers["cookie"] = "; ".join(cookies)

    return GatewayRequest(
        method=str(http["method"]).upper(),
        path=event.get("rawPath") or http.get("path") or "/",
        query_string=event.get("rawQueryString") or "",
        headers=headers,
        body=_decode_body(event.get("body"), bool(event.get("isBase64Encoded"))),
        source_ip=http.get("sourceIp") or "",
    )


def _v1_query_string(event: Mapping[str, Any]) -> str:
    multi = event.get("multiValueQueryStringParameters") or {}
    if multi:
        pairs: List[Tuple[str, str]] = [(k, v) for k, values in multi.items() for v in (values or [])]
        return urlencode(pairs)
    single = event.get("queryStringParameters") or {}
    return urlencode(list(single.items()))


def _v1_headers(event: Mapping[str, Any]) -> Dict[str, str]:
    headers = event.get("headers") or {}
    if headers:
        return {str(k).lower(): str(v) for k, v in headers.items()}
    multi = event.get("multiValueHeaders") or {}
    return {str(k).lower(): ", ".join(values or []) for k, values in multi.items()}


def request_from_v1(event: Mapping[str, Any]) -> GatewayRequest:
    """
    Build a GatewayRequest from a REST API proxy (payload 1.0) event.

    REST API events carry the query already decoded, so it is re-encoded;
    multi-value parameters are preferred when present.
    """
    identity = (event.get("requestContext") or {}).get("identity") or {}
    return GatewayRequest(
        method=str(event["httpMethod"]).upper(),
        path=event.get("path") or "/",
        query_string=_v1_query_string(event),
        headers=_v1_headers(event),
        body=_decode_body(event.get("body"), bool(event.get("isBase64Encoded"))),
        source_ip=identity.get("sourceIp") or "",
    )


def request_from_test_event() -> GatewayRequest:
    """A console test event opens the new-note page."""
    return GatewayRequest(method="GET", path="/", headers={"user-agent": "lambda-test-event"})


# ── Response → envelope ───────────────────────────────────────────────────


def _is_text(headers: Mapping[str, str]) -> bool:
    content_type = ""
    for key, value in headers.items():
        if key.lower() == "content-type":
            content_type = value.lower()
            break
    if not content_type or content_type.startswith("text/"):
        return True
    return any(marker in content_type for marker in _TEXT_MARKERS)


def _encode_body(headers: Mapping[str, str], body: bytes) -> Tuple[str, bool]:
    if not body:
        return "", False
    if _is_text(headers):
        try:
            return body.decode("utf-8"), False
        except UnicodeDecodeError:
            # Text-typed yet not UTF-8 (piped binary note): fall through to base64
            pass
    return base64.b64encode(body).decode("ascii"), True


def _envelope(status_code: int, headers: Mapping[str, str], body: bytes) -> Dict[str, Any]:
    text, is_base64 = _encode_body(headers, body)
    return {
        "statusCode": status_code,
        "headers": dict(headers),
        "body": text,
        "isBase64Encoded": is_base64,
    }


def build_v2_response(status_code: int, headers: Mapping[str, str], body: bytes) -> Dict[str, Any]:
    """HTTP API (payload 2.0) response. Headers are single-valued."""
    return _envelope(status_code, headers, body)


def build_v1_response(status_code: int, headers: Mapping[str, str], body: bytes) -> Dict[str, Any]:
    """REST API proxy (payload 1.0) response."""
    return _envelope(status_code, headers, body)


def unsupported_event_response() -> Dict[str, Any]:
    """v1-shaped 400 reply, which both API Gateway flavours accept."""
    return {
        "statusCode": 400,
        "headers": {"content-type": "application/json"},
        "body": json.dumps({"error": UNSUPPORTED_EVENT_MESSAGE}),
        "isBase64Encoded": False,
    }
