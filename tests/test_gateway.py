"""
QuickNote - Lambda Gateway Tests
==================================

What:  Tests for API Gateway event translation and in-process replay.
How:   Literal v1 / v2 / console-test events; handle_event() replays them
       through create_app() wired to the in-memory storage fake.

What we test:
    ✅ Envelope detection (v2, v1, test, unsupported)
    ✅ Request extraction: body decoding, query re-encoding, cookies, source IP
    ✅ Response packing: text as-is, binary base64
    ✅ Full write/read through v2 and v1 events share the HTTP code path
"""

import base64
import json

import pytest

from quicknote.gateway.events import (
    GatewayRequest,
    UnsupportedEventError,
    build_v1_response,
    build_v2_response,
    detect_event_kind,
    request_from_test_event,
    request_from_v1,
    request_from_v2,
)
from quicknote.gateway.handler import handle_event
from quicknote.main import create_app


def v2_event(method="GET", path="/", query="", headers=None, body=None, is_base64=False, source_ip="198.51.100.9"):
    return {
        "version": "2.0",
        "routeKey": "$default",
        "rawPath": path,
        "rawQueryString": query,
        "headers": headers or {},
        "requestContext": {
            "http": {"method": method, "path": path, "sourceIp": source_ip},
        },
        "body": body,
        "isBase64Encoded": is_base64,
    }


def v1_event(method="GET", path="/", query=None, multi_query=None, headers=None, body=None, is_base64=False):
    return {
        "resource": "/{proxy+}",
        "path": path,
        "httpMethod": method,
        "headers": headers,
        "queryStringParameters": query,
        "multiValueQueryStringParameters": multi_query,
        "requestContext": {"identity": {"sourceIp": "203.0.113.5"}},
        "body": body,
        "isBase64Encoded": is_base64,
    }


class TestDetectEventKind:

    def test_v2(self):
        assert detect_event_kind(v2_event()) == "v2"

    def test_v1(self):
        assert detect_event_kind(v1_event()) == "v1"

    def test_console_test_event(self):
        assert detect_event_kind({"key1": "value1", "key2": "value2"}) == "test"

    @pytest.mark.parametrize(
        "event",
        [
            {},
            [],
            "string",
            None,
            {"rawPath": "/"},
            {"requestContext": {"stage": "prod"}},
        ],
    )
    def test_unsupported(self, event):
        with pytest.raises(UnsupportedEventError):
            detect_event_kind(event)


class TestRequestExtraction:

    def test_v2_request(self):
        event = v2_event(
            method="post",
            path="/prod/noteid/AB3K9",
            query="noteId=Q1&x=1",
            headers={"Content-Type": "text/plain", "User-Agent": "curl/8"},
            body="hello",
        )
        event["cookies"] = ["a=1", "b=2"]
        req = request_from_v2(event)

        assert req.method == "POST"
        assert req.path == "/prod/noteid/AB3K9"
        assert req.target == "/prod/noteid/AB3K9?noteId=Q1&x=1"
        assert req.headers["content-type"] == "text/plain"
        assert req.headers["cookie"] == "a=1; b=2"
        assert req.body == b"hello"
        assert req.source_ip == "198.51.100.9"

    def test_v2_base64_body(self):
        raw = "ünïcode body".encode("utf-8")
        req = request_from_v2(v2_event(method="POST", body=base64.b64encode(raw).decode(), is_base64=True))
        assert req.body == raw

    def test_v1_query_reencoded(self):
        req = request_from_v1(v1_event(query={"note": "AB3K9", "q": "a b&c"}))
        assert req.query_string == "note=AB3K9&q=a+b%26c"
        assert req.source_ip == "203.0.113.5"

    def test_v1_prefers_multi_value_query(self):
        req = request_from_v1(v1_event(query={"k": "last"}, multi_query={"k": ["first", "last"]}))
        assert req.query_string == "k=first&k=last"

    def test_v1_multi_value_headers_fallback(self):
        event = v1_event()
        event["multiValueHeaders"] = {"Accept": ["text/html", "application/json"]}
        req = request_from_v1(event)
        assert req.headers["accept"] == "text/html, application/json"

    def test_test_event_is_get_root(self):
        req = request_from_test_event()
        assert (req.method, req.path, req.body) == ("GET", "/", b"")


class TestResponsePacking:

    def test_text_body_as_is(self):
        resp = build_v2_response(200, {"content-type": "text/plain; charset=utf-8"}, "ok ✎".encode("utf-8"))
        assert resp == {
            "statusCode": 200,
            "headers": {"content-type": "text/plain; charset=utf-8"},
            "body": "ok ✎",
            "isBase64Encoded": False,
        }

    def test_json_body_as_is(self):
        resp = build_v1_response(400, {"content-type": "application/json"}, b'{"success":false}')
        assert resp["body"] == '{"success":false}'
        assert resp["isBase64Encoded"] is False

    def test_binary_body_base64(self):
        data = b"\x00\x00\x01\x00binary"
        resp = build_v2_response(200, {"content-type": "image/x-icon"}, data)
        assert resp["isBase64Encoded"] is True
        assert base64.b64decode(resp["body"]) == data

    def test_non_utf8_text_body_base64(self):
        data = b"\x89PNG\xff\xfe"
        resp = build_v1_response(200, {"content-type": "text/plain; charset=utf-8"}, data)
        assert resp["isBase64Encoded"] is True
        assert base64.b64decode(resp["body"]) == data

    def test_empty_body(self):
        resp = build_v1_response(200, {}, b"")
        assert resp["body"] == ""
        assert resp["isBase64Encoded"] is False


class TestHandleEvent:

    @pytest.fixture(autouse=True)
    def _app(self, memory_storage):
        self.storage = memory_storage
        self.app = create_app(storage=memory_storage)

    @pytest.mark.asyncio
    async def test_v2_json_write_then_curl_read(self):
        write = v2_event(
            method="POST",
            path="/",
            headers={"content-type": "application/json", "host": "abc.execute-api.example"},
            body=json.dumps({"noteId": "", "content": "from lambda"}),
        )
        resp = await handle_event(write, app=self.app)

        assert resp["statusCode"] == 200
        assert resp["headers"]["access-control-allow-origin"] == "*"
        note_id = json.loads(resp["body"])["noteId"]
        assert self.storage.notes[note_id] == "from lambda"

        read = v2_event(path=f"/noteid/{note_id}", headers={"user-agent": "curl/8"})
        resp = await handle_event(read, app=self.app)
        assert resp["statusCode"] == 200
        assert resp["body"] == "from lambda"

    @pytest.mark.asyncio
    async def test_v2_curl_share_url_keeps_stage_prefix(self):
        event = v2_event(
            method="POST",
            path="/prod/",
            headers={"user-agent": "curl/8", "host": "abc.execute-api.example"},
            body="piped",
        )
        resp = await handle_event(event, app=self.app)
        assert resp["body"].startswith("https://abc.execute-api.example/prod/noteid/")

    @pytest.mark.asyncio
    async def test_v1_form_write(self):
        event = v1_event(
            method="POST",
            path="/",
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            body="text=hi&noteId=X1",
        )
        resp = await handle_event(event, app=self.app)

        assert resp["statusCode"] == 200
        assert resp["body"] == "OK: X1\n"
        assert self.storage.notes["X1"] == "hi"

    @pytest.mark.asyncio
    async def test_v1_query_read(self):
        self.storage.notes["AB3K9"] = "query read"
        event = v1_event(query={"note": "AB3K9"}, headers={"User-Agent": "curl/8"})
        resp = await handle_event(event, app=self.app)
        assert resp["body"] == "query read"

    @pytest.mark.asyncio
    async def test_binary_note_round_trip(self):
        raw = b"\x89PNG\r\n\x1a\n\xff\xfe"
        write = v2_event(
            method="POST",
            path="/noteid/BIN1",
            headers={"content-type": "application/octet-stream"},
            body=base64.b64encode(raw).decode(),
            is_base64=True,
        )
        assert (await handle_event(write, app=self.app))["statusCode"] == 200

        read = v2_event(path="/noteid/BIN1", headers={"user-agent": "curl/8"})
        resp = await handle_event(read, app=self.app)
        assert resp["isBase64Encoded"] is True
        assert base64.b64decode(resp["body"]) == raw

    @pytest.mark.asyncio
    async def test_favicon_is_base64(self):
        resp = await handle_event(v2_event(path="/favicon.ico"), app=self.app)
        assert resp["statusCode"] == 200
        assert resp["isBase64Encoded"] is True

    @pytest.mark.asyncio
    async def test_console_test_event_serves_page(self):
        resp = await handle_event({"key1": "value1"}, app=self.app)
        assert resp["statusCode"] == 200
        assert "<textarea" in resp["body"]

    @pytest.mark.asyncio
    async def test_unsupported_event(self):
        resp = await handle_event({"rawPath": "/"}, app=self.app)
        assert resp["statusCode"] == 400
        assert "Unsupported event format" in json.loads(resp["body"])["error"]

    @pytest.mark.asyncio
    async def test_invalid_id_through_gateway(self):
        event = v2_event(method="POST", headers={"content-type": "application/json"}, body='{"noteId": "../x", "content": "x"}')
        resp = await handle_event(event, app=self.app)
        assert resp["statusCode"] == 400
        assert self.storage.notes == {}


class TestGatewayRequest:

    def test_target_without_query(self):
        assert GatewayRequest(method="GET", path="/noteid/X").target == "/noteid/X"
