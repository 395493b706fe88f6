"""
Tests for admitlead/services/solapi.py - Solapi SMS/LMS client.
HTTP calls go to an httpx.MockTransport; no network.
"""
import hashlib
import hmac
import json
from unittest.mock import patch

import httpx
import pytest

from admitlead.config import Settings
from admitlead.services.solapi import (
    SEND_PATH,
    build_auth_header,
    get_byte_length,
    get_message_type,
    send_message,
)


def _settings(**overrides):
    values = dict(
        solapi_api_key="KEY123",
        solapi_api_secret="SECRET456",
        solapi_sender_phone="02-1234-5678",
        solapi_api_url="https://api.solapi.test",
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def configured():
    with patch("admitlead.config.get_settings", return_value=_settings()):
        yield


class TestMessageType:
    def test_korean_counts_three_bytes(self):
        assert get_byte_length("안녕") == 6

    def test_short_text_is_sms(self):
        assert get_message_type("a" * 90) == "SMS"

    def test_over_ninety_bytes_is_lms(self):
        assert get_message_type("a" * 91) == "LMS"
        assert get_message_type("가" * 31) == "LMS"

    def test_thirty_korean_chars_is_sms(self):
        assert get_message_type("가" * 30) == "SMS"


class TestBuildAuthHeader:
    def test_signature(self):
        header = build_auth_header("KEY", "SECRET", date="2026-10-18T00:00:00.000Z", salt="abc")
        expected = hmac.new(b"SECRET", b"2026-10-18T00:00:00.000Zabc", hashlib.sha256).hexdigest()
        assert header == (
            "HMAC-SHA256 apiKey=KEY, date=2026-10-18T00:00:00.000Z, "
            f"salt=abc, signature={expected}"
        )

    def test_random_salt_per_call(self):
        a = build_auth_header("KEY", "SECRET", date="d")
        b = build_auth_header("KEY", "SECRET", date="d")
        assert a != b


class TestSendMessage:
    async def test_success(self, configured):
        captured = {}

        def handler(request: httpx.Request):
            captured["url"] = str(request.url)
            captured["auth"] = request.headers["Authorization"]
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={"messageId": "M4V20261018", "statusCode": "2000"})

        result = await send_message("010-1234-5678", "안녕하세요", transport=httpx.MockTransport(handler))

        assert result == {"success": True, "message_id": "M4V20261018", "error": None}
        assert captured["url"] == "https://api.solapi.test" + SEND_PATH
        assert captured["auth"].startswith("HMAC-SHA256 apiKey=KEY123, ")
        assert captured["body"] == {
            "message": {"to": "01012345678", "from": "0212345678", "text": "안녕하세요", "type": "SMS"}
        }

    async def test_long_text_sent_as_lms(self, configured):
        captured = {}

        def handler(request):
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={"messageId": "M1"})

        await send_message("01012345678", "가" * 40, transport=httpx.MockTransport(handler))
        assert captured["body"]["message"]["type"] == "LMS"

    async def test_api_error_message(self, configured):
        def handler(request):
            return httpx.Response(400, json={"errorCode": "ValidationError", "errorMessage": "수신번호 형식 오류"})

        result = await send_message("0101", "hi", transport=httpx.MockTransport(handler))
        assert result == {"success": False, "message_id": None, "error": "수신번호 형식 오류"}

    async def test_api_error_without_body(self, configured):
        def handler(request):
            return httpx.Response(502, text="Bad Gateway")

        result = await send_message("01012345678", "hi", transport=httpx.MockTransport(handler))
        assert result["success"] is False
        assert result["error"] == "Message send failed"

    async def test_network_error(self, configured):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        result = await send_message("01012345678", "hi", transport=httpx.MockTransport(handler))
        assert result["success"] is False
        assert result["error"] == "Network error while contacting Solapi"

    async def test_missing_credentials(self):
        def handler(request):
            raise AssertionError("must not call Solapi without credentials")

        with patch("admitlead.config.get_settings", return_value=_settings(solapi_api_key="")):
            result = await send_message("01012345678", "hi", transport=httpx.MockTransport(handler))
        assert result == {"success": False, "message_id": None, "error": "Solapi credentials are not configured"}
