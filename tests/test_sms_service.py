# tests/test_sms_service.py
"""Tests for the Twilio SMS sender, using httpx.MockTransport instead of the network."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import httpx
import pytest
from unittest.mock import patch
from urllib.parse import parse_qs
from app.config import settings
from app.services.sms_service import send_sms

_RealAsyncClient = httpx.AsyncClient


@pytest.fixture
def twilio_configured(monkeypatch):
    monkeypatch.setattr(settings, "TWILIO_ACCOUNT_SID", "AC123")
    monkeypatch.setattr(settings, "TWILIO_AUTH_TOKEN", "token")
    monkeypatch.setattr(settings, "TWILIO_PHONE_NUMBER", "+15550000000")


def mock_gateway(handler):
    transport = httpx.MockTransport(handler)
    return patch("app.services.sms_service.httpx.AsyncClient",
                 side_effect=lambda **kwargs: _RealAsyncClient(transport=transport, **kwargs))


class TestSendSms:
    @pytest.mark.asyncio
    async def test_unconfigured_gateway_is_skipped(self):
        with mock_gateway(lambda request: pytest.fail("no request expected")):
            assert await send_sms("+15551234567", "hi") is False

    @pytest.mark.asyncio
    async def test_accepted_message(self, twilio_configured):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["form"] = parse_qs(request.content.decode())
            seen["auth"] = request.headers.get("authorization", "")
            return httpx.Response(201, json={"sid": "SM1"})

        with mock_gateway(handler):
            assert await send_sms("+15551234567", "Your order is CCH-1") is True

        assert seen["url"].endswith("/Accounts/AC123/Messages.json")
        assert seen["form"] == {"To": ["+15551234567"], "From": ["+15550000000"],
                                "Body": ["Your order is CCH-1"]}
        assert seen["auth"].startswith("Basic ")

    @pytest.mark.asyncio
    async def test_rejected_message_returns_false(self, twilio_configured):
        with mock_gateway(lambda request: httpx.Response(400, json={"message": "invalid To"})):
            assert await send_sms("+1", "hi") is False

    @pytest.mark.asyncio
    async def test_network_error_returns_false(self, twilio_configured):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        with mock_gateway(handler):
            assert await send_sms("+15551234567", "hi") is False
