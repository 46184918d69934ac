import aiohttp
import pytest

from discount_monitor.notify.telegram import TelegramConfig, TelegramGateway
from tests.helpers.fakes import FakeResponse, FakeSession


def _gateway(*responses, **cfg):
    session = FakeSession(responses)
    return TelegramGateway(TelegramConfig(bot_token="123:ABC", **cfg), session=session), session


@pytest.mark.asyncio
async def test_send_posts_chat_id_and_text():
    gw, session = _gateway(FakeResponse(200, {"ok": True, "result": {}}))

    res = await gw.send("111", "hello")

    assert res.ok is True
    req = session.requests[0]
    assert req["method"] == "POST"
    assert req["url"] == "https://api.telegram.org/bot123:ABC/sendMessage"
    assert req["json"] == {"chat_id": "111", "text": "hello"}


@pytest.mark.asyncio
async def test_parse_mode_is_forwarded():
    gw, session = _gateway(FakeResponse(200, {"ok": True}), parse_mode="HTML")
    await gw.send("111", "<b>hi</b>")
    assert session.requests[0]["json"]["parse_mode"] == "HTML"


@pytest.mark.asyncio
async def test_api_error_description_becomes_reason():
    gw, _ = _gateway(FakeResponse(400, {"ok": False, "description": "Bad Request: chat not found"}))
    res = await gw.send("111", "hello")
    assert res.ok is False
    assert res.reason == "Bad Request: chat not found"


@pytest.mark.asyncio
async def test_ok_false_with_200_is_a_failure():
    gw, _ = _gateway(FakeResponse(200, {"ok": False, "description": "Forbidden: bot was blocked"}))
    res = await gw.send("111", "hello")
    assert res.ok is False
    assert "blocked" in res.reason


@pytest.mark.asyncio
async def test_non_json_error_body_uses_status():
    gw, _ = _gateway(FakeResponse(502, raw="Bad Gateway"))
    res = await gw.send("111", "hello")
    assert res.ok is False
    assert res.reason.startswith("HTTP 502")


@pytest.mark.asyncio
async def test_network_error_is_a_failure_not_an_exception():
    gw, session = _gateway(aiohttp.ClientConnectionError("connection reset"))
    res = await gw.send("111", "hello")
    assert res.ok is False
    assert "connection reset" in res.reason
    # single attempt, no retry
    assert len(session.requests) == 1
