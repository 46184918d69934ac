import asyncio

import aiohttp
import pytest
from structlog.testing import capture_logs

from discount_monitor.errors import MalformedQuotePayload, SourceUnavailable
from discount_monitor.ingest.coinmarketcap import CoinMarketCapConfig, CoinMarketCapSource
from tests.helpers.fakes import FakeResponse, FakeSession


def _source(*responses):
    session = FakeSession(responses)
    src = CoinMarketCapSource(CoinMarketCapConfig(api_key="KEY", base_url="https://cmc.test"), session=session)
    return src, session


def _body(**prices):
    return {"data": {k: {"quote": {"USD": {"price": v}}} for k, v in prices.items()}}


@pytest.mark.asyncio
async def test_single_request_for_both_ids():
    src, session = _source(FakeResponse(200, {"data": {
        "24498": {"quote": {"USD": {"price": 0.02}}},
        "27295": {"quote": {"USD": {"price": 0.05}}},
    }}))

    quotes = await src.get_quotes(["24498", "27295"])

    assert quotes["24498"].price_usd == pytest.approx(0.02)
    assert quotes["27295"].price_usd == pytest.approx(0.05)
    req = session.requests[0]
    assert req["method"] == "GET"
    assert req["url"] == "https://cmc.test/v2/cryptocurrency/quotes/latest"
    assert req["headers"]["X-CMC_PRO_API_KEY"] == "KEY"
    assert req["params"]["id"] == "24498,27295"


@pytest.mark.asyncio
async def test_partial_data_is_returned_and_logged():
    src, _ = _source(FakeResponse(200, _body(**{"24498": 0.02})))
    with capture_logs() as logs:
        quotes = await src.get_quotes(["24498", "27295"])

    assert list(quotes) == ["24498"]
    missing = next(e for e in logs if e["event"] == "quotes_missing")
    assert missing["missing"] == ["27295"]


@pytest.mark.asyncio
async def test_http_error_raises_source_unavailable():
    src, _ = _source(FakeResponse(401, {"status": {"error_message": "API key missing."}}))
    with capture_logs() as logs:
        with pytest.raises(SourceUnavailable):
            await src.get_quotes(["1", "2"])
    err = next(e for e in logs if e["event"] == "cmc_http_error")
    assert err["status"] == 401
    assert "API key missing" in err["body"]


@pytest.mark.asyncio
@pytest.mark.parametrize("exc", [aiohttp.ClientConnectionError("refused"), asyncio.TimeoutError()])
async def test_network_errors_raise_source_unavailable(exc):
    src, _ = _source(exc)
    with pytest.raises(SourceUnavailable):
        await src.get_quotes(["1", "2"])


@pytest.mark.asyncio
async def test_invalid_json_raises_source_unavailable():
    src, _ = _source(FakeResponse(200, raw="<html>gateway</html>"))
    with pytest.raises(SourceUnavailable):
        await src.get_quotes(["1", "2"])


@pytest.mark.asyncio
async def test_body_without_data_is_malformed():
    src, _ = _source(FakeResponse(200, {"status": {"error_code": 0}}))
    with pytest.raises(MalformedQuotePayload):
        await src.get_quotes(["1", "2"])


@pytest.mark.asyncio
async def test_injected_session_is_not_closed():
    src, session = _source()
    await src.stop()
    assert session.closed is False
