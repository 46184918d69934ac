from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import Iterable, Optional

import aiohttp
import structlog

from discount_monitor.errors import SourceUnavailable
from discount_monitor.ingest import parser
from discount_monitor.utils.http import maybe_text
from discount_monitor.utils.types import PriceQuote


@dataclass(slots=True)
class CoinMarketCapConfig:
    api_key: str
    base_url: str = "https://pro-api.coinmarketcap.com"
    timeout_s: float = 10.0
    convert: str = "USD"


class CoinMarketCapSource:
    """
    Price source over CoinMarketCap's quotes endpoint.

    Both assets are fetched in one request:
        GET {base_url}/v2/cryptocurrency/quotes/latest?id=24498,27295
        X-CMC_PRO_API_KEY: <key>

    get_quotes() raises SourceUnavailable on network errors, timeouts, non-200
    answers and undecodable bodies. Ids without a usable price are simply absent
    from the returned mapping (logged with the raw payload).
    """

    QUOTES_PATH = "/v2/cryptocurrency/quotes/latest"

    def __init__(self, cfg: CoinMarketCapConfig, session: Optional[aiohttp.ClientSession] = None):
        self.cfg = cfg
        self._session = session
        self._owns_session = session is None
        self._log = structlog.get_logger("coinmarketcap")

    async def start(self) -> None:
        if self._session is None:
            timeout = aiohttp.ClientTimeout(total=self.cfg.timeout_s)
            self._session = aiohttp.ClientSession(timeout=timeout)
            self._owns_session = True

    async def stop(self) -> None:
        if self._session and self._owns_session:
            await self._session.close()
            self._session = None

    async def get_quotes(self, ids: Iterable[str]) -> dict[str, PriceQuote]:
        ids = [str(i) for i in ids]
        if self._session is None:
            await self.start()
        assert self._session is not None

        url = f"{self.cfg.base_url}{self.QUOTES_PATH}"
        headers = {"X-CMC_PRO_API_KEY": self.cfg.api_key, "Accept": "application/json"}
        params = {"id": ",".join(ids), "convert": self.cfg.convert}

        self._log.info("fetching_prices", ids=ids)
        try:
            async with self._session.get(url, headers=headers, params=params) as resp:
                if resp.status != 200:
                    body = await maybe_text(resp)
                    self._log.error("cmc_http_error", status=resp.status, body=body)
                    raise SourceUnavailable(f"CoinMarketCap HTTP {resp.status}")
                try:
                    payload = await resp.json(content_type=None)
                except ValueError as e:
                    raise SourceUnavailable(f"CoinMarketCap returned invalid JSON: {e}") from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self._log.error("cmc_network_error", err=str(e) or type(e).__name__)
            raise SourceUnavailable(f"CoinMarketCap unreachable: {e!r}") from e

        quotes = parser.parse_quotes(payload, ids)
        missing = [i for i in ids if i not in quotes]
        if missing:
            self._log.warning("quotes_missing", missing=missing, data=_snippet(payload.get("data")))
        return quotes


def _snippet(obj, limit: int = 2000) -> str:
    try:
        return json.dumps(obj, default=str)[:limit]
    except (TypeError, ValueError):
        return str(obj)[:limit]
