from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional

import aiohttp
import structlog

from discount_monitor.utils.http import maybe_text
from discount_monitor.utils.types import DeliveryResult

log = structlog.get_logger("telegram")

# --------- config & client ----------

@dataclass(slots=True)
class TelegramConfig:
    bot_token: str
    api_base: str = "https://api.telegram.org"
    parse_mode: Optional[str] = None  # "HTML" or "MarkdownV2" or None
    timeout_s: float = 10.0

class TelegramGateway:
    """
    Messaging gateway over the Telegram Bot API (sendMessage).

    One attempt per send(); failures come back as DeliveryResult(ok=False, reason)
    and are never retried here. Owns its aiohttp session unless one is injected.
    """
    def __init__(self, cfg: TelegramConfig, session: Optional[aiohttp.ClientSession] = None):
        self.cfg = cfg
        self._session = session
        self._owns_session = session is None

    async def start(self):
        if self._session is None:
            timeout = aiohttp.ClientTimeout(total=self.cfg.timeout_s)
            self._session = aiohttp.ClientSession(timeout=timeout)
            self._owns_session = True

    async def stop(self):
        if self._session and self._owns_session:
            await self._session.close()
            self._session = None

    @property
    def url(self) -> str:
        return f"{self.cfg.api_base}/bot{self.cfg.bot_token}/sendMessage"

    async def send(self, recipient: str, text: str) -> DeliveryResult:
        if self._session is None:
            await self.start()
        assert self._session is not None
        payload = {"chat_id": recipient, "text": text}
        if self.cfg.parse_mode:
            payload["parse_mode"] = self.cfg.parse_mode

        try:
            async with self._session.post(self.url, json=payload) as resp:
                data = await _maybe_json(resp)
                if resp.status == 200 and data.get("ok"):
                    return DeliveryResult(ok=True)
                reason = data.get("description")
                if not reason:
                    reason = f"HTTP {resp.status}: {await maybe_text(resp, limit=200)}"
                log.warning("telegram_send_failed", chat_id=recipient, status=resp.status, reason=reason)
                return DeliveryResult(ok=False, reason=reason)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            reason = str(e) or type(e).__name__
            log.warning("telegram_network_error", chat_id=recipient, err=reason)
            return DeliveryResult(ok=False, reason=reason)

async def _maybe_json(resp: aiohttp.ClientResponse) -> dict:
    try:
        data = await resp.json(content_type=None)
    except (aiohttp.ClientError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}
