from __future__ import annotations
import math
from typing import Iterable, Optional
from discount_monitor.errors import MalformedQuotePayload
from discount_monitor.utils.types import PriceQuote

def _usd_price(entry) -> Optional[float]:
    """
    Pull quote.USD.price out of one CoinMarketCap entry.
    Returns None for anything missing, non-numeric or non-positive.
    """
    if isinstance(entry, list):
        # v2 returns a list per key when looking up by symbol/slug
        entry = entry[0] if entry else None
    if not isinstance(entry, dict):
        return None
    quote = entry.get("quote")
    usd = quote.get("USD") if isinstance(quote, dict) else None
    px = usd.get("price") if isinstance(usd, dict) else None
    if px is None or isinstance(px, bool):
        return None
    try:
        px = float(px)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(px) or px <= 0.0:
        return None
    return px

def parse_quotes(payload, ids: Iterable[str]) -> dict[str, PriceQuote]:
    """
    Map asset id -> PriceQuote from a /v2/cryptocurrency/quotes/latest body.

    Shape (abridged):
      {"status": {...}, "data": {"24498": {"id": 24498, "quote": {"USD": {"price": 0.01}}}}}

    Ids that are absent or carry no usable USD price are left out of the result;
    a body with no `data` object at all raises MalformedQuotePayload.
    """
    if not isinstance(payload, dict):
        raise MalformedQuotePayload(f"expected JSON object, got {type(payload).__name__}")
    data = payload.get("data")
    if not isinstance(data, dict):
        raise MalformedQuotePayload("response has no 'data' object")

    out: dict[str, PriceQuote] = {}
    for asset_id in ids:
        px = _usd_price(data.get(str(asset_id)))
        if px is not None:
            out[str(asset_id)] = PriceQuote(asset_id=str(asset_id), price_usd=px)
    return out
