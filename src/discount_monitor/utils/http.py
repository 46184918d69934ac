from __future__ import annotations

import aiohttp

async def maybe_text(resp: aiohttp.ClientResponse, limit: int = 500) -> str:
    """Best-effort response body for logs (truncated)."""
    try:
        return (await resp.text())[:limit]
    except (aiohttp.ClientError, UnicodeDecodeError):
        return "<no body>"
