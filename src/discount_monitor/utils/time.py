from __future__ import annotations

import time
from datetime import datetime, timezone

def utc_now_s() -> float:
    """Unix epoch seconds (float)."""
    return time.time()

def utc_dt(ts: float | int) -> datetime:
    """Epoch seconds -> timezone-aware UTC datetime."""
    return datetime.fromtimestamp(float(ts), tz=timezone.utc)

def iso_utc(ts: float | int) -> str:
    """Epoch seconds -> ISO-8601 UTC string (second precision)."""
    return utc_dt(ts).isoformat(timespec="seconds")

def seconds_between(earlier: float, later: float) -> float:
    """Non-negative elapsed time between two epoch timestamps (clamped at 0)."""
    return max(0.0, later - earlier)
