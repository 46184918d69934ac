from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from discount_monitor.utils.time import seconds_between


@dataclass(frozen=True, slots=True)
class NotificationGateState:
    """
    Minimum spacing between alert dispatch attempts.

    last_dispatch_s is None until the first attempt; it only ever moves forward.
    Owned by a single writer (the cycle driver), so it is a plain value.
    """
    min_interval_s: float
    last_dispatch_s: Optional[float] = None


def may_notify(now: float, state: NotificationGateState) -> bool:
    if state.last_dispatch_s is None:
        return True
    return seconds_between(state.last_dispatch_s, now) >= state.min_interval_s


def record_dispatch(now: float, state: NotificationGateState) -> NotificationGateState:
    """Advance the gate after a dispatch attempt, whatever the per-recipient results were."""
    last = state.last_dispatch_s
    if last is not None and now < last:
        now = last
    return replace(state, last_dispatch_s=now)


def next_allowed_at(state: NotificationGateState) -> Optional[float]:
    """Epoch seconds when the gate opens again (None = open already)."""
    if state.last_dispatch_s is None:
        return None
    return state.last_dispatch_s + state.min_interval_s
