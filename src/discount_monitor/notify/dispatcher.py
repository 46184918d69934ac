from __future__ import annotations

import asyncio
from typing import Iterable, Sequence

import structlog

from discount_monitor.config import is_placeholder
from discount_monitor.utils.types import DispatchOutcome, MessagingGateway

log = structlog.get_logger("dispatcher")


def attempted(outcomes: Iterable[DispatchOutcome]) -> bool:
    """True if at least one recipient got a real send attempt (sent or failed)."""
    return any(o.attempted for o in outcomes)


class Dispatcher:
    """
    Fan an alert out to every recipient, independently.

    - invalid / placeholder ids are skipped without a network call
    - valid ids are sent concurrently; the call returns once *all* sends settled
    - one recipient failing (result or exception) never affects the others
    Outcomes come back in recipient order.
    """
    def __init__(self, gateway: MessagingGateway):
        self.gateway = gateway

    async def dispatch(self, message: str, recipients: Sequence[str]) -> list[DispatchOutcome]:
        outcomes = await asyncio.gather(*(self._send_one(message, r) for r in recipients))
        n_sent = sum(1 for o in outcomes if o.status == "sent")
        n_failed = sum(1 for o in outcomes if o.status == "failed")
        log.info(
            "dispatch_summary",
            recipients=len(outcomes),
            sent=n_sent,
            failed=n_failed,
            skipped=len(outcomes) - n_sent - n_failed,
        )
        return list(outcomes)

    async def _send_one(self, message: str, recipient: str) -> DispatchOutcome:
        rid = (recipient or "").strip()
        if not rid or is_placeholder(rid):
            log.warning("alert_skipped_invalid_recipient", recipient=recipient)
            return DispatchOutcome.skipped(recipient, "empty or placeholder recipient id")

        try:
            res = await self.gateway.send(rid, message)
        except Exception as e:  # bulkhead: contain any gateway error to this recipient
            log.error("alert_delivery_failed", recipient=rid, err=str(e), exc_type=type(e).__name__)
            return DispatchOutcome.failed(rid, str(e) or type(e).__name__)

        if res.ok:
            log.info("alert_sent", recipient=rid)
            return DispatchOutcome.sent(rid)
        reason = res.reason or "unknown error"
        log.error("alert_delivery_failed", recipient=rid, reason=reason)
        return DispatchOutcome.failed(rid, reason)
