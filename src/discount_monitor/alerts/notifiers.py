# src/discount_monitor/alerts/notifiers.py
from __future__ import annotations
import structlog
from typing import Callable, Optional, TextIO

from discount_monitor.utils.types import DeliveryResult

log = structlog.get_logger("notifier")

class ConsoleGateway:
    """
    Messaging gateway that prints alerts instead of sending them (DRY_RUN=1).
    Same send(recipient, text) contract as TelegramGateway.
    """
    def __init__(self, stream: Optional[TextIO] = None,
                 format_fn: Optional[Callable[[str, str], str]] = None):
        self._stream = stream
        self._format_fn = format_fn or (lambda recipient, text: f"[ALERT → {recipient}]\n{text}")

    async def send(self, recipient: str, text: str) -> DeliveryResult:
        try:
            print(self._format_fn(recipient, text), file=self._stream, flush=True)
        except (OSError, ValueError) as e:
            log.warning("console_send_failed", recipient=recipient, err=str(e))
            return DeliveryResult(ok=False, reason=str(e))
        return DeliveryResult(ok=True)

    async def start(self) -> None:
        return None

    async def stop(self) -> None:
        return None
