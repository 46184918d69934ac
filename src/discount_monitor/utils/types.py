from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Literal, Mapping, Optional, Protocol

# ---- price primitives ----

@dataclass(frozen=True, slots=True)
class PriceQuote:
    asset_id: str
    price_usd: float

@dataclass(frozen=True, slots=True)
class DiscountResult:
    threshold_price: float
    is_discounted: bool
    discount_percent: float = 0.0   # 0.0 unless is_discounted

# ---- delivery ----

DispatchStatus = Literal["sent", "skipped-invalid", "failed"]

@dataclass(frozen=True, slots=True)
class DeliveryResult:
    """What a messaging gateway reports for one send."""
    ok: bool
    reason: Optional[str] = None

@dataclass(frozen=True, slots=True)
class DispatchOutcome:
    recipient: str
    status: DispatchStatus
    reason: Optional[str] = None

    @property
    def attempted(self) -> bool:
        return self.status != "skipped-invalid"

    @classmethod
    def sent(cls, recipient: str) -> "DispatchOutcome":
        return cls(recipient, "sent")

    @classmethod
    def skipped(cls, recipient: str, reason: str) -> "DispatchOutcome":
        return cls(recipient, "skipped-invalid", reason)

    @classmethod
    def failed(cls, recipient: str, reason: str) -> "DispatchOutcome":
        return cls(recipient, "failed", reason)

# ---- collaborator seams ----

class PriceSource(Protocol):
    async def get_quotes(self, ids: Iterable[str]) -> Mapping[str, PriceQuote]: ...

class MessagingGateway(Protocol):
    async def send(self, recipient: str, text: str) -> DeliveryResult: ...
