# src/discount_monitor/alerts/rules.py
from __future__ import annotations
from dataclasses import dataclass

@dataclass(slots=True)
class DiscountRule:
    """
    Fire when the discounted asset trades below `ratio` of the reference asset.
    - carrot_* → the asset expected to trade at a discount
      puffer_* → the reference asset
    IDs are CoinMarketCap numeric ids (as strings); labels are for display only.
    """
    carrot_id: str = "24498"            # Carrot by Puffer
    puffer_id: str = "27295"            # Puffer
    carrot_label: str = "Carrot"
    puffer_label: str = "Puffer"
    ratio: float = 0.55                 # 55% of Puffer
    min_notification_interval_s: float = 3600.0   # 1 hour

    @property
    def asset_ids(self) -> tuple[str, str]:
        return (self.carrot_id, self.puffer_id)
