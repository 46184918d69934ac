from __future__ import annotations

from discount_monitor.alerts.rules import DiscountRule
from discount_monitor.utils.types import DiscountResult

def fmt_usd(px: float) -> str:
    return f"${px:.6f}"

def ratio_pct_label(ratio: float) -> str:
    """0.55 -> '55%' (whole percent, as shown in the alert threshold line)."""
    return f"{ratio * 100:.0f}%"

def format_discount_alert(
    rule: DiscountRule,
    carrot_price: float,
    puffer_price: float,
    result: DiscountResult,
) -> str:
    carrot = rule.carrot_label
    puffer = rule.puffer_label
    return (
        f"🚨 DISCOUNT ALERT 🚨\n\n"
        f"{carrot} is trading at a {result.discount_percent:.2f}% discount!\n\n"
        f"🥕 {carrot}: {fmt_usd(carrot_price)}\n"
        f"🐡 {puffer}: {fmt_usd(puffer_price)}\n"
        f"📉 Threshold ({ratio_pct_label(rule.ratio)} of {puffer}): {fmt_usd(result.threshold_price)}"
    )
