from __future__ import annotations

import math
from numbers import Real

from discount_monitor.errors import InvalidInput
from discount_monitor.utils.types import DiscountResult


def _require_price(name: str, value) -> float:
    # bool is a Real subclass; a True price is an upstream bug, not 1.0 USD
    if value is None or isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidInput(f"{name} price missing or non-numeric: {value!r}")
    px = float(value)
    if not math.isfinite(px) or px <= 0.0:
        raise InvalidInput(f"{name} price must be positive and finite: {value!r}")
    return px


def evaluate(carrot_price, puffer_price, ratio: float) -> DiscountResult:
    """
    Compare the discounted asset against a fraction of the reference asset.

      threshold   = puffer_price * ratio
      discounted  = carrot_price < threshold
      discount %  = (threshold - carrot_price) / threshold * 100   (0.0 when not discounted)

    Raises InvalidInput for missing / non-numeric / non-positive prices or a
    ratio outside (0, 1].
    """
    carrot = _require_price("carrot", carrot_price)
    puffer = _require_price("puffer", puffer_price)
    if isinstance(ratio, bool) or not isinstance(ratio, Real) or not (0.0 < float(ratio) <= 1.0):
        raise InvalidInput(f"ratio must be in (0, 1]: {ratio!r}")

    threshold = puffer * float(ratio)
    if carrot < threshold:
        pct = (threshold - carrot) / threshold * 100.0
        return DiscountResult(threshold_price=threshold, is_discounted=True, discount_percent=pct)
    return DiscountResult(threshold_price=threshold, is_discounted=False, discount_percent=0.0)
