from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Literal, Optional, Sequence

import structlog

from discount_monitor.alerts.evaluator import evaluate
from discount_monitor.alerts.formatting import fmt_usd, format_discount_alert, ratio_pct_label
from discount_monitor.alerts.gate import NotificationGateState, may_notify, next_allowed_at, record_dispatch
from discount_monitor.alerts.rules import DiscountRule
from discount_monitor.errors import InvalidInput, SourceUnavailable
from discount_monitor.notify.dispatcher import Dispatcher, attempted
from discount_monitor.utils.time import iso_utc, utc_now_s
from discount_monitor.utils.types import DiscountResult, DispatchOutcome, PriceSource

log = structlog.get_logger("driver")

CycleStatus = Literal[
    "source_unavailable",
    "invalid_quotes",
    "no_discount",
    "rate_limited",
    "dispatched",
    "no_valid_recipients",
]


@dataclass(slots=True)
class CycleReport:
    status: CycleStatus
    now: float
    result: Optional[DiscountResult] = None
    outcomes: list[DispatchOutcome] = field(default_factory=list)
    gate_advanced: bool = False


class CycleDriver:
    """
    One cycle: fetch → evaluate → (discounted?) gate → (permitted?) dispatch → record.

    Holds the notification gate state; it is the only writer. `clock` is injected
    so tests can drive cycles without wall-clock time.
    """
    def __init__(
        self,
        *,
        source: PriceSource,
        dispatcher: Dispatcher,
        rule: DiscountRule,
        recipients: Sequence[str],
        clock: Callable[[], float] = utc_now_s,
        gate: Optional[NotificationGateState] = None,
    ):
        self.source = source
        self.dispatcher = dispatcher
        self.rule = rule
        self.recipients = tuple(recipients)
        self.clock = clock
        self.gate = gate or NotificationGateState(min_interval_s=rule.min_notification_interval_s)

    async def run_cycle(self) -> CycleReport:
        now = self.clock()
        rule = self.rule

        try:
            quotes = await self.source.get_quotes(rule.asset_ids)
        except SourceUnavailable as e:
            log.error("price_fetch_failed", err=str(e))
            return CycleReport("source_unavailable", now)

        carrot = quotes.get(rule.carrot_id)
        puffer = quotes.get(rule.puffer_id)
        try:
            result = evaluate(
                carrot.price_usd if carrot else None,
                puffer.price_usd if puffer else None,
                rule.ratio,
            )
        except InvalidInput as e:
            log.error("prices_unavailable", err=str(e), received=sorted(quotes))
            return CycleReport("invalid_quotes", now)

        carrot_px = carrot.price_usd
        puffer_px = puffer.price_usd
        log.info("prices", carrot=fmt_usd(carrot_px), puffer=fmt_usd(puffer_px))
        log.info(
            "discount_threshold",
            of=f"{ratio_pct_label(rule.ratio)} of {rule.puffer_label}",
            threshold=fmt_usd(result.threshold_price),
        )

        if not result.is_discounted:
            log.info("no_discount", detail=f"{rule.carrot_label} price is above the threshold")
            return CycleReport("no_discount", now, result)

        log.info("discount_detected", discount_pct=f"{result.discount_percent:.2f}")

        if not may_notify(now, self.gate):
            log.info("notification_rate_limited", next_allowed_at=iso_utc(next_allowed_at(self.gate)))
            return CycleReport("rate_limited", now, result)

        message = format_discount_alert(rule, carrot_px, puffer_px, result)
        outcomes = await self.dispatcher.dispatch(message, self.recipients)

        if not attempted(outcomes):
            log.warning("no_valid_recipients", configured=len(self.recipients))
            return CycleReport("no_valid_recipients", now, result, outcomes)

        # advance on attempt, not on confirmed delivery
        self.gate = record_dispatch(now, self.gate)
        return CycleReport("dispatched", now, result, outcomes, gate_advanced=True)


class PeriodicRunner:
    """
    Run `cycle` once immediately, then every `interval_s` seconds, until stop().

    - Ticks are on a fixed schedule (not "interval after the previous cycle ended").
    - A tick that fires while the previous cycle is still running is skipped.
    - Exceptions escaping a cycle are logged; the runner keeps going.
    - stop() ends the schedule; start() returns after the in-flight cycle finishes.
    """
    def __init__(self, cycle: Callable[[], Awaitable[object]], interval_s: float, name: str = "monitor-cycle"):
        if interval_s <= 0:
            raise ValueError("interval_s must be > 0")
        self.cycle = cycle
        self.interval_s = float(interval_s)
        self.name = name
        self.cycles_started = 0
        self.ticks_skipped = 0
        self._stop = asyncio.Event()
        self._inflight: Optional[asyncio.Task] = None

    async def start(self) -> None:
        self._stop.clear()
        loop = asyncio.get_running_loop()
        next_at = loop.time()
        try:
            while not self._stop.is_set():
                if self._inflight is None or self._inflight.done():
                    self.cycles_started += 1
                    self._inflight = asyncio.create_task(self._run_once(), name=self.name)
                else:
                    self.ticks_skipped += 1
                    log.warning("cycle_overrun_skip", interval_s=self.interval_s)

                next_at += self.interval_s
                try:
                    await asyncio.wait_for(self._stop.wait(), timeout=max(0.0, next_at - loop.time()))
                except asyncio.TimeoutError:
                    pass
        finally:
            if self._inflight is not None and not self._inflight.done():
                log.info("waiting_for_inflight_cycle")
                await asyncio.shield(self._inflight)
        log.info("runner_loop_exit", cycles=self.cycles_started, skipped=self.ticks_skipped)

    def stop(self) -> None:
        self._stop.set()

    async def _run_once(self) -> None:
        try:
            await self.cycle()
        except Exception:
            log.exception("cycle_crashed")
