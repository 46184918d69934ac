import asyncio
import os
import signal

import pytest

import discount_monitor.main as main_mod
from discount_monitor.alerts.notifiers import ConsoleGateway
from discount_monitor.alerts.rules import DiscountRule
from discount_monitor.config import MonitorConfig
from discount_monitor.notify.telegram import TelegramGateway
from tests.helpers.fakes import FakeGateway, FakePriceSource


def _cfg(**kw):
    base = dict(
        cmc_api_key="KEY",
        telegram_bot_token="123:ABC",
        recipients=["111"],
        rule=DiscountRule(ratio=0.5, min_notification_interval_s=3600),
        check_interval_s=10.0,
        log_file=None,
    )
    base.update(kw)
    return MonitorConfig(**base)


def test_invalid_config_exits_non_zero(monkeypatch):
    for k in ("CMC_API_KEY", "TELEGRAM_BOT_TOKEN", "DRY_RUN"):
        monkeypatch.delenv(k, raising=False)
    monkeypatch.setattr(main_mod, "load_dotenv", lambda: None)
    monkeypatch.setattr(main_mod, "configure_logging", lambda *a, **k: None)

    started = []
    monkeypatch.setattr(main_mod.asyncio, "run", lambda coro: started.append(coro))

    assert main_mod.run() == main_mod.EXIT_CONFIG_INVALID
    assert started == []


def test_gateway_selection():
    assert isinstance(main_mod.build_gateway(_cfg(dry_run=True)), ConsoleGateway)
    assert isinstance(main_mod.build_gateway(_cfg()), TelegramGateway)


@pytest.mark.asyncio
async def test_sigterm_finishes_cycle_and_shuts_down(monkeypatch):
    source = FakePriceSource({"24498": 40.0, "27295": 100.0})
    gateway = FakeGateway()
    monkeypatch.setattr(main_mod, "CoinMarketCapSource", lambda cfg: source)
    monkeypatch.setattr(main_mod, "build_gateway", lambda cfg: gateway)

    task = asyncio.create_task(main_mod.main(_cfg()))
    await asyncio.sleep(0.05)
    os.kill(os.getpid(), signal.SIGTERM)
    await asyncio.wait_for(task, timeout=2.0)

    assert source.calls == 1
    assert [r for r, _ in gateway.sent] == ["111"]
    assert source.stopped is True
