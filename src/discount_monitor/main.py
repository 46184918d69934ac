# src/discount_monitor/main.py
import asyncio
import signal
import sys

import structlog
from dotenv import load_dotenv

from discount_monitor.config import MonitorConfig, config_from_env
from discount_monitor.errors import ConfigInvalid
from discount_monitor.ingest.coinmarketcap import CoinMarketCapConfig, CoinMarketCapSource
from discount_monitor.alerts.notifiers import ConsoleGateway
from discount_monitor.notify.dispatcher import Dispatcher
from discount_monitor.notify.telegram import TelegramConfig, TelegramGateway
from discount_monitor.runtime.driver import CycleDriver, PeriodicRunner
from discount_monitor.utils.log_config import configure_logging

log = structlog.get_logger()

EXIT_CONFIG_INVALID = 2


def build_gateway(cfg: MonitorConfig):
    if cfg.dry_run:
        return ConsoleGateway()
    return TelegramGateway(TelegramConfig(bot_token=cfg.telegram_bot_token, timeout_s=cfg.http_timeout_s))


async def main(cfg: MonitorConfig) -> None:
    source = CoinMarketCapSource(
        CoinMarketCapConfig(api_key=cfg.cmc_api_key, base_url=cfg.cmc_base_url, timeout_s=cfg.http_timeout_s)
    )
    gateway = build_gateway(cfg)
    driver = CycleDriver(
        source=source,
        dispatcher=Dispatcher(gateway),
        rule=cfg.rule,
        recipients=cfg.recipients,
    )
    runner = PeriodicRunner(driver.run_cycle, cfg.check_interval_s)

    # SIGINT/SIGTERM: stop the timer, let the in-flight cycle finish
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, runner.stop)
        except NotImplementedError:
            # e.g. Windows event loops; KeyboardInterrupt still ends the process
            pass

    log.info(
        "monitor_started",
        check_every_min=round(cfg.check_interval_s / 60.0, 2),
        ratio=cfg.rule.ratio,
        min_notification_interval_s=cfg.rule.min_notification_interval_s,
        recipients=len(cfg.recipients),
        dry_run=cfg.dry_run,
    )
    if not cfg.recipients:
        log.warning("no_recipients_configured")

    await source.start()
    await gateway.start()
    try:
        await runner.start()
    finally:
        # graceful shutdown to avoid unclosed sessions
        await source.stop()
        await gateway.stop()
        log.info("monitor_stopped")


def run() -> int:
    load_dotenv()
    try:
        cfg = config_from_env()
    except ConfigInvalid as e:
        configure_logging(None)
        log.error("config_invalid", problems=e.problems)
        return EXIT_CONFIG_INVALID

    configure_logging(cfg.log_file, cfg.log_level)
    try:
        asyncio.run(main(cfg))
    except KeyboardInterrupt:
        log.info("monitor_stopped")
    return 0


if __name__ == "__main__":
    sys.exit(run())
