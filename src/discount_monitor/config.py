"""Process configuration, read from the environment (and a .env file via python-dotenv)."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from discount_monitor.alerts.rules import DiscountRule
from discount_monitor.errors import ConfigInvalid

_PLACEHOLDER_WORDS = {"CHANGEME", "CHANGE_ME", "PLACEHOLDER", "TODO", "NONE", "NULL", "XXX"}


def is_placeholder(value: Optional[str]) -> bool:
    """
    True for values that were obviously never filled in:
    'YOUR_TELEGRAM_CHAT_ID', '<chat id>', 'changeme', 'xxxx', ...
    """
    v = (value or "").strip()
    if not v:
        return True
    up = v.upper()
    if up.startswith("YOUR_") or up.startswith("YOUR-"):
        return True
    if v.startswith("<") and v.endswith(">"):
        return True
    if up in _PLACEHOLDER_WORDS:
        return True
    return set(up) == {"X"}


def _truthy(v: Optional[str]) -> bool:
    return (v or "").strip().lower() in ("1", "true", "yes", "on")


def _split_ids(raw: Optional[str]) -> list[str]:
    return [s.strip() for s in (raw or "").split(",") if s.strip()]


@dataclass(slots=True)
class MonitorConfig:
    cmc_api_key: str
    telegram_bot_token: str
    recipients: list[str] = field(default_factory=list)
    rule: DiscountRule = field(default_factory=DiscountRule)
    check_interval_s: float = 300.0            # 5 minutes
    cmc_base_url: str = "https://pro-api.coinmarketcap.com"
    http_timeout_s: float = 10.0
    log_file: Optional[str] = "price-monitor.log"
    log_level: str = "INFO"
    dry_run: bool = False

    def validate(self) -> "MonitorConfig":
        """Raise ConfigInvalid listing every problem found (not just the first)."""
        problems: list[str] = []
        if is_placeholder(self.cmc_api_key):
            problems.append("CMC_API_KEY is missing or a placeholder")
        if not self.dry_run and is_placeholder(self.telegram_bot_token):
            problems.append("TELEGRAM_BOT_TOKEN is missing or a placeholder (set DRY_RUN=1 to run without Telegram)")

        r = self.rule
        if not (0.0 < r.ratio <= 1.0):
            problems.append(f"DISCOUNT_RATIO must be in (0, 1], got {r.ratio}")
        if not (math.isfinite(self.check_interval_s) and self.check_interval_s > 0):
            problems.append(f"CHECK_INTERVAL_S must be > 0, got {self.check_interval_s}")
        if not (math.isfinite(r.min_notification_interval_s) and r.min_notification_interval_s >= 0):
            problems.append(f"MIN_NOTIFICATION_INTERVAL_S must be >= 0, got {r.min_notification_interval_s}")
        if not (math.isfinite(self.http_timeout_s) and self.http_timeout_s > 0):
            problems.append(f"HTTP_TIMEOUT_S must be > 0, got {self.http_timeout_s}")
        if not r.carrot_id or not r.puffer_id:
            problems.append("CARROT_ID and PUFFER_ID are required")
        elif r.carrot_id == r.puffer_id:
            problems.append("CARROT_ID and PUFFER_ID must differ")

        if problems:
            raise ConfigInvalid(problems)
        return self


def config_from_env(environ: Optional[Mapping[str, str]] = None) -> MonitorConfig:
    """
    Build and validate a MonitorConfig from env vars.
    Raises ConfigInvalid (fatal at startup) on missing credentials or bad numbers.
    """
    env = os.environ if environ is None else environ
    problems: list[str] = []

    def _float(name: str, default: float) -> float:
        raw = env.get(name)
        if raw is None or raw.strip() == "":
            return default
        try:
            return float(raw)
        except ValueError:
            problems.append(f"{name} must be a number, got {raw!r}")
            return default

    recipients = _split_ids(env.get("TELEGRAM_CHAT_IDS"))
    if not recipients:
        recipients = _split_ids(env.get("TELEGRAM_CHAT_ID"))

    defaults = DiscountRule()
    rule = DiscountRule(
        carrot_id=env.get("CARROT_ID", defaults.carrot_id).strip(),
        puffer_id=env.get("PUFFER_ID", defaults.puffer_id).strip(),
        carrot_label=env.get("CARROT_LABEL", defaults.carrot_label),
        puffer_label=env.get("PUFFER_LABEL", defaults.puffer_label),
        ratio=_float("DISCOUNT_RATIO", defaults.ratio),
        min_notification_interval_s=_float("MIN_NOTIFICATION_INTERVAL_S", defaults.min_notification_interval_s),
    )

    log_file = env.get("LOG_FILE", "price-monitor.log").strip() or None

    cfg = MonitorConfig(
        cmc_api_key=env.get("CMC_API_KEY", "").strip(),
        telegram_bot_token=env.get("TELEGRAM_BOT_TOKEN", "").strip(),
        recipients=recipients,
        rule=rule,
        check_interval_s=_float("CHECK_INTERVAL_S", 300.0),
        cmc_base_url=env.get("CMC_BASE_URL", "https://pro-api.coinmarketcap.com").rstrip("/"),
        http_timeout_s=_float("HTTP_TIMEOUT_S", 10.0),
        log_file=log_file,
        log_level=env.get("LOG_LEVEL", "INFO").upper(),
        dry_run=_truthy(env.get("DRY_RUN")),
    )

    if problems:
        raise ConfigInvalid(problems)
    return cfg.validate()
