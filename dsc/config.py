"""Configuration loader — reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

PRICE_PROVIDERS = ("pyth", "static")

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CollateralConfig:
    symbol: str = ""
    address: str = ""
    price_feed: str = ""
    decimals: int = 18


@dataclass(frozen=True)
class ThresholdsConfig:
    health_factor_warning: float = 1.5


@dataclass(frozen=True)
class MonitorConfig:
    thresholds: ThresholdsConfig = field(default_factory=ThresholdsConfig)


@dataclass(frozen=True)
class PythConfig:
    hermes_url: str = "https://hermes.pyth.network/v2/updates/price/latest"
    feeds: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class StaticOracleConfig:
    prices: dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class PriceOracleConfig:
    provider: str = "static"
    pyth: PythConfig = field(default_factory=PythConfig)
    static: StaticOracleConfig = field(default_factory=StaticOracleConfig)


@dataclass(frozen=True)
class TelegramConfig:
    enabled: bool = False
    alert_bot_token: str = ""
    log_bot_token: str = ""
    chat_id: str = ""


@dataclass(frozen=True)
class NotificationsConfig:
    telegram: TelegramConfig = field(default_factory=TelegramConfig)


@dataclass(frozen=True)
class AppConfig:
    collateral: tuple[CollateralConfig, ...] = ()
    price_oracle: PriceOracleConfig = field(default_factory=PriceOracleConfig)
    monitor: MonitorConfig = field(default_factory=MonitorConfig)
    notifications: NotificationsConfig = field(default_factory=NotificationsConfig)


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_collateral(raw: list[dict[str, Any]]) -> tuple[CollateralConfig, ...]:
    assets: list[CollateralConfig] = []
    for c in raw:
        symbol = c.get("symbol", "")
        assets.append(
            CollateralConfig(
                symbol=symbol,
                address=c.get("address", symbol),
                price_feed=c.get("price_feed", symbol),
                decimals=int(c.get("decimals", 18)),
            )
        )
    return tuple(assets)


def _build_monitor(raw: dict[str, Any]) -> MonitorConfig:
    thresholds = raw.get("thresholds", {})
    return MonitorConfig(
        thresholds=ThresholdsConfig(
            health_factor_warning=float(thresholds.get("health_factor_warning", 1.5)),
        )
    )


def _build_price_oracle(raw: dict[str, Any]) -> PriceOracleConfig:
    pyth_raw = raw.get("pyth", {})
    static_raw = raw.get("static", {})
    return PriceOracleConfig(
        provider=raw.get("provider", "static"),
        pyth=PythConfig(
            hermes_url=pyth_raw.get("hermes_url", PythConfig.hermes_url),
            feeds=dict(pyth_raw.get("feeds", {})),
        ),
        static=StaticOracleConfig(
            prices={k: float(v) for k, v in static_raw.get("prices", {}).items()},
        ),
    )


def _build_notifications(raw: dict[str, Any]) -> NotificationsConfig:
    tg = raw.get("telegram", {})
    return NotificationsConfig(
        telegram=TelegramConfig(
            enabled=bool(tg.get("enabled", False)),
            alert_bot_token=tg.get("alert_bot_token", ""),
            log_bot_token=tg.get("log_bot_token", ""),
            chat_id=str(tg.get("chat_id", "")),
        ),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level up from this package).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        collateral=_build_collateral(raw.get("collateral", [])),
        price_oracle=_build_price_oracle(raw.get("price_oracle", {})),
        monitor=_build_monitor(raw.get("monitor", {})),
        notifications=_build_notifications(raw.get("notifications", {})),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if not cfg.collateral:
        raise ValueError("At least one collateral asset must be configured")

    addresses = [c.address for c in cfg.collateral]
    if len(set(addresses)) != len(addresses):
        raise ValueError("Collateral addresses must be unique")

    provider = cfg.price_oracle.provider
    if provider not in PRICE_PROVIDERS:
        raise ValueError(f"Unknown price oracle provider '{provider}'")

    known_feeds = (
        cfg.price_oracle.pyth.feeds
        if provider == "pyth"
        else cfg.price_oracle.static.prices
    )
    for asset in cfg.collateral:
        if not asset.symbol:
            raise ValueError("Collateral entry has no symbol")
        if asset.price_feed not in known_feeds:
            raise ValueError(
                f"Collateral '{asset.symbol}' references unknown {provider} "
                f"feed '{asset.price_feed}'"
            )

    if cfg.monitor.thresholds.health_factor_warning < 1.0:
        raise ValueError("health_factor_warning must be at least 1.0")
