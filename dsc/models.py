"""Data models — all frozen (immutable)."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class PriceQuote:
    """One answer from a price source, in the feed's native decimals."""

    round_id: int
    answer: int
    started_at: int
    updated_at: int
    answered_in_round: int


@dataclass(frozen=True)
class CollateralAsset:
    """Accepted collateral type and the feed that prices it."""

    address: str
    price_feed: str


@dataclass(frozen=True)
class CollateralDeposited:
    user: str
    token: str
    amount: int


@dataclass(frozen=True)
class CollateralRedeemed:
    redeemed_from: str
    redeemed_to: str
    token: str
    amount: int


EngineRecord = CollateralDeposited | CollateralRedeemed


@dataclass(frozen=True)
class EngineParameters:
    """Read-only constants an engine instance was built with."""

    min_health_factor: int
    liquidation_threshold: int
    liquidation_bonus: int
    liquidation_precision: int
    precision: int
    additional_feed_precision: int
    feed_precision: int
    oracle_timeout: int


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    WARNING = "warning"
    LIQUIDATABLE = "liquidatable"
    STALE = "stale"


@dataclass(frozen=True)
class AccountHealth:
    """Point-in-time solvency snapshot of one account."""

    user: str
    total_dsc_minted: int
    collateral_value_usd: int
    health_factor: int
    status: HealthStatus
