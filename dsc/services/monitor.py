"""Account health sweeps and alerting over a live engine."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal

from ..config import ThresholdsConfig
from ..constants import MAX_HEALTH_FACTOR, MIN_HEALTH_FACTOR, PRECISION
from ..engine import DSCEngine
from ..errors import ArithmeticFault, StalePrice
from ..interfaces.notifier import Notifier
from ..models import (
    AccountHealth,
    CollateralDeposited,
    CollateralRedeemed,
    EngineRecord,
    HealthStatus,
)

logger = logging.getLogger(__name__)


def to_wad(value: float | int | str) -> int:
    """Scale a human number to 18 decimals."""
    return int(Decimal(str(value)) * PRECISION)


def format_health_factor(health_factor: int) -> str:
    if health_factor == MAX_HEALTH_FACTOR:
        return "∞"
    return f"{Decimal(health_factor) / PRECISION:.2f}"


def format_usd(amount: int) -> str:
    return f"${Decimal(amount) / PRECISION:,.2f}"


def assess_account(engine: DSCEngine, user: str, warning_level: int) -> AccountHealth:
    """Price ``user``'s account now and classify it.

    A feed that fails validation makes the account ``STALE`` rather than
    aborting the sweep.
    """
    try:
        total_dsc_minted, collateral_value = engine.get_account_information(user)
    except (StalePrice, ArithmeticFault) as e:
        logger.warning("Cannot price account %s: %s", user, e)
        return AccountHealth(
            user=user,
            total_dsc_minted=engine.get_dsc_minted(user),
            collateral_value_usd=0,
            health_factor=0,
            status=HealthStatus.STALE,
        )

    health_factor = engine.calculate_health_factor(total_dsc_minted, collateral_value)
    if health_factor < MIN_HEALTH_FACTOR:
        status = HealthStatus.LIQUIDATABLE
    elif health_factor < warning_level:
        status = HealthStatus.WARNING
    else:
        status = HealthStatus.HEALTHY

    return AccountHealth(
        user=user,
        total_dsc_minted=total_dsc_minted,
        collateral_value_usd=collateral_value,
        health_factor=health_factor,
        status=status,
    )


class HealthMonitor:
    """Tracks accounts seen in engine records and alerts on risky ones."""

    def __init__(
        self,
        engine: DSCEngine,
        notifiers: list[Notifier] | None = None,
        thresholds: ThresholdsConfig | None = None,
    ) -> None:
        self._engine = engine
        self._notifiers: list[Notifier] = list(notifiers or [])
        self._thresholds = thresholds or ThresholdsConfig()
        self._warning_level = to_wad(self._thresholds.health_factor_warning)
        self._accounts: set[str] = set(engine.get_users())
        engine.subscribe(self._on_record)

    def _on_record(self, record: EngineRecord) -> None:
        if isinstance(record, CollateralDeposited):
            self._accounts.add(record.user)
        elif isinstance(record, CollateralRedeemed):
            self._accounts.add(record.redeemed_from)

    def watch(self, user: str) -> None:
        self._accounts.add(user)

    @property
    def accounts(self) -> tuple[str, ...]:
        return tuple(sorted(self._accounts))

    def sweep(self) -> list[AccountHealth]:
        """Assess every tracked account against current prices."""
        return [
            assess_account(self._engine, user, self._warning_level)
            for user in self.accounts
        ]

    def liquidatable(self) -> list[AccountHealth]:
        return [a for a in self.sweep() if a.status is HealthStatus.LIQUIDATABLE]

    # ------------------------------------------------------------------
    # Formatting helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _now_str() -> str:
        return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")

    def _build_log_message(self, health: AccountHealth) -> str:
        return (
            f"📊 {health.user} · {health.status.value.upper()}\n"
            f"Collateral: {format_usd(health.collateral_value_usd)}\n"
            f"Debt: {format_usd(health.total_dsc_minted)} DSC\n"
            f"HF: {format_health_factor(health.health_factor)}\n"
            f"{self._now_str()} UTC"
        )

    def _build_alert(self, health: AccountHealth) -> tuple[str, str]:
        if health.status is HealthStatus.LIQUIDATABLE:
            subject = "🚨 LIQUIDATABLE"
            advice = "Position can be liquidated now."
        elif health.status is HealthStatus.STALE:
            subject = "⚠️ STALE PRICE"
            advice = "Account cannot be priced; oracle is stale."
        else:
            subject = "⚠️ WARNING: Low health factor"
            advice = "Add collateral or burn DSC."
        message = (
            f"{subject} — {health.user}\n"
            f"\n"
            f"Collateral: {format_usd(health.collateral_value_usd)}\n"
            f"Debt: {format_usd(health.total_dsc_minted)} DSC\n"
            f"Health Factor: {format_health_factor(health.health_factor)}\n"
            f"Warning below: {self._thresholds.health_factor_warning:.2f}\n"
            f"\n"
            f"{advice}\n"
            f"{self._now_str()} UTC"
        )
        return subject, message

    # ------------------------------------------------------------------
    # Notification dispatch
    # ------------------------------------------------------------------

    async def _send_log(self, message: str) -> None:
        for notifier in self._notifiers:
            try:
                await notifier.send_log(message, silent=True)
            except Exception as e:
                logger.error("Notifier send_log failed: %s", e)

    async def _send_alert(self, message: str, subject: str) -> None:
        for notifier in self._notifiers:
            try:
                await notifier.send_alert(message, subject=subject)
            except Exception as e:
                logger.error("Notifier send_alert failed: %s", e)

    async def check_and_alert(self) -> list[AccountHealth]:
        """Sweep all accounts; log each one and alert on risky ones."""
        results = self.sweep()

        for health in results:
            logger.info(
                "Account %s · %s · Collateral: %s  Debt: %s  HF: %s",
                health.user,
                health.status.value,
                format_usd(health.collateral_value_usd),
                format_usd(health.total_dsc_minted),
                format_health_factor(health.health_factor),
            )
            await self._send_log(self._build_log_message(health))

            if health.status is not HealthStatus.HEALTHY:
                subject, message = self._build_alert(health)
                await self._send_alert(message, subject=subject)

        return results
