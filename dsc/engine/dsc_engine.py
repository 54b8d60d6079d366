"""DSC engine: collateral custody, minting and liquidation.

Every public state-mutating operation runs under the re-entrancy guard and
inside a ``Transaction``: ledger effects come first, then every solvency
check, then external value movements. If anything fails the ledger is
restored, completed transfers are compensated, and the error propagates.
Read-only queries take no lock.
"""
from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager

from ..constants import (
    ADDITIONAL_FEED_PRECISION,
    FEED_PRECISION,
    LIQUIDATION_BONUS,
    LIQUIDATION_PRECISION,
    LIQUIDATION_THRESHOLD,
    MIN_HEALTH_FACTOR,
    PRECISION,
)
from ..errors import (
    BreaksHealthFactor,
    HealthFactorNotImproved,
    HealthFactorOk,
    MintFailed,
    NeedsMoreThanZero,
    TransferFailed,
)
from ..interfaces.price_source import PriceSource
from ..interfaces.tokens import CollateralToken, DebtTokenMinter
from ..models import EngineParameters, EngineRecord
from ..oracles.oracle_lib import get_timeout, stale_check_latest_quote
from . import health
from .guard import ReentrancyGuard
from .ledger import CollateralLedger
from .registry import Registry
from .transaction import Transaction

logger = logging.getLogger(__name__)

Listener = Callable[[EngineRecord], None]


def _wall_clock() -> int:
    return int(time.time())


def _require_more_than_zero(amount: int) -> None:
    if amount <= 0:
        raise NeedsMoreThanZero()


class DSCEngine:
    """Overcollateralized ledger for the pegged DSC unit."""

    MIN_HEALTH_FACTOR = MIN_HEALTH_FACTOR
    LIQUIDATION_THRESHOLD = LIQUIDATION_THRESHOLD
    LIQUIDATION_BONUS = LIQUIDATION_BONUS
    LIQUIDATION_PRECISION = LIQUIDATION_PRECISION
    PRECISION = PRECISION
    ADDITIONAL_FEED_PRECISION = ADDITIONAL_FEED_PRECISION
    FEED_PRECISION = FEED_PRECISION

    def __init__(
        self,
        collateral_tokens: Sequence[CollateralToken],
        price_sources: Sequence[PriceSource],
        dsc: DebtTokenMinter,
        address: str = "dsc-engine",
        clock: Callable[[], int] = _wall_clock,
    ) -> None:
        self._registry = Registry(collateral_tokens, price_sources)
        self._dsc = dsc
        self.address = address
        self._clock = clock
        self._guard = ReentrancyGuard()
        self._ledger = CollateralLedger(self._emit)
        self._tx: Transaction | None = None
        self._events: list[EngineRecord] = []
        self._listeners: list[Listener] = []

        logger.info(
            "DSC engine %s accepting %s",
            address, ", ".join(self._registry.addresses()),
        )

    # ------------------------------------------------------------------
    # Transaction plumbing
    # ------------------------------------------------------------------

    @contextmanager
    def _operation(self, name: str) -> Iterator[Transaction]:
        with self._guard.acquire(name):
            tx = Transaction(name, self._ledger)
            self._tx = tx
            try:
                yield tx
            except Exception as e:
                self._tx = None
                tx.rollback()
                logger.warning("%s rolled back: %s", name, e)
                raise
            self._tx = None
            self._events.extend(tx.records)
            logger.info("%s committed (%d records)", name, len(tx.records))

        self._publish(tx.records)

    def _emit(self, record: EngineRecord) -> None:
        if self._tx is None:
            raise RuntimeError("ledger mutated outside of an engine operation")
        self._tx.emit(record)

    def _publish(self, records: list[EngineRecord]) -> None:
        for record in records:
            for listener in self._listeners:
                try:
                    listener(record)
                except Exception:
                    logger.exception("Engine listener failed on %s", record)

    def subscribe(self, listener: Listener) -> None:
        """Receive every committed deposit/redemption record."""
        self._listeners.append(listener)

    @property
    def events(self) -> tuple[EngineRecord, ...]:
        """Committed records, followed by those of the operation in flight."""
        if self._tx is None:
            return tuple(self._events)
        return tuple(self._events) + tuple(self._tx.records)

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def deposit_collateral_and_mint_dsc(
        self,
        sender: str,
        token_collateral_address: str,
        amount_collateral: int,
        amount_dsc_to_mint: int,
    ) -> None:
        with self._operation("deposit_collateral_and_mint_dsc"):
            self._deposit_collateral(sender, token_collateral_address, amount_collateral)
            self._mint_dsc(sender, amount_dsc_to_mint)

    def deposit_collateral(
        self, sender: str, token_collateral_address: str, amount_collateral: int
    ) -> None:
        with self._operation("deposit_collateral"):
            self._deposit_collateral(sender, token_collateral_address, amount_collateral)

    def redeem_collateral_for_dsc(
        self,
        sender: str,
        token_collateral_address: str,
        amount_collateral: int,
        amount_dsc_to_burn: int,
    ) -> None:
        with self._operation("redeem_collateral_for_dsc"):
            self._burn_dsc(amount_dsc_to_burn, on_behalf_of=sender, dsc_from=sender)
            self._redeem_collateral(
                token_collateral_address, amount_collateral, sender, sender
            )

    def redeem_collateral(
        self, sender: str, token_collateral_address: str, amount_collateral: int
    ) -> None:
        with self._operation("redeem_collateral"):
            self._redeem_collateral(
                token_collateral_address, amount_collateral, sender, sender
            )

    def mint_dsc(self, sender: str, amount_dsc_to_mint: int) -> None:
        with self._operation("mint_dsc"):
            self._mint_dsc(sender, amount_dsc_to_mint)

    def burn_dsc(self, sender: str, amount: int) -> None:
        with self._operation("burn_dsc"):
            self._burn_dsc(amount, on_behalf_of=sender, dsc_from=sender)

    def liquidate(
        self, sender: str, collateral: str, user: str, debt_to_cover: int
    ) -> None:
        """Repay part of ``user``'s debt and seize collateral plus a bonus.

        Only accounts below the minimum health factor can be liquidated, the
        target must end up strictly healthier, and the liquidator must stay
        healthy. If the target's collateral cannot cover the bonus-inclusive
        payout the call fails; nothing backstops that case.
        """
        with self._operation("liquidate"):
            _require_more_than_zero(debt_to_cover)
            starting_user_health_factor = self._health_factor(user)
            if not health.is_liquidatable(starting_user_health_factor):
                raise HealthFactorOk(user, starting_user_health_factor)

            token_amount_from_debt_covered = self.get_token_amount_from_usd(
                collateral, debt_to_cover
            )
            bonus_collateral = health.liquidation_bonus(token_amount_from_debt_covered)
            total_collateral_to_redeem = token_amount_from_debt_covered + bonus_collateral

            collateral_token = self._registry.token(collateral)
            self._ledger.debit(user, sender, collateral, total_collateral_to_redeem)
            self._ledger.remove_debt(user, debt_to_cover)

            ending_user_health_factor = self._health_factor(user)
            if ending_user_health_factor <= starting_user_health_factor:
                raise HealthFactorNotImproved(
                    starting_user_health_factor, ending_user_health_factor
                )
            self._revert_if_health_factor_is_broken(sender)

            self._pull_and_burn_dsc(debt_to_cover, sender)
            self._push_collateral(collateral_token, sender, total_collateral_to_redeem)

            logger.info(
                "%s liquidated %s: covered %d DSC for %d %s (bonus %d), "
                "health factor %d -> %d",
                sender, user, debt_to_cover, total_collateral_to_redeem,
                collateral, bonus_collateral,
                starting_user_health_factor, ending_user_health_factor,
            )

    # ------------------------------------------------------------------
    # Operation bodies (run inside an active transaction)
    # ------------------------------------------------------------------

    def _deposit_collateral(self, sender: str, token: str, amount: int) -> None:
        _require_more_than_zero(amount)
        collateral_token = self._registry.token(token)
        self._ledger.credit(sender, token, amount)
        self._pull_collateral(collateral_token, sender, amount)

    def _mint_dsc(self, sender: str, amount: int) -> None:
        _require_more_than_zero(amount)
        self._ledger.add_debt(sender, amount)
        self._revert_if_health_factor_is_broken(sender)

        if not self._dsc.mint_to(sender, amount):
            raise MintFailed(f"minting {amount} DSC to {sender} failed")
        self._compensate(
            f"burn {amount} DSC minted to {sender}",
            lambda: self._dsc.burn_from(sender, amount),
        )

    def _redeem_collateral(
        self, token: str, amount: int, redeemed_from: str, redeemed_to: str
    ) -> None:
        _require_more_than_zero(amount)
        collateral_token = self._registry.token(token)
        self._ledger.debit(redeemed_from, redeemed_to, token, amount)
        self._revert_if_health_factor_is_broken(redeemed_from)
        self._push_collateral(collateral_token, redeemed_to, amount)

    def _burn_dsc(self, amount: int, on_behalf_of: str, dsc_from: str) -> None:
        _require_more_than_zero(amount)
        self._ledger.remove_debt(on_behalf_of, amount)
        # Burning only lowers debt; kept as a safety net.
        self._revert_if_health_factor_is_broken(on_behalf_of)
        self._pull_and_burn_dsc(amount, dsc_from)

    # ------------------------------------------------------------------
    # External value movements
    # ------------------------------------------------------------------

    def _compensate(self, description: str, compensation: Callable[[], object]) -> None:
        if self._tx is None:
            raise RuntimeError("compensation registered outside of an engine operation")
        self._tx.on_rollback(description, compensation)

    def _pull_collateral(self, token: CollateralToken, holder: str, amount: int) -> None:
        if not token.transfer_from(holder, self.address, amount):
            raise TransferFailed(
                f"could not pull {amount} {token.address} from {holder}"
            )
        self._compensate(
            f"return {amount} {token.address} to {holder}",
            lambda: token.transfer(self.address, holder, amount),
        )

    def _push_collateral(self, token: CollateralToken, recipient: str, amount: int) -> None:
        if not token.transfer(self.address, recipient, amount):
            raise TransferFailed(
                f"could not send {amount} {token.address} to {recipient}"
            )
        self._compensate(
            f"reclaim {amount} {token.address} from {recipient}",
            lambda: token.transfer_from(recipient, self.address, amount),
        )

    def _pull_and_burn_dsc(self, amount: int, dsc_from: str) -> None:
        if not self._dsc.pull_into(self.address, dsc_from, amount):
            raise TransferFailed(f"could not pull {amount} DSC from {dsc_from}")
        self._compensate(
            f"return {amount} DSC to {dsc_from}",
            lambda: self._dsc.pull_into(dsc_from, self.address, amount),
        )

        self._dsc.burn_from(self.address, amount)
        self._compensate(
            f"re-mint {amount} burned DSC",
            lambda: self._dsc.mint_to(self.address, amount),
        )

    # ------------------------------------------------------------------
    # Solvency
    # ------------------------------------------------------------------

    def _price(self, token: str) -> int:
        source = self._registry.price_source(token)
        return stale_check_latest_quote(source, self._clock()).answer

    def _get_account_information(self, user: str) -> tuple[int, int]:
        return self._ledger.minted_of(user), self.get_account_collateral_value(user)

    def _health_factor(self, user: str) -> int:
        total_dsc_minted, collateral_value_in_usd = self._get_account_information(user)
        return health.calculate_health_factor(total_dsc_minted, collateral_value_in_usd)

    def _revert_if_health_factor_is_broken(self, user: str) -> None:
        user_health_factor = self._health_factor(user)
        if user_health_factor < MIN_HEALTH_FACTOR:
            raise BreaksHealthFactor(user_health_factor)

    # ------------------------------------------------------------------
    # Read-only queries
    # ------------------------------------------------------------------

    def get_account_information(self, user: str) -> tuple[int, int]:
        """Return ``(total_dsc_minted, collateral_value_in_usd)``."""
        return self._get_account_information(user)

    def get_account_collateral_value(self, user: str) -> int:
        """USD value of every registered asset ``user`` holds, priced live."""
        total_collateral_value_in_usd = 0
        for token in self._registry.addresses():
            amount = self._ledger.collateral_of(user, token)
            total_collateral_value_in_usd += self.get_usd_value(token, amount)
        return total_collateral_value_in_usd

    def get_usd_value(self, token: str, amount: int) -> int:
        return health.usd_value(self._price(token), amount)

    def get_token_amount_from_usd(self, token: str, usd_amount_in_wei: int) -> int:
        return health.token_amount_from_usd(self._price(token), usd_amount_in_wei)

    def get_health_factor(self, user: str) -> int:
        return self._health_factor(user)

    def calculate_health_factor(
        self, total_dsc_minted: int, collateral_value_in_usd: int
    ) -> int:
        return health.calculate_health_factor(total_dsc_minted, collateral_value_in_usd)

    def get_collateral_balance_of_user(self, user: str, token: str) -> int:
        return self._ledger.collateral_of(user, token)

    def get_dsc_minted(self, user: str) -> int:
        return self._ledger.minted_of(user)

    def get_total_collateral(self, token: str) -> int:
        return self._ledger.total_collateral(token)

    def get_total_dsc_minted(self) -> int:
        return self._ledger.total_minted()

    def get_collateral_tokens(self) -> list[str]:
        return self._registry.addresses()

    def get_collateral_token_price_feed(self, token: str) -> str:
        return self._registry.price_source(token).address

    def get_dsc(self) -> str:
        return self._dsc.address

    def get_users(self) -> set[str]:
        """Accounts with a non-zero balance or debt."""
        return self._ledger.users()

    @property
    def parameters(self) -> EngineParameters:
        return EngineParameters(
            min_health_factor=MIN_HEALTH_FACTOR,
            liquidation_threshold=LIQUIDATION_THRESHOLD,
            liquidation_bonus=LIQUIDATION_BONUS,
            liquidation_precision=LIQUIDATION_PRECISION,
            precision=PRECISION,
            additional_feed_precision=ADDITIONAL_FEED_PRECISION,
            feed_precision=FEED_PRECISION,
            oracle_timeout=get_timeout(),
        )
