"""Per-account collateral balances and minted debt."""
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from ..errors import InsufficientBalance, NeedsMoreThanZero
from ..models import CollateralDeposited, CollateralRedeemed, EngineRecord

DEBT_ASSET = "DSC"


@dataclass(frozen=True)
class LedgerSnapshot:
    collateral: dict[str, dict[str, int]]
    minted: dict[str, int]


class CollateralLedger:
    """Balances keyed by user; missing entries read as zero.

    Every balance change and the record describing it happen in the same
    call, so readers never see one without the other.
    """

    def __init__(self, emit: Callable[[EngineRecord], None]) -> None:
        self._emit = emit
        self._collateral: dict[str, dict[str, int]] = {}
        self._minted: dict[str, int] = {}

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def collateral_of(self, user: str, token: str) -> int:
        return self._collateral.get(user, {}).get(token, 0)

    def minted_of(self, user: str) -> int:
        return self._minted.get(user, 0)

    def total_collateral(self, token: str) -> int:
        return sum(balances.get(token, 0) for balances in self._collateral.values())

    def total_minted(self) -> int:
        return sum(self._minted.values())

    def users(self) -> set[str]:
        return set(self._collateral) | set(self._minted)

    # ------------------------------------------------------------------
    # Collateral
    # ------------------------------------------------------------------

    def credit(self, user: str, token: str, amount: int) -> None:
        if amount <= 0:
            raise NeedsMoreThanZero()
        balances = self._collateral.setdefault(user, {})
        balances[token] = balances.get(token, 0) + amount
        self._emit(CollateralDeposited(user, token, amount))

    def debit(self, redeemed_from: str, redeemed_to: str, token: str, amount: int) -> None:
        balance = self.collateral_of(redeemed_from, token)
        if amount > balance:
            raise InsufficientBalance(redeemed_from, token, balance, amount)
        self._set_collateral(redeemed_from, token, balance - amount)
        self._emit(CollateralRedeemed(redeemed_from, redeemed_to, token, amount))

    def _set_collateral(self, user: str, token: str, amount: int) -> None:
        balances = self._collateral.get(user, {})
        if amount:
            balances[token] = amount
            return
        balances.pop(token, None)
        if not balances:
            self._collateral.pop(user, None)

    # ------------------------------------------------------------------
    # Debt
    # ------------------------------------------------------------------

    def add_debt(self, user: str, amount: int) -> None:
        self._minted[user] = self.minted_of(user) + amount

    def remove_debt(self, user: str, amount: int) -> None:
        minted = self.minted_of(user)
        if amount > minted:
            raise InsufficientBalance(user, DEBT_ASSET, minted, amount)
        if minted == amount:
            self._minted.pop(user, None)
        else:
            self._minted[user] = minted - amount

    # ------------------------------------------------------------------
    # Rollback support
    # ------------------------------------------------------------------

    def snapshot(self) -> LedgerSnapshot:
        return LedgerSnapshot(
            collateral={user: dict(b) for user, b in self._collateral.items()},
            minted=dict(self._minted),
        )

    def restore(self, snapshot: LedgerSnapshot) -> None:
        self._collateral = {user: dict(b) for user, b in snapshot.collateral.items()}
        self._minted = dict(snapshot.minted)
