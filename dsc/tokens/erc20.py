"""Minimal fungible token ledger."""
from __future__ import annotations

import logging

from ..errors import TokenError

logger = logging.getLogger(__name__)


class ERC20Token:
    """Fungible token with integer balances.

    Transfers report failure through their return value; only programming
    errors (negative amounts) raise.
    """

    def __init__(self, address: str, symbol: str = "", decimals: int = 18) -> None:
        self._address = address
        self.symbol = symbol or address
        self.decimals = decimals
        self._balances: dict[str, int] = {}
        self._total_supply = 0

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._address!r})"

    @property
    def address(self) -> str:
        return self._address

    def balance_of(self, account: str) -> int:
        return self._balances.get(account, 0)

    def total_supply(self) -> int:
        return self._total_supply

    def mint(self, recipient: str, amount: int) -> None:
        """Faucet: create ``amount`` for ``recipient``."""
        if amount < 0:
            raise TokenError(f"cannot mint negative amount {amount}")
        self._balances[recipient] = self.balance_of(recipient) + amount
        self._total_supply += amount

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        return self._move(sender, recipient, amount)

    def transfer_from(self, holder: str, recipient: str, amount: int) -> bool:
        return self._move(holder, recipient, amount)

    def _move(self, sender: str, recipient: str, amount: int) -> bool:
        if amount < 0:
            raise TokenError(f"cannot transfer negative amount {amount}")
        balance = self.balance_of(sender)
        if balance < amount:
            logger.debug(
                "%s transfer of %d from %s refused (balance %d)",
                self.symbol, amount, sender, balance,
            )
            return False
        self._balances[sender] = balance - amount
        self._balances[recipient] = self.balance_of(recipient) + amount
        return True

    def _burn(self, holder: str, amount: int) -> None:
        self._balances[holder] = self.balance_of(holder) - amount
        self._total_supply -= amount
