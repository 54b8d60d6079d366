"""The pegged unit and the capability that controls its supply."""
from __future__ import annotations

import logging

from ..errors import TokenError
from .erc20 import ERC20Token

logger = logging.getLogger(__name__)


class DecentralizedStableCoin(ERC20Token):
    """Pegged token; supply changes only through its ``MinterCapability``."""

    def __init__(self, address: str = "DSC", symbol: str = "DSC") -> None:
        super().__init__(address, symbol, decimals=18)
        self._minter: MinterCapability | None = None

    def mint(self, recipient: str, amount: int) -> None:
        raise TokenError("DSC supply is controlled by its minter capability")

    def grant_minter(self, owner: str) -> MinterCapability:
        """Hand out the single mint/burn capability; later grants fail."""
        if self._minter is not None:
            raise TokenError(
                f"minter already granted to {self._minter.owner}"
            )
        self._minter = MinterCapability(self, owner)
        return self._minter

    @property
    def minter(self) -> str | None:
        return self._minter.owner if self._minter else None


class MinterCapability:
    """Mint/burn/pull rights over one ``DecentralizedStableCoin``."""

    def __init__(self, token: DecentralizedStableCoin, owner: str) -> None:
        self._token = token
        self.owner = owner

    @property
    def address(self) -> str:
        return self._token.address

    def balance_of(self, account: str) -> int:
        return self._token.balance_of(account)

    def total_supply(self) -> int:
        return self._token.total_supply()

    def mint_to(self, recipient: str, amount: int) -> bool:
        """Mint to ``recipient``; an empty recipient or non-positive amount is refused."""
        if not recipient or amount <= 0:
            logger.debug("DSC mint of %d to %r refused", amount, recipient)
            return False
        ERC20Token.mint(self._token, recipient, amount)
        return True

    def burn_from(self, holder: str, amount: int) -> None:
        if amount <= 0:
            raise TokenError("burn amount must be more than zero")
        balance = self._token.balance_of(holder)
        if balance < amount:
            raise TokenError(f"burn amount {amount} exceeds balance {balance}")
        self._token._burn(holder, amount)

    def pull_into(self, custodian: str, holder: str, amount: int) -> bool:
        return self._token.transfer_from(holder, custodian, amount)
