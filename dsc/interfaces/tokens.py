"""Token protocols for collateral assets and the pegged debt token."""
from typing import Protocol


class CollateralToken(Protocol):
    """Fungible collateral asset.

    Non-success is reported through the return value, never raised.
    """

    @property
    def address(self) -> str: ...

    def balance_of(self, account: str) -> int: ...

    def transfer_from(self, holder: str, recipient: str, amount: int) -> bool: ...

    def transfer(self, sender: str, recipient: str, amount: int) -> bool: ...


class DebtTokenMinter(Protocol):
    """Narrow mint/burn capability over the pegged token.

    Only the holder of this handle may create or destroy supply.
    """

    @property
    def address(self) -> str: ...

    def balance_of(self, account: str) -> int: ...

    def total_supply(self) -> int: ...

    def mint_to(self, recipient: str, amount: int) -> bool: ...

    def burn_from(self, holder: str, amount: int) -> None: ...

    def pull_into(self, custodian: str, holder: str, amount: int) -> bool: ...
