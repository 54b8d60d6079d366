"""Exception types raised by the DSC engine and its collaborators.

Every engine error aborts the enclosing operation with the ledger restored to
its pre-call state. Nothing here is retried.
"""
from __future__ import annotations


class DSCError(Exception):
    """Base class for all engine errors."""


# -- validation --------------------------------------------------------------


class ValidationError(DSCError):
    """Caller-input fault, reported before any state change."""


class NeedsMoreThanZero(ValidationError):
    def __init__(self) -> None:
        super().__init__("amount must be more than zero")


class TokenNotAllowed(ValidationError):
    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__(f"token not allowed as collateral: {token}")


class TokenAddressesAndPriceFeedAddressesMustBeSameLength(ValidationError):
    def __init__(self, tokens: int, feeds: int) -> None:
        super().__init__(
            f"{tokens} collateral tokens but {feeds} price feeds"
        )


# -- collaborators -----------------------------------------------------------


class TransferFailed(DSCError):
    """A token collaborator reported an unsuccessful transfer."""


class MintFailed(DSCError):
    """The pegged token refused to mint."""


class TokenError(DSCError):
    """Raised by the in-process token implementations."""


# -- solvency / liquidation --------------------------------------------------


class BreaksHealthFactor(DSCError):
    def __init__(self, health_factor: int) -> None:
        self.health_factor = health_factor
        super().__init__(f"health factor would drop to {health_factor}")


class HealthFactorOk(DSCError):
    def __init__(self, user: str, health_factor: int) -> None:
        self.user = user
        self.health_factor = health_factor
        super().__init__(f"{user} is not liquidatable (health factor {health_factor})")


class HealthFactorNotImproved(DSCError):
    def __init__(self, starting: int, ending: int) -> None:
        self.starting = starting
        self.ending = ending
        super().__init__(
            f"liquidation did not improve health factor ({starting} -> {ending})"
        )


# -- oracle ------------------------------------------------------------------


class StalePrice(DSCError):
    """A price quote is missing, carried over, or older than the timeout."""


# -- arithmetic --------------------------------------------------------------


class ArithmeticFault(DSCError):
    """Integer arithmetic would leave the valid domain."""


class InsufficientBalance(ArithmeticFault):
    def __init__(self, account: str, asset: str, balance: int, amount: int) -> None:
        self.account = account
        self.asset = asset
        self.balance = balance
        self.amount = amount
        super().__init__(
            f"{account} holds {balance} of {asset}, cannot remove {amount}"
        )


class InvalidPrice(ArithmeticFault):
    def __init__(self, price: int) -> None:
        self.price = price
        super().__init__(f"price must be positive, got {price}")


# -- sequencing --------------------------------------------------------------


class ReentrancyError(DSCError):
    """A guarded operation was entered while another one was still running."""
