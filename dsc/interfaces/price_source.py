"""Price source protocol, polled synchronously on every priced call."""
from typing import Protocol

from ..models import PriceQuote


class PriceSource(Protocol):
    """A feed answering with signed prices in ``decimals`` decimals."""

    @property
    def address(self) -> str: ...

    @property
    def decimals(self) -> int: ...

    def latest_quote(self) -> PriceQuote: ...
