"""Manually driven price feed, for simulations and tests."""
from __future__ import annotations

from ..constants import FEED_PRECISION
from ..models import PriceQuote


class StaticPriceFeed:
    """Price feed whose answers are pushed by the owner.

    Mirrors an aggregator: each ``update_answer`` opens a new round that is
    answered in that same round.
    """

    def __init__(
        self,
        address: str,
        initial_answer: int,
        updated_at: int,
        decimals: int = 8,
    ) -> None:
        self._address = address
        self._decimals = decimals
        self._quote = PriceQuote(0, 0, 0, 0, 0)
        self.update_answer(initial_answer, updated_at)

    @property
    def address(self) -> str:
        return self._address

    @property
    def decimals(self) -> int:
        return self._decimals

    def latest_quote(self) -> PriceQuote:
        return self._quote

    def update_answer(self, answer: int, updated_at: int) -> None:
        round_id = self._quote.round_id + 1
        self._quote = PriceQuote(
            round_id=round_id,
            answer=answer,
            started_at=updated_at,
            updated_at=updated_at,
            answered_in_round=round_id,
        )

    def update_round_data(
        self,
        round_id: int,
        answer: int,
        started_at: int,
        updated_at: int,
        answered_in_round: int,
    ) -> None:
        """Overwrite the quote verbatim, including inconsistent rounds."""
        self._quote = PriceQuote(
            round_id=round_id,
            answer=answer,
            started_at=started_at,
            updated_at=updated_at,
            answered_in_round=answered_in_round,
        )

    @classmethod
    def from_usd(cls, address: str, usd: int | float, updated_at: int) -> "StaticPriceFeed":
        """Build a feed quoting ``usd`` dollars at the standard 8 decimals."""
        return cls(address, int(round(usd * FEED_PRECISION)), updated_at)
