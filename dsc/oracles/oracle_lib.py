"""Staleness guard for price sources.

Stateless: every call polls the source and judges the answer against the
supplied clock reading. The answer itself (sign, magnitude) is passed through
untouched; conversions downstream decide what a usable price is.
"""
from __future__ import annotations

import logging

from ..constants import TIMEOUT
from ..errors import StalePrice
from ..interfaces.price_source import PriceSource
from ..models import PriceQuote

logger = logging.getLogger(__name__)


def stale_check_latest_quote(source: PriceSource, now: int) -> PriceQuote:
    """Return the source's latest quote, or raise ``StalePrice``.

    A quote is stale when it was never populated, when it was carried over
    from an earlier round, or when it is more than ``TIMEOUT`` seconds old.
    """
    quote = source.latest_quote()

    if quote.updated_at == 0:
        raise StalePrice(f"{source.address}: feed has never been updated")
    if quote.answered_in_round < quote.round_id:
        raise StalePrice(
            f"{source.address}: round {quote.round_id} answered in "
            f"round {quote.answered_in_round}"
        )

    seconds_since = now - quote.updated_at
    if seconds_since > TIMEOUT:
        logger.debug(
            "Feed %s is %d seconds old (timeout %d)",
            source.address, seconds_since, TIMEOUT,
        )
        raise StalePrice(
            f"{source.address}: last update {seconds_since}s ago exceeds {TIMEOUT}s"
        )

    return quote


def get_timeout() -> int:
    return TIMEOUT
