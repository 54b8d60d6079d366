"""Pure solvency math: health factor and price conversions.

All values are integers. USD amounts carry 18 decimals; prices carry the
feed's 8 decimals and are lifted by ``ADDITIONAL_FEED_PRECISION``.
"""
from __future__ import annotations

from ..constants import (
    ADDITIONAL_FEED_PRECISION,
    LIQUIDATION_BONUS,
    LIQUIDATION_PRECISION,
    LIQUIDATION_THRESHOLD,
    MAX_HEALTH_FACTOR,
    MIN_HEALTH_FACTOR,
    PRECISION,
)
from ..errors import InvalidPrice


def calculate_health_factor(total_dsc_minted: int, collateral_value_in_usd: int) -> int:
    """Return the 18-decimal health factor.

    health_factor = (collateral * threshold% ) * 1e18 / debt

    An account without debt can never be unhealthy and gets the maximum value.
    """
    if total_dsc_minted == 0:
        return MAX_HEALTH_FACTOR
    collateral_adjusted_for_threshold = (
        collateral_value_in_usd * LIQUIDATION_THRESHOLD // LIQUIDATION_PRECISION
    )
    return collateral_adjusted_for_threshold * PRECISION // total_dsc_minted


def is_liquidatable(health_factor: int) -> bool:
    return health_factor < MIN_HEALTH_FACTOR


def _check_price(price: int) -> None:
    if price <= 0:
        raise InvalidPrice(price)


def usd_value(price: int, amount: int) -> int:
    """USD value (18 decimals) of ``amount`` native units at ``price``."""
    _check_price(price)
    return price * ADDITIONAL_FEED_PRECISION * amount // PRECISION


def token_amount_from_usd(price: int, usd_amount_in_wei: int) -> int:
    """Native units worth ``usd_amount_in_wei`` at ``price``, rounded down."""
    _check_price(price)
    return usd_amount_in_wei * PRECISION // (price * ADDITIONAL_FEED_PRECISION)


def liquidation_bonus(token_amount: int) -> int:
    """Extra collateral paid to a liquidator on top of ``token_amount``."""
    return token_amount * LIQUIDATION_BONUS // LIQUIDATION_PRECISION
