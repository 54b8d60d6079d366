"""Price feeds and the staleness guard applied to them."""
from .oracle_lib import get_timeout, stale_check_latest_quote
from .pyth import PythOracle, PythPriceFeed
from .static import StaticPriceFeed

__all__ = [
    "PythOracle",
    "PythPriceFeed",
    "StaticPriceFeed",
    "get_timeout",
    "stale_check_latest_quote",
]
