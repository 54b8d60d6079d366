"""Fixed-point scales and risk parameters shared by the engine and its helpers."""
from __future__ import annotations

# ---------------------------------------------------------------------------
# Scaling factors
# ---------------------------------------------------------------------------
PRECISION: int = 10**18
FEED_PRECISION: int = 10**8
ADDITIONAL_FEED_PRECISION: int = 10**10  # 8-decimal feed -> 18 decimals

# ---------------------------------------------------------------------------
# Risk parameters (percent of LIQUIDATION_PRECISION)
# ---------------------------------------------------------------------------
LIQUIDATION_THRESHOLD: int = 50  # 200% overcollateralized
LIQUIDATION_BONUS: int = 10
LIQUIDATION_PRECISION: int = 100

MIN_HEALTH_FACTOR: int = PRECISION
MAX_HEALTH_FACTOR: int = 2**256 - 1

# ---------------------------------------------------------------------------
# Oracle
# ---------------------------------------------------------------------------
TIMEOUT: int = 3 * 60 * 60  # 10800 seconds
