"""Protocol interfaces for the engine's collaborators."""
from .notifier import Notifier
from .price_source import PriceSource
from .tokens import CollateralToken, DebtTokenMinter

__all__ = ["CollateralToken", "DebtTokenMinter", "Notifier", "PriceSource"]
