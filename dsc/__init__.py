"""Overcollateralized synthetic-dollar ledger."""
from .engine import DSCEngine
from .errors import DSCError

__all__ = ["DSCEngine", "DSCError"]
__version__ = "0.1.0"
