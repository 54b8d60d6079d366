"""Collateral ledger, health math and the operation engine."""
from .dsc_engine import DSCEngine
from .guard import ReentrancyGuard
from .health import calculate_health_factor
from .ledger import CollateralLedger
from .registry import Registry

__all__ = [
    "CollateralLedger",
    "DSCEngine",
    "ReentrancyGuard",
    "Registry",
    "calculate_health_factor",
]
