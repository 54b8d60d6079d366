"""Service modules"""
from .monitor import HealthMonitor, assess_account
from .scenario import ScenarioResult, ScenarioRunner, load_scenario

__all__ = [
    "HealthMonitor",
    "ScenarioResult",
    "ScenarioRunner",
    "assess_account",
    "load_scenario",
]
