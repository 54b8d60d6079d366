"""Notification channels for health alerts."""
from .telegram import TelegramNotifier

__all__ = ["TelegramNotifier"]
