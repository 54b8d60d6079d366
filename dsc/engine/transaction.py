"""All-or-nothing bookkeeping for a single engine operation."""
from __future__ import annotations

import logging
from collections.abc import Callable

from ..models import EngineRecord
from .ledger import CollateralLedger

logger = logging.getLogger(__name__)

Compensation = Callable[[], object]


class Transaction:
    """Collects records and compensations for one call.

    Ledger changes are undone by restoring the snapshot taken on entry.
    External value movements are undone by their registered compensations,
    newest first. Records only leave the transaction on commit.
    """

    def __init__(self, name: str, ledger: CollateralLedger) -> None:
        self.name = name
        self._ledger = ledger
        self._snapshot = ledger.snapshot()
        self._compensations: list[tuple[str, Compensation]] = []
        self.records: list[EngineRecord] = []

    def emit(self, record: EngineRecord) -> None:
        self.records.append(record)

    def on_rollback(self, description: str, compensation: Compensation) -> None:
        self._compensations.append((description, compensation))

    def rollback(self) -> None:
        self._ledger.restore(self._snapshot)
        self.records.clear()

        while self._compensations:
            description, compensation = self._compensations.pop()
            try:
                ok = compensation()
            except Exception:
                logger.exception("%s: compensation failed: %s", self.name, description)
                continue
            if ok is False:
                logger.error("%s: compensation refused: %s", self.name, description)
            else:
                logger.debug("%s: compensated: %s", self.name, description)
