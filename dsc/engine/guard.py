"""Scoped exclusive-execution guard for state-mutating entry points."""
from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from ..errors import ReentrancyError


class ReentrancyGuard:
    """Refuses nested entry instead of waiting for the holder to finish."""

    def __init__(self) -> None:
        self._holder: str | None = None

    @property
    def locked(self) -> bool:
        return self._holder is not None

    @contextmanager
    def acquire(self, operation: str) -> Iterator[None]:
        if self._holder is not None:
            raise ReentrancyError(
                f"{operation} called while {self._holder} is in progress"
            )
        self._holder = operation
        try:
            yield
        finally:
            self._holder = None
