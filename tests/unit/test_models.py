"""Unit tests for data models."""
from __future__ import annotations

import pytest

from dsc.models import (
    AccountHealth,
    CollateralDeposited,
    CollateralRedeemed,
    HealthStatus,
    PriceQuote,
)


class TestRecords:
    def test_frozen(self) -> None:
        record = CollateralDeposited(user="alice", token="WETH", amount=1)
        with pytest.raises(AttributeError):
            record.amount = 2  # type: ignore[misc]

    def test_equality(self) -> None:
        a = CollateralRedeemed("alice", "bob", "WETH", 5)
        b = CollateralRedeemed(
            redeemed_from="alice", redeemed_to="bob", token="WETH", amount=5
        )
        assert a == b


class TestPriceQuote:
    def test_fields(self) -> None:
        q = PriceQuote(round_id=3, answer=-1, started_at=9, updated_at=10, answered_in_round=3)
        assert q.answer == -1
        assert q.updated_at == 10


class TestAccountHealth:
    def test_status_is_string_enum(self) -> None:
        h = AccountHealth("alice", 0, 0, 0, HealthStatus.LIQUIDATABLE)
        assert h.status == "liquidatable"
        assert h.status.value == "liquidatable"
