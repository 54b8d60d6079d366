"""Unit tests for the price staleness guard."""
from __future__ import annotations

import pytest

from dsc.constants import TIMEOUT
from dsc.errors import StalePrice
from dsc.oracles import StaticPriceFeed, get_timeout, stale_check_latest_quote

NOW = 1_700_000_000


@pytest.fixture()
def feed() -> StaticPriceFeed:
    return StaticPriceFeed("ETH/USD", 2000 * 10**8, NOW)


class TestStaleCheck:
    def test_fresh_quote_passes_through(self, feed: StaticPriceFeed) -> None:
        quote = stale_check_latest_quote(feed, NOW + 60)
        assert quote.answer == 2000 * 10**8
        assert quote.round_id == quote.answered_in_round == 1

    def test_exactly_at_timeout_is_fresh(self, feed: StaticPriceFeed) -> None:
        stale_check_latest_quote(feed, NOW + TIMEOUT)

    def test_past_timeout_is_stale(self, feed: StaticPriceFeed) -> None:
        with pytest.raises(StalePrice):
            stale_check_latest_quote(feed, NOW + TIMEOUT + 1)

    @pytest.mark.parametrize("answer", [1, 2000 * 10**8, 10**30])
    def test_stale_regardless_of_price(self, feed: StaticPriceFeed, answer: int) -> None:
        feed.update_answer(answer, NOW)
        with pytest.raises(StalePrice):
            stale_check_latest_quote(feed, NOW + 10_801)

    def test_never_updated_is_stale(self, feed: StaticPriceFeed) -> None:
        feed.update_round_data(0, 2000 * 10**8, 0, 0, 0)
        with pytest.raises(StalePrice, match="never been updated"):
            stale_check_latest_quote(feed, NOW)

    def test_carried_over_round_is_stale(self, feed: StaticPriceFeed) -> None:
        feed.update_round_data(5, 2000 * 10**8, NOW, NOW, 4)
        with pytest.raises(StalePrice, match="round 5"):
            stale_check_latest_quote(feed, NOW)

    def test_non_positive_answer_is_not_judged(self, feed: StaticPriceFeed) -> None:
        feed.update_answer(-5, NOW)
        assert stale_check_latest_quote(feed, NOW).answer == -5

    def test_each_update_opens_a_round(self, feed: StaticPriceFeed) -> None:
        feed.update_answer(1, NOW)
        feed.update_answer(2, NOW + 1)
        quote = feed.latest_quote()
        assert quote.round_id == 3
        assert quote.updated_at == NOW + 1

    def test_timeout_constant(self) -> None:
        assert get_timeout() == 10_800
