"""Pyth Network price feeds served from periodically refreshed snapshots."""
from __future__ import annotations

import logging
import ssl

import aiohttp
import certifi

from ..config import PythConfig
from ..models import PriceQuote

logger = logging.getLogger(__name__)

PYTH_TARGET_EXPO = -8


def normalize_price(price_raw: int, expo: int) -> int:
    """Rescale a Pyth ``price * 10^expo`` pair to 8 decimals."""
    shift = expo - PYTH_TARGET_EXPO
    if shift >= 0:
        return price_raw * 10**shift
    return price_raw // 10**(-shift)


class PythPriceFeed:
    """Single Pyth feed exposing its last pushed snapshot as a quote.

    Until the first push the quote is all zeros, which the staleness guard
    rejects.
    """

    def __init__(self, feed_id: str, symbol: str = "") -> None:
        self.feed_id = feed_id
        self.symbol = symbol
        self._quote = PriceQuote(0, 0, 0, 0, 0)

    @property
    def address(self) -> str:
        return self.feed_id

    @property
    def decimals(self) -> int:
        return -PYTH_TARGET_EXPO

    def latest_quote(self) -> PriceQuote:
        return self._quote

    def push(self, price_raw: int, expo: int, publish_time: int) -> None:
        """Record a Hermes update; a new publish time opens a new round."""
        if publish_time == self._quote.updated_at:
            return
        round_id = self._quote.round_id + 1
        self._quote = PriceQuote(
            round_id=round_id,
            answer=normalize_price(price_raw, expo),
            started_at=publish_time,
            updated_at=publish_time,
            answered_in_round=round_id,
        )


class PythOracle:
    """Refresh every configured Pyth feed from the Hermes REST API."""

    def __init__(self, config: PythConfig) -> None:
        self.hermes_url = config.hermes_url
        self.feeds: dict[str, PythPriceFeed] = {
            symbol: PythPriceFeed(feed_id, symbol)
            for symbol, feed_id in config.feeds.items()
        }

    def feed(self, symbol: str) -> PythPriceFeed:
        return self.feeds[symbol]

    async def refresh(self, symbols: list[str] | None = None) -> int:
        """Pull the latest prices and push them into the feeds.

        Args:
            symbols: Optional subset of symbols to refresh. If None, refreshes
                     all configured feeds.

        Returns the number of feeds that received a new round. Network and
        HTTP errors are logged and leave the snapshots untouched.
        """
        feeds = self.feeds
        if symbols is not None:
            feeds = {k: v for k, v in self.feeds.items() if k in symbols}

        id_to_feeds: dict[str, list[PythPriceFeed]] = {}
        for feed in feeds.values():
            id_to_feeds.setdefault(feed.feed_id, []).append(feed)
        if not id_to_feeds:
            return 0

        query_params = "&".join(f"ids[]={fid}" for fid in id_to_feeds)
        url = f"{self.hermes_url}?{query_params}"

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        updated = 0
        try:
            async with aiohttp.ClientSession(connector=connector) as session:
                async with session.get(url) as response:
                    if response.status != 200:
                        logger.error(
                            "Error fetching prices from Pyth: HTTP %s", response.status
                        )
                        return 0

                    data = await response.json()

            for item in data.get("parsed", []):
                price_data = item.get("price", {})
                price_raw = int(price_data.get("price", 0))
                expo = int(price_data.get("expo", 0))
                publish_time = int(price_data.get("publish_time", 0))

                for feed in id_to_feeds.get(item.get("id"), []):
                    before = feed.latest_quote().round_id
                    feed.push(price_raw, expo, publish_time)
                    if feed.latest_quote().round_id != before:
                        updated += 1
                        logger.info(
                            "  %s: %d (1e8) published at %d",
                            feed.symbol, feed.latest_quote().answer, publish_time,
                        )
        except (aiohttp.ClientError, ValueError, ConnectionError, TimeoutError) as e:
            logger.error("Error fetching prices from Pyth: %s", e)

        return updated
