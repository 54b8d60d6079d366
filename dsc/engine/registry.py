"""Accepted collateral assets and the feeds that price them."""
from __future__ import annotations

from collections.abc import Sequence

from ..errors import (
    TokenAddressesAndPriceFeedAddressesMustBeSameLength,
    TokenNotAllowed,
    ValidationError,
)
from ..interfaces.price_source import PriceSource
from ..interfaces.tokens import CollateralToken
from ..models import CollateralAsset


class Registry:
    """Ordered, read-only collateral whitelist built once at construction."""

    def __init__(
        self,
        tokens: Sequence[CollateralToken],
        price_sources: Sequence[PriceSource],
    ) -> None:
        if len(tokens) != len(price_sources):
            raise TokenAddressesAndPriceFeedAddressesMustBeSameLength(
                len(tokens), len(price_sources)
            )

        self._tokens: dict[str, CollateralToken] = {}
        self._sources: dict[str, PriceSource] = {}
        assets: list[CollateralAsset] = []
        for token, source in zip(tokens, price_sources):
            if token.address in self._tokens:
                raise ValidationError(f"duplicate collateral token {token.address}")
            self._tokens[token.address] = token
            self._sources[token.address] = source
            assets.append(CollateralAsset(token.address, source.address))
        self._assets = tuple(assets)

    def __contains__(self, token: object) -> bool:
        return token in self._tokens

    def __len__(self) -> int:
        return len(self._assets)

    @property
    def assets(self) -> tuple[CollateralAsset, ...]:
        return self._assets

    def addresses(self) -> list[str]:
        return [a.address for a in self._assets]

    def token(self, address: str) -> CollateralToken:
        try:
            return self._tokens[address]
        except KeyError:
            raise TokenNotAllowed(address) from None

    def price_source(self, address: str) -> PriceSource:
        try:
            return self._sources[address]
        except KeyError:
            raise TokenNotAllowed(address) from None
