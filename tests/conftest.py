"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from dsc.config import (
    AppConfig,
    CollateralConfig,
    MonitorConfig,
    NotificationsConfig,
    PriceOracleConfig,
    PythConfig,
    StaticOracleConfig,
    TelegramConfig,
    ThresholdsConfig,
)
from dsc.engine import DSCEngine
from dsc.oracles import StaticPriceFeed
from dsc.tokens import DecentralizedStableCoin, ERC20Token

START_TIME = 1_700_000_000

ETH_USD_PRICE = 2000 * 10**8
BTC_USD_PRICE = 1000 * 10**8

USER = "user"
LIQUIDATOR = "liquidator"
ENGINE = "dsc-engine"

STARTING_ERC20_BALANCE = 10 * 10**18
AMOUNT_COLLATERAL = 10 * 10**18
AMOUNT_TO_MINT = 100 * 10**18
COLLATERAL_TO_COVER = 20 * 10**18


class FakeClock:
    """Logical clock the engine reads on every priced call."""

    def __init__(self, now: int = START_TIME) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


# ---------------------------------------------------------------------------
# Engine fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def weth() -> ERC20Token:
    token = ERC20Token("WETH", "WETH")
    token.mint(USER, STARTING_ERC20_BALANCE)
    return token


@pytest.fixture()
def wbtc() -> ERC20Token:
    token = ERC20Token("WBTC", "WBTC")
    token.mint(USER, STARTING_ERC20_BALANCE)
    return token


@pytest.fixture()
def eth_usd(clock: FakeClock) -> StaticPriceFeed:
    return StaticPriceFeed("ETH/USD", ETH_USD_PRICE, clock.now)


@pytest.fixture()
def btc_usd(clock: FakeClock) -> StaticPriceFeed:
    return StaticPriceFeed("BTC/USD", BTC_USD_PRICE, clock.now)


@pytest.fixture()
def dsc() -> DecentralizedStableCoin:
    return DecentralizedStableCoin()


@pytest.fixture()
def engine(
    weth: ERC20Token,
    wbtc: ERC20Token,
    eth_usd: StaticPriceFeed,
    btc_usd: StaticPriceFeed,
    dsc: DecentralizedStableCoin,
    clock: FakeClock,
) -> DSCEngine:
    return DSCEngine(
        [weth, wbtc],
        [eth_usd, btc_usd],
        dsc.grant_minter(ENGINE),
        address=ENGINE,
        clock=clock,
    )


@pytest.fixture()
def deposited(engine: DSCEngine) -> DSCEngine:
    engine.deposit_collateral(USER, "WETH", AMOUNT_COLLATERAL)
    return engine


@pytest.fixture()
def deposited_and_minted(engine: DSCEngine) -> DSCEngine:
    engine.deposit_collateral_and_mint_dsc(USER, "WETH", AMOUNT_COLLATERAL, AMOUNT_TO_MINT)
    return engine


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_thresholds() -> ThresholdsConfig:
    return ThresholdsConfig(health_factor_warning=1.5)


@pytest.fixture()
def sample_pyth_config() -> PythConfig:
    return PythConfig(
        hermes_url="https://hermes.example.com/v2/updates/price/latest",
        feeds={"ETH": "aaa111", "BTC": "bbb222"},
    )


@pytest.fixture()
def sample_app_config(
    sample_thresholds: ThresholdsConfig,
    sample_pyth_config: PythConfig,
) -> AppConfig:
    return AppConfig(
        collateral=(
            CollateralConfig(symbol="WETH", address="WETH", price_feed="ETH"),
            CollateralConfig(symbol="WBTC", address="WBTC", price_feed="BTC"),
        ),
        price_oracle=PriceOracleConfig(
            provider="static",
            pyth=sample_pyth_config,
            static=StaticOracleConfig(prices={"ETH": 2000.0, "BTC": 1000.0}),
        ),
        monitor=MonitorConfig(thresholds=sample_thresholds),
        notifications=NotificationsConfig(
            telegram=TelegramConfig(
                enabled=True,
                alert_bot_token="fake-alert-token",
                log_bot_token="fake-log-token",
                chat_id="12345",
            ),
        ),
    )


# ---------------------------------------------------------------------------
# Config YAML fixture
# ---------------------------------------------------------------------------

SAMPLE_YAML = textwrap.dedent("""\
    collateral:
      - symbol: WETH
        address: WETH
        price_feed: ETH
      - symbol: WBTC
        price_feed: BTC
        decimals: 8
    price_oracle:
      provider: pyth
      pyth:
        hermes_url: "https://hermes.example.com"
        feeds: {ETH: "aaa", BTC: "bbb"}
      static:
        prices: {ETH: 2000}
    monitor:
      thresholds:
        health_factor_warning: 1.25
    notifications:
      telegram:
        enabled: true
        alert_bot_token: "tok1"
        log_bot_token: "tok2"
        chat_id: 999
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file
