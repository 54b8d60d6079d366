"""Scripted engine runs against in-memory tokens and static feeds.

A scenario is a YAML document::

    start_time: 1700000000
    prices: {ETH: 2000}
    actors:
      alice: {WETH: "10e18"}
    steps:
      - deposit_collateral: {sender: alice, token_collateral_address: WETH,
                             amount_collateral: "10e18"}
      - set_price: {feed: ETH, usd: 18}
      - mint_dsc: {sender: alice, amount_dsc_to_mint: "100e18"}
        expect_error: BreaksHealthFactor

Engine steps take the engine method's keyword arguments. ``set_price`` and
``advance_time`` drive the feeds and the clock.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from ..config import AppConfig
from ..engine import DSCEngine
from ..errors import DSCError
from ..models import AccountHealth
from ..oracles.static import StaticPriceFeed
from ..tokens import DecentralizedStableCoin, ERC20Token
from .monitor import assess_account, to_wad

logger = logging.getLogger(__name__)

ENGINE_OPERATIONS = frozenset({
    "deposit_collateral",
    "deposit_collateral_and_mint_dsc",
    "mint_dsc",
    "redeem_collateral",
    "redeem_collateral_for_dsc",
    "burn_dsc",
    "liquidate",
})

AMOUNT_FIELDS = frozenset({
    "amount",
    "amount_collateral",
    "amount_dsc_to_mint",
    "amount_dsc_to_burn",
    "debt_to_cover",
})

DEFAULT_START_TIME = 1_700_000_000


def parse_amount(value: Any) -> int:
    """Accept ints and decimal strings such as ``"15e18"`` or ``"0.5e18"``."""
    if isinstance(value, bool):
        raise ValueError(f"Not an amount: {value!r}")
    if isinstance(value, int):
        return value
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Not an amount: {value!r}") from None
    if amount != amount.to_integral_value():
        raise ValueError(f"Amount must be a whole number of base units: {value!r}")
    return int(amount)


def load_scenario(path: str | Path) -> dict[str, Any]:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Scenario file not found: {path}")
    with open(path) as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw.get("steps", []), list):
        raise ValueError("Scenario 'steps' must be a list")
    return raw


@dataclass(frozen=True)
class StepOutcome:
    index: int
    operation: str
    error: str | None = None
    expected_error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error == self.expected_error


@dataclass(frozen=True)
class ScenarioResult:
    steps: tuple[StepOutcome, ...]
    accounts: tuple[AccountHealth, ...]

    @property
    def failures(self) -> tuple[StepOutcome, ...]:
        return tuple(s for s in self.steps if not s.ok)


class ScenarioRunner:
    """Build an isolated engine from config and replay scenario steps on it."""

    def __init__(self, config: AppConfig, start_time: int = DEFAULT_START_TIME) -> None:
        self._config = config
        self.now = start_time

        self.tokens: dict[str, ERC20Token] = {
            c.address: ERC20Token(c.address, c.symbol, c.decimals)
            for c in config.collateral
        }
        self.feeds: dict[str, StaticPriceFeed] = {}
        for c in config.collateral:
            if c.price_feed not in self.feeds:
                usd = config.price_oracle.static.prices.get(c.price_feed, 0)
                self.feeds[c.price_feed] = StaticPriceFeed.from_usd(
                    c.price_feed, usd, self.now
                )

        self.dsc = DecentralizedStableCoin()
        self.engine = DSCEngine(
            collateral_tokens=list(self.tokens.values()),
            price_sources=[self.feeds[c.price_feed] for c in config.collateral],
            dsc=self.dsc.grant_minter("dsc-engine"),
            clock=lambda: self.now,
        )
        self._warning_level = to_wad(config.monitor.thresholds.health_factor_warning)

    # ------------------------------------------------------------------
    # Step handlers
    # ------------------------------------------------------------------

    def set_price(self, feed: str, usd: float | str | None = None, answer: Any = None) -> None:
        if feed not in self.feeds:
            raise ValueError(f"Unknown feed '{feed}'")
        if answer is None:
            if usd is None:
                raise ValueError("set_price needs 'usd' or 'answer'")
            answer = Decimal(str(usd)) * self.engine.FEED_PRECISION
        self.feeds[feed].update_answer(parse_amount(answer), self.now)

    def advance_time(self, seconds: int) -> None:
        self.now += int(seconds)

    def fund(self, actor: str, balances: dict[str, Any]) -> None:
        for token, amount in balances.items():
            if token not in self.tokens:
                raise ValueError(f"Unknown token '{token}' for actor '{actor}'")
            self.tokens[token].mint(actor, parse_amount(amount))

    def _apply(self, operation: str, args: dict[str, Any]) -> None:
        if operation == "set_price":
            self.set_price(**args)
        elif operation == "advance_time":
            self.advance_time(**args)
        elif operation in ENGINE_OPERATIONS:
            kwargs = {
                k: parse_amount(v) if k in AMOUNT_FIELDS else v
                for k, v in args.items()
            }
            getattr(self.engine, operation)(**kwargs)
        else:
            raise ValueError(f"Unknown scenario operation '{operation}'")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def start_at(self, start_time: int) -> None:
        """Move the clock to ``start_time`` and re-quote every feed there."""
        self.now = int(start_time)
        for feed in self.feeds.values():
            feed.update_answer(feed.latest_quote().answer, self.now)

    def run(self, scenario: dict[str, Any]) -> ScenarioResult:
        if "start_time" in scenario:
            self.start_at(scenario["start_time"])
        for feed, usd in scenario.get("prices", {}).items():
            self.set_price(feed, usd=usd)
        actors = dict(scenario.get("actors", {}))
        for actor, balances in actors.items():
            self.fund(actor, balances or {})

        outcomes: list[StepOutcome] = []
        for index, step in enumerate(scenario.get("steps", []), start=1):
            step = dict(step)
            expected = step.pop("expect_error", None)
            if len(step) != 1:
                raise ValueError(f"Step {index} must name exactly one operation")
            (operation, args), = step.items()

            error: str | None = None
            try:
                self._apply(operation, dict(args or {}))
            except DSCError as e:
                error = type(e).__name__
                logger.info("Step %d %s failed: %s", index, operation, e)
            except TypeError as e:
                raise ValueError(f"Step {index} ({operation}): {e}") from e

            outcome = StepOutcome(index, operation, error, expected)
            if not outcome.ok:
                logger.warning(
                    "Step %d %s: expected %s, got %s",
                    index, operation, expected or "success", error or "success",
                )
            outcomes.append(outcome)

        users = sorted(set(actors) | self.engine.get_users())
        accounts = tuple(
            assess_account(self.engine, user, self._warning_level) for user in users
        )
        return ScenarioResult(tuple(outcomes), accounts)
