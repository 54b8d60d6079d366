"""Stateful property tests: custody, supply and solvency hold after any call sequence.

Prices move and accounts get liquidated. An account can only drop below the
minimum health factor through a price fall while it holds debt; until it
next passes a health check it is tracked as exposed.
"""
from __future__ import annotations

from hypothesis import settings
from hypothesis import strategies as st
from hypothesis.stateful import RuleBasedStateMachine, initialize, invariant, rule

from dsc.constants import MIN_HEALTH_FACTOR
from dsc.engine import DSCEngine
from dsc.errors import (
    BreaksHealthFactor,
    HealthFactorNotImproved,
    HealthFactorOk,
    InsufficientBalance,
    TransferFailed,
)
from dsc.oracles import StaticPriceFeed
from dsc.tokens import DecentralizedStableCoin, ERC20Token
from tests.conftest import ENGINE, START_TIME

USERS = ("alice", "bob", "carol")
TOKENS = ("WETH", "WBTC")
STARTING_PRICES = {"WETH": 2000, "WBTC": 1000}
FUNDING = 1_000 * 10**18

users = st.sampled_from(USERS)
tokens = st.sampled_from(TOKENS)
amounts = st.integers(min_value=1, max_value=50 * 10**18)
dsc_amounts = st.integers(min_value=1, max_value=100_000 * 10**18)
prices = st.integers(min_value=1, max_value=5_000)


class SolvencyMachine(RuleBasedStateMachine):
    @initialize()
    def setup(self) -> None:
        self.tokens = {address: ERC20Token(address) for address in TOKENS}
        for token in self.tokens.values():
            for user in USERS:
                token.mint(user, FUNDING)
        self.prices = dict(STARTING_PRICES)
        self.feeds = {
            "WETH": StaticPriceFeed("ETH/USD", self.prices["WETH"] * 10**8, START_TIME),
            "WBTC": StaticPriceFeed("BTC/USD", self.prices["WBTC"] * 10**8, START_TIME),
        }
        self.dsc = DecentralizedStableCoin()
        self.engine = DSCEngine(
            list(self.tokens.values()),
            [self.feeds[token] for token in TOKENS],
            self.dsc.grant_minter(ENGINE),
            address=ENGINE, clock=lambda: START_TIME,
        )
        self.exposed: set[str] = set()

    def _state(self) -> tuple:
        return (
            tuple(
                (user, token, self.engine.get_collateral_balance_of_user(user, token),
                 self.tokens[token].balance_of(user))
                for user in USERS for token in TOKENS
            ),
            tuple((user, self.engine.get_dsc_minted(user), self.dsc.balance_of(user))
                  for user in USERS),
            self.dsc.total_supply(),
            self.engine.events,
        )

    def _attempt(self, call, *expected: type[Exception]) -> bool:
        before = self._state()
        try:
            call()
        except expected:
            assert self._state() == before
            return False
        return True

    def _passed_health_check(self, user: str) -> None:
        assert self.engine.get_health_factor(user) >= MIN_HEALTH_FACTOR
        self.exposed.discard(user)

    @rule(user=users, token=tokens, amount=amounts)
    def deposit(self, user: str, token: str, amount: int) -> None:
        self._attempt(
            lambda: self.engine.deposit_collateral(user, token, amount), TransferFailed
        )

    @rule(user=users, amount=dsc_amounts)
    def mint(self, user: str, amount: int) -> None:
        if self._attempt(lambda: self.engine.mint_dsc(user, amount), BreaksHealthFactor):
            self._passed_health_check(user)

    @rule(user=users, token=tokens, amount=amounts, dsc_amount=dsc_amounts)
    def deposit_and_mint(self, user: str, token: str, amount: int, dsc_amount: int) -> None:
        if self._attempt(
            lambda: self.engine.deposit_collateral_and_mint_dsc(user, token, amount, dsc_amount),
            BreaksHealthFactor, TransferFailed,
        ):
            self._passed_health_check(user)

    @rule(user=users, token=tokens, amount=amounts)
    def redeem(self, user: str, token: str, amount: int) -> None:
        if self._attempt(
            lambda: self.engine.redeem_collateral(user, token, amount),
            BreaksHealthFactor, InsufficientBalance,
        ):
            self._passed_health_check(user)

    @rule(user=users, amount=dsc_amounts)
    def burn(self, user: str, amount: int) -> None:
        if self._attempt(
            lambda: self.engine.burn_dsc(user, amount),
            BreaksHealthFactor, InsufficientBalance, TransferFailed,
        ):
            self._passed_health_check(user)

    @rule(sender=users, recipient=users, amount=dsc_amounts)
    def move_dsc(self, sender: str, recipient: str, amount: int) -> None:
        self.dsc.transfer(sender, recipient, amount)

    @rule(token=tokens, usd=prices)
    def set_price(self, token: str, usd: int) -> None:
        if usd < self.prices[token]:
            self.exposed |= {u for u in USERS if self.engine.get_dsc_minted(u) > 0}
        self.prices[token] = usd
        self.feeds[token].update_answer(usd * 10**8, START_TIME)

    @rule(liquidator=users, user=users, token=tokens, debt_to_cover=dsc_amounts)
    def liquidate(self, liquidator: str, user: str, token: str, debt_to_cover: int) -> None:
        starting = self.engine.get_health_factor(user)
        if self._attempt(
            lambda: self.engine.liquidate(liquidator, token, user, debt_to_cover),
            HealthFactorOk, HealthFactorNotImproved, InsufficientBalance,
            BreaksHealthFactor, TransferFailed,
        ):
            assert starting < MIN_HEALTH_FACTOR
            assert self.engine.get_health_factor(user) > starting
            self._passed_health_check(liquidator)

    @invariant()
    def custody_matches_ledger(self) -> None:
        for address, token in self.tokens.items():
            assert token.balance_of(ENGINE) == self.engine.get_total_collateral(address)

    @invariant()
    def supply_matches_debt(self) -> None:
        assert self.dsc.total_supply() == self.engine.get_total_dsc_minted()
        assert self.dsc.balance_of(ENGINE) == 0

    @invariant()
    def only_exposed_accounts_can_be_unhealthy(self) -> None:
        for user in USERS:
            if user not in self.exposed:
                assert self.engine.get_health_factor(user) >= MIN_HEALTH_FACTOR

    @invariant()
    def protocol_is_overcollateralized_without_exposure(self) -> None:
        if self.exposed:
            return
        collateral_value = sum(
            self.engine.get_usd_value(token, self.engine.get_total_collateral(token))
            for token in TOKENS
        )
        assert collateral_value >= self.dsc.total_supply()


SolvencyMachine.TestCase.settings = settings(
    max_examples=75, stateful_step_count=40, deadline=None
)
TestSolvency = SolvencyMachine.TestCase
