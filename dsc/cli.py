"""Command-line interface for the DSC ledger."""
from __future__ import annotations

import argparse
import asyncio
import sys
import time

from .config import AppConfig, load_config
from .errors import StalePrice
from .interfaces.notifier import Notifier
from .interfaces.price_source import PriceSource
from .logging_setup import configure_logging
from .notifications import TelegramNotifier
from .oracles import PythOracle, StaticPriceFeed, stale_check_latest_quote
from .services import HealthMonitor, ScenarioRunner, load_scenario
from .services.monitor import format_health_factor, format_usd


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="dsc-engine",
        description="Overcollateralized synthetic-dollar ledger",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    sub.add_parser("prices", help="Fetch and validate collateral prices")

    run_parser = sub.add_parser("run", help="Replay a scenario file")
    run_parser.add_argument("scenario", help="Path to scenario YAML")
    run_parser.add_argument(
        "--alert",
        action="store_true",
        help="Send notifications for unhealthy accounts after the run",
    )

    return parser


def build_notifiers(config: AppConfig) -> list[Notifier]:
    notifiers: list[Notifier] = []
    if config.notifications.telegram.enabled:
        notifiers.append(TelegramNotifier(config.notifications.telegram))
    return notifiers


async def _load_price_sources(config: AppConfig, now: int) -> dict[str, PriceSource]:
    if config.price_oracle.provider == "pyth":
        oracle = PythOracle(config.price_oracle.pyth)
        await oracle.refresh()
        return dict(oracle.feeds)
    return {
        symbol: StaticPriceFeed.from_usd(symbol, usd, now)
        for symbol, usd in config.price_oracle.static.prices.items()
    }


async def _prices(config: AppConfig) -> int:
    now = int(time.time())
    sources = await _load_price_sources(config, now)

    stale = 0
    for asset in config.collateral:
        source = sources[asset.price_feed]
        try:
            quote = stale_check_latest_quote(source, now)
        except StalePrice as e:
            stale += 1
            print(f"{asset.symbol:<8} STALE  {e}")
            continue
        print(
            f"{asset.symbol:<8} ${quote.answer / 10**source.decimals:,.4f}  "
            f"round {quote.round_id}  age {now - quote.updated_at}s"
        )
    return 1 if stale else 0


async def _run_scenario(config: AppConfig, path: str, alert: bool) -> int:
    runner = ScenarioRunner(config)
    result = runner.run(load_scenario(path))

    for step in result.steps:
        mark = "ok " if step.ok else "FAIL"
        outcome = step.error or "success"
        print(f"[{mark}] {step.index:>3} {step.operation:<32} {outcome}")

    print()
    for account in result.accounts:
        print(
            f"{account.user:<16} {account.status.value:<12} "
            f"collateral {format_usd(account.collateral_value_usd):>16}  "
            f"debt {format_usd(account.total_dsc_minted):>16}  "
            f"HF {format_health_factor(account.health_factor)}"
        )

    if alert:
        monitor = HealthMonitor(
            runner.engine, build_notifiers(config), config.monitor.thresholds
        )
        for account in result.accounts:
            monitor.watch(account.user)
        await monitor.check_and_alert()

    return 1 if result.failures else 0


async def _run(args: argparse.Namespace) -> int:
    """Execute the selected command."""
    configure_logging(args.log_level)
    config = load_config(args.config)

    if args.command == "prices":
        return await _prices(config)
    if args.command == "run":
        return await _run_scenario(config, args.scenario, args.alert)

    build_parser().print_help()
    return 1


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    sys.exit(asyncio.run(_run(args)))
