"""Unit tests for CLI argument parsing."""
from __future__ import annotations

from dsc.cli import build_notifiers, build_parser
from dsc.config import AppConfig
from dsc.notifications import TelegramNotifier


class TestBuildParser:
    def test_prices_command(self) -> None:
        args = build_parser().parse_args(["prices"])
        assert args.command == "prices"

    def test_run_command(self) -> None:
        args = build_parser().parse_args(["run", "scenarios/liquidation.yaml"])
        assert args.command == "run"
        assert args.scenario == "scenarios/liquidation.yaml"
        assert args.alert is False

    def test_run_with_alert(self) -> None:
        args = build_parser().parse_args(["run", "s.yaml", "--alert"])
        assert args.alert is True

    def test_config_flag(self) -> None:
        args = build_parser().parse_args(["--config", "/tmp/c.yaml", "prices"])
        assert args.config == "/tmp/c.yaml"

    def test_log_level_flag(self) -> None:
        args = build_parser().parse_args(["--log-level", "DEBUG", "prices"])
        assert args.log_level == "DEBUG"

    def test_no_command(self) -> None:
        args = build_parser().parse_args([])
        assert args.command is None


class TestBuildNotifiers:
    def test_enabled_telegram(self, sample_app_config: AppConfig) -> None:
        notifiers = build_notifiers(sample_app_config)
        assert len(notifiers) == 1
        assert isinstance(notifiers[0], TelegramNotifier)

    def test_nothing_enabled(self) -> None:
        assert build_notifiers(AppConfig()) == []
