from __future__ import annotations

from unittest.mock import MagicMock, patch

import main
from slotbot.config import Settings
from slotbot.domain import ConfigurationError


def _settings(**overrides: object) -> Settings:
    values: dict[str, object] = {
        "appointment_url": "https://example.com/availabilities.json?start_date=2024-01-01",
        "timespan_days_raw": "30",
        "telegram_bot_token": "TEST_TOKEN",
        "telegram_chat_id": "1",
        "booking_url": "https://example.com/book",
    }
    values.update(overrides)
    return Settings(**values)  # type: ignore[arg-type]


def _args(*, once: bool):
    return type("Args", (), {"once": once})()


def test_main_once_runs_single_cycle_without_scheduler() -> None:
    settings = _settings()

    with (
        patch("main.load_settings", return_value=settings),
        patch("main.CycleController") as controller_cls,
        patch("main.build_scheduler") as build,
        patch("main.argparse.ArgumentParser.parse_args", return_value=_args(once=True)),
    ):
        assert main.main() == 0
        controller_cls.return_value.run_cycle.assert_called_once_with()
        build.assert_not_called()


def test_main_starts_scheduler() -> None:
    settings = _settings()
    scheduler = MagicMock()

    with (
        patch("main.load_settings", return_value=settings),
        patch("main.build_scheduler", return_value=(scheduler, MagicMock())) as build,
        patch("main.argparse.ArgumentParser.parse_args", return_value=_args(once=False)),
    ):
        assert main.main() == 0
        assert build.call_args.args == (settings,)
        scheduler.start.assert_called_once_with()
        scheduler.shutdown.assert_not_called()


def test_main_keeps_running_inert_with_invalid_schedule() -> None:
    scheduler = MagicMock()

    with (
        patch("main.load_settings", return_value=_settings(schedule="nope")),
        patch("main.build_scheduler", return_value=(scheduler, None)),
        patch("main.argparse.ArgumentParser.parse_args", return_value=_args(once=False)),
    ):
        assert main.main() == 0
        scheduler.start.assert_called_once_with()


def test_main_shuts_down_scheduler_on_interrupt() -> None:
    scheduler = MagicMock()
    scheduler.start.side_effect = KeyboardInterrupt

    with (
        patch("main.load_settings", return_value=_settings()),
        patch("main.build_scheduler", return_value=(scheduler, MagicMock())),
        patch("main.argparse.ArgumentParser.parse_args", return_value=_args(once=False)),
    ):
        assert main.main() == 0
        scheduler.shutdown.assert_called_once_with(wait=False)


def test_main_returns_error_on_invalid_settings() -> None:
    with (
        patch("main.load_settings", side_effect=ConfigurationError("REQUEST_TIMEOUT_SECONDS must be > 0")),
        patch("main.build_scheduler") as build,
        patch("main.argparse.ArgumentParser.parse_args", return_value=_args(once=False)),
    ):
        assert main.main() == 1
        build.assert_not_called()
