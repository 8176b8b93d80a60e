from __future__ import annotations

import math
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from slotbot.domain import ConfigurationError

DEFAULT_SCHEDULE = "* * * * *"


def parse_chat_id(raw: str | None) -> int:
    # Telegram allows numeric IDs; groups/supergroups can be negative.
    if raw is None or not raw.strip():
        raise ConfigurationError("The TELEGRAM_CHAT_ID environment variable is not defined.")
    try:
        chat_id = int(raw.strip())
    except ValueError as e:
        raise ConfigurationError(f"Invalid TELEGRAM_CHAT_ID value: {raw!r}. Expected integer chat id.") from e
    if chat_id == 0:
        raise ConfigurationError("Invalid TELEGRAM_CHAT_ID value: '0' is not a valid chat id")
    return chat_id


def parse_timespan_days(raw: str) -> int:
    try:
        value = int(raw.strip())
    except ValueError as e:
        raise ConfigurationError(f"TIMESPAN_DAYS is not a valid number: {raw!r}") from e
    if value < 0:
        raise ConfigurationError(f"TIMESPAN_DAYS must be >= 0, got {value}")
    return value


def _parse_seconds(name: str, default: str, *, allow_zero: bool) -> float:
    raw = os.getenv(name, default)
    try:
        value = float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} is not a valid number: {raw!r}") from e
    if math.isnan(value) or value < 0 or (value == 0 and not allow_zero):
        raise ConfigurationError(f"{name} must be {'>= 0' if allow_zero else '> 0'}, got {raw!r}")
    return value


@dataclass(frozen=True)
class Settings:
    # Validated lazily by the component that uses them, so a half-configured
    # process still starts and reports problems through the log.
    appointment_url: str = ""
    timespan_days_raw: str = "0"
    schedule: str = DEFAULT_SCHEDULE
    stop_when_found: bool = False

    telegram_bot_token: str | None = None
    telegram_chat_id: str | None = None
    booking_url: str | None = None

    request_timeout_seconds: float = 10.0
    startup_notification_delay_seconds: float = 2.0

    @property
    def timespan_days(self) -> int:
        return parse_timespan_days(self.timespan_days_raw)


def load_settings(dotenv_path: str | None = None) -> Settings:
    # Prefer .env in repo root; dotenv_path allows overriding in tests.
    load_dotenv(dotenv_path=dotenv_path, override=False)

    stop_when_found = os.getenv("STOP_WHEN_FOUND", "").strip().lower() == "true"

    return Settings(
        appointment_url=os.getenv("APPOINTMENT_URL", "").strip(),
        timespan_days_raw=os.getenv("TIMESPAN_DAYS") or "0",
        schedule=(os.getenv("SCHEDULE") or DEFAULT_SCHEDULE).strip(),
        stop_when_found=stop_when_found,
        telegram_bot_token=os.getenv("TELEGRAM_BOT_TOKEN") or None,
        telegram_chat_id=os.getenv("TELEGRAM_CHAT_ID") or None,
        booking_url=os.getenv("DOCTOR_BOOKING_URL") or None,
        request_timeout_seconds=_parse_seconds("REQUEST_TIMEOUT_SECONDS", "10", allow_zero=False),
        startup_notification_delay_seconds=_parse_seconds(
            "STARTUP_NOTIFICATION_DELAY_SECONDS", "2", allow_zero=True
        ),
    )
