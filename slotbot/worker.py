from __future__ import annotations

import datetime as dt
import logging
from typing import Callable, Sequence

from slotbot.availability import fetch_availabilities
from slotbot.config import Settings
from slotbot.domain import ConfigurationError, DeliveryError, PollingState
from slotbot.matcher import find_available_date
from slotbot.telegram_notifier import TelegramNotifier

logger = logging.getLogger(__name__)


def _noop() -> None:
    return None


class CycleController:
    """Runs one fetch -> match -> notify cycle per scheduler tick.

    The controller doesn't know about the scheduler. It only calls
    ``stop_polling`` once, when a slot is found and STOP_WHEN_FOUND is set.
    """

    def __init__(
        self,
        settings: Settings,
        notifier: TelegramNotifier,
        *,
        stop_polling: Callable[[], None] = _noop,
        fetch: Callable[..., Sequence[str]] | None = None,
        today: Callable[[], dt.date] = dt.date.today,
    ) -> None:
        self._settings = settings
        self._notifier = notifier
        self._stop_polling = stop_polling
        self._fetch = fetch
        self._today = today
        self._state = PollingState.ACTIVE

    @property
    def state(self) -> PollingState:
        return self._state

    def _stop(self) -> None:
        logger.info("Appointment found. Stopping the task...")
        self._state = PollingState.STOPPED
        self._stop_polling()

    def run_cycle(self) -> PollingState:
        if self._state is PollingState.STOPPED:
            logger.info("Polling already stopped, skipping cycle")
            return self._state

        try:
            timespan_days = self._settings.timespan_days
            stop_when_found = self._settings.stop_when_found
            today = self._today()

            fetch = self._fetch or fetch_availabilities
            dates = fetch(
                self._settings.appointment_url,
                today=today,
                timeout_seconds=self._settings.request_timeout_seconds,
            )
            date_iso = find_available_date(dates, timespan_days, today=today)

            if date_iso is None:
                logger.info("No appointments available within the specified timespan (%s days).", timespan_days)
                return self._state

            logger.info("Next available appointment is on: %s", date_iso)
            try:
                self._notifier.notify_found(date_iso)
            except (ConfigurationError, DeliveryError) as e:
                logger.error("Error while sending Telegram notification (%s: %s)", type(e).__name__, e)

            if stop_when_found:
                self._stop()

        except ConfigurationError as e:
            logger.error("Error while checking appointment availability (%s: %s)", type(e).__name__, e)
        except Exception:
            logger.exception("Error while checking appointment availability")

        return self._state
