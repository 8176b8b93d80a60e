from __future__ import annotations

import datetime as dt
import logging
import math
from typing import Sequence

from slotbot.domain import ConfigurationError

logger = logging.getLogger(__name__)


def _validate_timespan(timespan_days: object) -> int:
    # bool is an int subclass; True days is a config bug, not a window.
    if isinstance(timespan_days, bool) or not isinstance(timespan_days, (int, float)):
        raise ConfigurationError(f"TIMESPAN_DAYS is not a valid number: {timespan_days!r}")
    if isinstance(timespan_days, float) and (math.isnan(timespan_days) or not timespan_days.is_integer()):
        raise ConfigurationError(f"TIMESPAN_DAYS is not a valid number: {timespan_days!r}")
    if timespan_days < 0:
        raise ConfigurationError(f"TIMESPAN_DAYS must be >= 0, got {timespan_days!r}")
    return int(timespan_days)


def find_available_date(
    dates: Sequence[str],
    timespan_days: int,
    *,
    today: dt.date | None = None,
) -> str | None:
    """Return the earliest date inside ``[today, today + timespan_days]``.

    Dates are ``YYYY-MM-DD`` strings, so sorting them as strings sorts them
    chronologically. Both window ends are inclusive.
    """
    days = _validate_timespan(timespan_days)

    logger.info("Checking for available appointments...")

    start = today or dt.date.today()
    end = start + dt.timedelta(days=days)

    for date_iso in sorted(dates):
        if start <= dt.date.fromisoformat(date_iso) <= end:
            logger.info("Found an available appointment on %s.", date_iso)
            return date_iso

    logger.info("No available appointments found.")
    return None
