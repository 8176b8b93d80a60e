from __future__ import annotations

import datetime as dt
import logging
import re

import httpx

from slotbot.domain import ConfigurationError, ParseError, TransportError

logger = logging.getLogger(__name__)

_START_DATE_RE = re.compile(r"start_date=\d{4}-\d{2}-\d{2}")


def build_availability_url(template: str, today: dt.date) -> str:
    if not template:
        raise ConfigurationError("The APPOINTMENT_URL environment variable is not defined.")

    url = _START_DATE_RE.sub(f"start_date={today.isoformat()}", template)

    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as e:
        raise ConfigurationError("The APPOINTMENT_URL environment variable is not a valid URL.") from e
    if parsed.scheme not in {"http", "https"} or not parsed.host:
        raise ConfigurationError("The APPOINTMENT_URL environment variable is not a valid URL.")

    return str(parsed)


def _parse_next_slot(value: object) -> str:
    """Truncate a ``next_slot`` timestamp to ``YYYY-MM-DD``.

    Timestamps with an offset are converted to local time first, so the date
    compares against the same local "today" the matcher uses. Naive
    timestamps and plain dates are taken as written.
    """
    if not isinstance(value, str):
        raise ParseError(f"next_slot is not a string: {value!r}")

    raw = value.strip()
    if len(raw) == 10:
        try:
            return dt.date.fromisoformat(raw).isoformat()
        except ValueError as e:
            raise ParseError(f"next_slot is not a valid date: {value!r}") from e

    if raw.endswith(("Z", "z")):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = dt.datetime.fromisoformat(raw)
    except ValueError as e:
        raise ParseError(f"next_slot is not a valid timestamp: {value!r}") from e

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone()
    return parsed.date().isoformat()


def _get_json(url: str, *, timeout_seconds: float, transport: httpx.BaseTransport | None) -> object:
    try:
        with httpx.Client(timeout=timeout_seconds, transport=transport) as client:
            r = client.get(url)
            r.raise_for_status()
    except httpx.HTTPError as e:
        raise TransportError(f"{type(e).__name__}: {e}") from e

    try:
        return r.json()
    except ValueError as e:
        raise ParseError("Response body is not valid JSON") from e


def fetch_availabilities(
    url_template: str,
    *,
    today: dt.date | None = None,
    timeout_seconds: float = 10.0,
    transport: httpx.BaseTransport | None = None,
) -> list[str]:
    """Return the next available date as a one-element list, or an empty list.

    Configuration, network and parse failures are logged and reported as "no
    availability"; callers can't tell them apart from an empty calendar.
    """
    try:
        url = build_availability_url(url_template, today or dt.date.today())
        logger.info("Fetching availabilities for %s", url)

        data = _get_json(url, timeout_seconds=timeout_seconds, transport=transport)
        if not isinstance(data, dict):
            raise ParseError(f"Expected a JSON object, got {type(data).__name__}")

        next_slot = data.get("next_slot")
        if not next_slot:
            logger.info("No next_slot available.")
            return []

        dates = [_parse_next_slot(next_slot)]
        logger.info("Fetch complete: next_slot=%s", dates[0])
        return dates

    except (ConfigurationError, TransportError, ParseError) as e:
        logger.error("Error fetching availabilities (%s: %s)", type(e).__name__, e)
        return []
