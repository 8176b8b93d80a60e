from __future__ import annotations

import datetime as dt
import logging

from apscheduler.schedulers.base import BaseScheduler
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger

from slotbot.config import Settings
from slotbot.telegram_notifier import TelegramNotifier
from slotbot.worker import CycleController

logger = logging.getLogger(__name__)

CHECK_JOB_ID = "appointment-check"
STARTUP_JOB_ID = "startup-notification"


def parse_schedule(expr: str) -> CronTrigger | None:
    """Build a trigger from a 5-field crontab string, or None if it's invalid."""
    try:
        return CronTrigger.from_crontab(expr)
    except ValueError as e:
        logger.error("The SCHEDULE environment variable is not a valid cron expression: %r (%s)", expr, e)
        return None


def build_scheduler(
    settings: Settings,
    *,
    notifier: TelegramNotifier | None = None,
    scheduler: BaseScheduler | None = None,
) -> tuple[BaseScheduler, CycleController | None]:
    """Register the recurring check and the one-off startup message.

    With an invalid SCHEDULE nothing is registered: the returned scheduler
    keeps the process alive but never runs a check.
    """
    scheduler = scheduler or BlockingScheduler()
    notifier = notifier or TelegramNotifier(settings)

    trigger = parse_schedule(settings.schedule)
    if trigger is None:
        return scheduler, None

    logger.info("Scheduling appointment availability check every %s.", settings.schedule)

    def _stop_polling() -> None:
        scheduler.remove_job(CHECK_JOB_ID)
        logger.info("Recurring check removed from scheduler")

    controller = CycleController(settings, notifier, stop_polling=_stop_polling)
    scheduler.add_job(
        controller.run_cycle,
        trigger,
        id=CHECK_JOB_ID,
        max_instances=1,
        coalesce=True,
    )

    run_date = dt.datetime.now().astimezone() + dt.timedelta(seconds=settings.startup_notification_delay_seconds)
    scheduler.add_job(
        notifier.notify_startup,
        "date",
        run_date=run_date,
        id=STARTUP_JOB_ID,
        kwargs={
            "schedule": settings.schedule,
            "window_days": settings.timespan_days_raw,
            "booking_link": settings.booking_url,
        },
    )

    return scheduler, controller
