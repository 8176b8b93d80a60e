import argparse
import logging

from slotbot.config import load_settings
from slotbot.domain import ConfigurationError
from slotbot.scheduler import build_scheduler
from slotbot.telegram_notifier import TelegramNotifier
from slotbot.worker import CycleController


def _setup_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )


def main() -> int:
    parser = argparse.ArgumentParser(description="slotbot: appointment slot watcher")
    parser.add_argument("--once", action="store_true", help="Run single check and exit")
    args = parser.parse_args()

    _setup_logging()
    log = logging.getLogger(__name__)

    try:
        settings = load_settings()
    except ConfigurationError as e:
        log.error("Invalid configuration (%s)", e)
        return 1

    notifier = TelegramNotifier(settings)

    if args.once:
        CycleController(settings, notifier).run_cycle()
        return 0

    scheduler, controller = build_scheduler(settings, notifier=notifier)
    if controller is None:
        log.error("No check scheduled; fix SCHEDULE and restart.")

    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        log.info("Shutting down scheduler")
        scheduler.shutdown(wait=False)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
