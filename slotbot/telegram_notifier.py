from __future__ import annotations

import logging

import httpx

from slotbot.config import Settings, parse_chat_id
from slotbot.domain import ConfigurationError, DeliveryError

logger = logging.getLogger(__name__)

_TEMPLATES = {
    "found": "💊 Доступна запись на {date} 📅\n\nЗабронируйте здесь: {booking_url}",
    "startup": (
        "🤖 Doctolib Appointment Finder запущен!\n\n"
        "Проверка расписания: {schedule}\n"
        "Период поиска: {window_days} дней\n"
        "Ссылка для бронирования: {booking_url}\n\n"
        "Вы будете получать уведомления, когда появятся доступные записи."
    ),
}


def format_message(kind: str, **values: object) -> str:
    try:
        template = _TEMPLATES[kind]
    except KeyError:
        raise ValueError(f"Unknown message kind: {kind!r}") from None
    return template.format(**values)


def send_telegram_message(
    *,
    bot_token: str,
    chat_id: int,
    text: str,
    timeout_seconds: float = 10.0,
    transport: httpx.BaseTransport | None = None,
) -> None:
    url = f"https://api.telegram.org/bot{bot_token}/sendMessage"
    payload = {
        "chat_id": chat_id,
        "text": text,
    }

    try:
        with httpx.Client(timeout=timeout_seconds, transport=transport) as client:
            r = client.post(url, json=payload)
    except httpx.HTTPError as e:
        # str(e) of a transport error may carry the URL, and with it the token.
        raise DeliveryError(f"Telegram request failed ({type(e).__name__})") from e

    try:
        data = r.json()
    except ValueError as e:
        raise DeliveryError(f"Telegram API returned a non-JSON response (HTTP {r.status_code})") from e

    if not isinstance(data, dict) or data.get("ok") is not True:
        description = data.get("description") if isinstance(data, dict) else None
        raise DeliveryError(f"Telegram API error: {description or data!r}")


class TelegramNotifier:
    """Delivers "slot found" and "bot started" messages to a single chat."""

    def __init__(self, settings: Settings, *, transport: httpx.BaseTransport | None = None) -> None:
        self._settings = settings
        self._transport = transport

    def _credentials(self) -> tuple[str, int, str]:
        s = self._settings
        if not s.telegram_bot_token:
            raise ConfigurationError("The TELEGRAM_BOT_TOKEN environment variable is not defined.")
        chat_id = parse_chat_id(s.telegram_chat_id)
        if not s.booking_url:
            raise ConfigurationError("The DOCTOR_BOOKING_URL environment variable is not defined.")
        return s.telegram_bot_token, chat_id, s.booking_url

    def _send(self, bot_token: str, chat_id: int, text: str) -> None:
        send_telegram_message(
            bot_token=bot_token,
            chat_id=chat_id,
            text=text,
            timeout_seconds=self._settings.request_timeout_seconds,
            transport=self._transport,
        )

    def notify_found(self, date_iso: str) -> None:
        """Send the "slot found" message. Raises on bad config or failed delivery."""
        bot_token, chat_id, booking_url = self._credentials()
        self._send(bot_token, chat_id, format_message("found", date=date_iso, booking_url=booking_url))
        logger.info("Telegram notification sent successfully.")

    def notify_startup(self, schedule: str, window_days: object, booking_link: str | None = None) -> bool:
        # Best-effort heartbeat: never raises.
        try:
            bot_token, chat_id, booking_url = self._credentials()
            text = format_message(
                "startup",
                schedule=schedule,
                window_days=window_days,
                booking_url=booking_link or booking_url,
            )
            self._send(bot_token, chat_id, text)
        except (ConfigurationError, DeliveryError) as e:
            logger.error("Error sending initial Telegram notification (%s: %s)", type(e).__name__, e)
            return False
        except Exception:
            logger.exception("Unexpected error sending initial Telegram notification")
            return False

        logger.info("Initial Telegram notification sent successfully.")
        return True
