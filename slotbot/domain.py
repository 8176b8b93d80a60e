from __future__ import annotations

import enum


class SlotBotError(RuntimeError):
    """Base class for errors raised by the watcher."""


class ConfigurationError(SlotBotError):
    """A required setting is missing or malformed."""


class TransportError(SlotBotError):
    """The availability endpoint could not be reached."""


class ParseError(SlotBotError):
    """The availability endpoint answered with a body we can't read."""


class DeliveryError(SlotBotError):
    """Telegram did not accept the message.

    Raised both when the API answers with ``ok: false`` and when the request
    itself fails on the network layer.
    """


class PollingState(enum.Enum):
    ACTIVE = "active"
    STOPPED = "stopped"
