"""
core/events.py -- In-process, fire-and-forget notification emitter.

The auth workflow publishes named events ("welcome-email",
"send-verification", "send-reset-token") and never waits for, or learns
about, what a listener does with them. The real mailer lives outside this
service; at startup api/main.py subscribes log_notification() so every
event is at least recorded.

Payload shape for every event:
    {"to": "<recipient email>", "data": {"name": "<username>", "token": "<code>"}}
("token" is absent from welcome-email.)

A listener that raises is logged and skipped. It must never turn a
successful registration or login into a failure.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable

logger = logging.getLogger("fieldbook.events")

WELCOME_EMAIL = "welcome-email"
SEND_VERIFICATION = "send-verification"
SEND_RESET_TOKEN = "send-reset-token"

NOTIFICATION_EVENTS = (WELCOME_EMAIL, SEND_VERIFICATION, SEND_RESET_TOKEN)

Listener = Callable[[dict], None]


class EventEmitter:
    """Minimal publish/subscribe registry keyed by event name.

    Usage:
        emitter = EventEmitter()
        emitter.on("welcome-email", send_welcome)
        emitter.emit("welcome-email", {"to": "a@x.com", "data": {"name": "alice"}})
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = defaultdict(list)

    def on(self, event: str, listener: Listener) -> None:
        """Subscribe listener to event. The same callable may be added to many events."""
        self._listeners[event].append(listener)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    def emit(self, event: str, payload: dict) -> int:
        """Deliver payload to every listener of event, in subscription order.

        Returns the number of listeners that completed without raising.
        Emitting an event nobody listens to is not an error.
        """
        delivered = 0
        for listener in list(self._listeners.get(event, [])):
            try:
                listener(payload)
            except Exception:
                logger.exception("Listener %r failed for event %s", listener, event)
                continue
            delivered += 1
        return delivered


def log_notification(payload: dict) -> None:
    """Stand-in mailer: record the recipient of each outgoing notification.

    The one-time token is never written to the log.
    """
    logger.info("Notification queued for %s", payload.get("to", "<unknown>"))
