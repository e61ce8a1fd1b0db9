"""Notifications & Change Signal — outbound channels of the rate workflow.

Invariants:
    - NotificationLog keeps every notification in emission order
    - RatesChangedSignal awaits listeners sequentially in registration order;
      a failing listener is logged and does not stop the others
"""

import logging

from payrates.core.domain_types import Notification, NotificationSeverity, UserId
from payrates.core.repository_protocols import RatesChangedListener

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    NotificationSeverity.INFO: logging.INFO,
    NotificationSeverity.SUCCESS: logging.INFO,
    NotificationSeverity.WARNING: logging.WARNING,
    NotificationSeverity.ERROR: logging.ERROR,
}


class NotificationLog:
    """Notifier that records notifications and mirrors them to the log."""

    def __init__(self):
        self.notifications: list[Notification] = []

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)
        logger.log(
            _LOG_LEVELS[notification.severity],
            f"{notification.summary}: {notification.detail}",
        )

    @property
    def last(self) -> Notification | None:
        return self.notifications[-1] if self.notifications else None


def success(summary: str, detail: str) -> Notification:
    return Notification(NotificationSeverity.SUCCESS, summary, detail)


def warning(summary: str, detail: str) -> Notification:
    return Notification(NotificationSeverity.WARNING, summary, detail)


class RatesChangedSignal:
    """Fired after every successful create or update so the roster can re-fetch."""

    def __init__(self):
        self._listeners: list[RatesChangedListener] = []

    def connect(self, listener: RatesChangedListener) -> None:
        self._listeners.append(listener)

    def disconnect(self, listener: RatesChangedListener) -> None:
        self._listeners.remove(listener)

    async def emit(self, user_id: UserId) -> None:
        for listener in list(self._listeners):
            try:
                await listener(user_id)
            except Exception as e:
                logger.error(
                    f"Rates-changed listener failed: {e}",
                    extra={"user_id": user_id}, exc_info=True,
                )
