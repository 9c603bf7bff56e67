"""Notifier implementations."""

import logging
from typing import List

from ..domain.models.notification import Notification, NotificationVariant

logger = logging.getLogger(__name__)

_ICONS = {
    NotificationVariant.DEFAULT: "💬",
    NotificationVariant.SUCCESS: "✅",
    NotificationVariant.WARNING: "⚠️",
    NotificationVariant.DESTRUCTIVE: "❌",
}


class LoggingNotifier:
    """Writes notifications to the log."""

    def notify(self, notification: Notification) -> None:
        icon = _ICONS[notification.variant]
        message = f"{icon} {notification.title}: {notification.description}"
        if notification.variant == NotificationVariant.DESTRUCTIVE:
            logger.error(message)
        elif notification.variant == NotificationVariant.WARNING:
            logger.warning(message)
        else:
            logger.info(message)


class CollectingNotifier(LoggingNotifier):
    """Logs notifications and keeps them so an API response can return them."""

    def __init__(self):
        self.notifications: List[Notification] = []

    def notify(self, notification: Notification) -> None:
        super().notify(notification)
        self.notifications.append(notification)
