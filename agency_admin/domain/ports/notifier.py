"""Notifier interface for reviewer-facing messages."""

from typing import Protocol

from ..models.notification import Notification


class Notifier(Protocol):
    """Protocol for anything that can show a notification."""

    def notify(self, notification: Notification) -> None:
        """Show a notification."""
        ...
