"""Domain model for reviewer-facing notifications."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class NotificationVariant(str, Enum):
    """Visual variant of a notification."""

    DEFAULT = "default"
    SUCCESS = "success"
    WARNING = "warning"
    DESTRUCTIVE = "destructive"


class Notification(BaseModel):
    """A message a console UI shows as a toast."""

    title: str
    description: str
    variant: NotificationVariant = NotificationVariant.DEFAULT
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        """Pydantic model configuration."""
        frozen = True

    @classmethod
    def success(cls, title: str, description: str) -> "Notification":
        return cls(title=title, description=description, variant=NotificationVariant.SUCCESS)

    @classmethod
    def warning(cls, title: str, description: str) -> "Notification":
        return cls(title=title, description=description, variant=NotificationVariant.WARNING)

    @classmethod
    def error(cls, title: str, description: str) -> "Notification":
        return cls(title=title, description=description, variant=NotificationVariant.DESTRUCTIVE)
