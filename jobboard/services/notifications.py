"""
User-visible notifications.

The store reports outcomes of fetches and mutations here; the front end polls
and drains the feed to show them as toasts.
"""
import enum
import logging
from collections import deque
from datetime import datetime, timezone
from typing import Deque, List

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

MAX_PENDING = 50


class NotificationLevel(str, enum.Enum):
    SUCCESS = "success"
    ERROR = "error"


class Notification(BaseModel):
    level: NotificationLevel
    message: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class Notifier:
    """Bounded feed of pending notifications; the oldest are dropped first."""

    def __init__(self, max_pending: int = MAX_PENDING):
        self._pending: Deque[Notification] = deque(maxlen=max_pending)

    def success(self, message: str) -> Notification:
        logger.info(f"Notify success: {message}")
        return self._push(NotificationLevel.SUCCESS, message)

    def error(self, message: str) -> Notification:
        logger.warning(f"Notify error: {message}")
        return self._push(NotificationLevel.ERROR, message)

    def pending(self) -> List[Notification]:
        return list(self._pending)

    def drain(self) -> List[Notification]:
        """Return and clear all pending notifications, oldest first."""
        notifications = list(self._pending)
        self._pending.clear()
        return notifications

    def _push(self, level: NotificationLevel, message: str) -> Notification:
        notification = Notification(level=level, message=message)
        self._pending.append(notification)
        return notification
