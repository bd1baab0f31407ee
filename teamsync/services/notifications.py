# teamsync/services/notifications.py
from __future__ import annotations

from collections import deque

from teamsync.schemas.notification import Notification, NotificationLevel


class NotificationCenter:
    """
    Bounded queue of messages waiting to be shown to the user.
    """

    def __init__(self, maxlen: int = 50) -> None:
        self._queue: deque[Notification] = deque(maxlen=maxlen)

    def push(self, level: NotificationLevel, message: str) -> Notification:
        notification = Notification(level=level, message=message)
        self._queue.append(notification)
        return notification

    def info(self, message: str) -> Notification:
        return self.push(NotificationLevel.INFO, message)

    def warning(self, message: str) -> Notification:
        return self.push(NotificationLevel.WARNING, message)

    def error(self, message: str) -> Notification:
        return self.push(NotificationLevel.ERROR, message)

    def pending(self) -> list[Notification]:
        return list(self._queue)

    def drain(self) -> list[Notification]:
        items = list(self._queue)
        self._queue.clear()
        return items
