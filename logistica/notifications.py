"""
Transient user-facing notifications (toasts).

At most one notification is visible at a time; a new one replaces the old one.
Each notification expires on its own after a short lifetime, so callers never
have to clear them explicitly.
"""

import time
from dataclasses import dataclass
from typing import Callable, Optional

# Lifetimes in seconds
CART_UPDATED_SECONDS = 2.0
ERROR_SECONDS = 3.0
KEY_CHANGED_SECONDS = 1.5
CART_LOADED_SECONDS = 1.5


@dataclass(frozen=True)
class Notification:
    message: str
    created_at: float
    duration: float

    @property
    def expires_at(self) -> float:
        return self.created_at + self.duration

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class NotificationCenter:
    """Holds the single visible notification."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._current: Optional[Notification] = None

    def notify(self, message: str, duration: float = ERROR_SECONDS) -> Notification:
        notification = Notification(message=message, created_at=self._clock(), duration=duration)
        self._current = notification
        return notification

    def current(self, now: Optional[float] = None) -> Optional[Notification]:
        """Return the visible notification, or None once it has expired."""
        if self._current is None:
            return None
        if self._current.is_expired(self._clock() if now is None else now):
            self._current = None
        return self._current

    def dismiss(self) -> None:
        self._current = None
