"""
Audio-session interruption notifications.

Another application taking the output device, or a phone call, is reported to
the process as a notification dictionary::

    {"type": "began"}
    {"type": "ended", "options": ["should_resume"]}

``InterruptionCenter`` fans those notifications out to subscribers. The
scheduler subscribes once at construction and cancels at teardown.
"""

import threading
from dataclasses import dataclass
from typing import Callable, List, Mapping, Optional

from config import logger

BEGAN = "began"
ENDED = "ended"
SHOULD_RESUME = "should_resume"


@dataclass(frozen=True)
class Interruption:
    kind: str
    should_resume: bool = False


def parse_interruption(notification) -> Optional[Interruption]:
    """Returns the interruption described by ``notification``, or None.

    Malformed payloads and unknown interruption types yield None.
    """
    if not isinstance(notification, Mapping):
        return None
    kind = notification.get("type")
    if not isinstance(kind, str):
        return None

    if kind == BEGAN:
        return Interruption(BEGAN)
    if kind == ENDED:
        options = notification.get("options") or ()
        if isinstance(options, str):
            options = (options,)
        return Interruption(ENDED, should_resume=SHOULD_RESUME in options)

    logger.warning(f"Unknown interruption type: {kind}")
    return None


class Subscription:
    def __init__(self, center, callback):
        self._center = center
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        if self.cancelled:
            return
        self.cancelled = True
        self._center._remove(self)


class InterruptionCenter:
    """Delivers interruption notifications to subscribed callbacks."""

    def __init__(self):
        self._lock = threading.Lock()
        self._subscriptions: List[Subscription] = []

    def subscribe(self, callback: Callable[[Mapping], None]) -> Subscription:
        subscription = Subscription(self, callback)
        with self._lock:
            self._subscriptions.append(subscription)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def post(self, notification: Mapping) -> None:
        with self._lock:
            subscriptions = list(self._subscriptions)
        for subscription in subscriptions:
            try:
                subscription.callback(notification)
            except Exception as e:
                logger.error(f"Interruption subscriber error: {e}")

    def post_began(self) -> None:
        self.post({"type": BEGAN})

    def post_ended(self, should_resume: bool) -> None:
        options = [SHOULD_RESUME] if should_resume else []
        self.post({"type": ENDED, "options": options})
