"""
Change notifications fired after every store write

Leaderboard refresh and snapshot persistence hang off these events.
"""
import logging
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional


logger = logging.getLogger(__name__)

SUBMISSION = "submission"
REFERENCE_KEY = "reference_key"
TEAM = "team"


@dataclass(frozen=True)
class ChangeEvent:
    topic: str                     # SUBMISSION | REFERENCE_KEY | TEAM
    team_id: Optional[str] = None


Subscriber = Callable[[ChangeEvent], None]


class ChangeNotifier:
    """Synchronous fan-out of ChangeEvents to subscribers"""

    def __init__(self):
        self._subscribers: List[Subscriber] = []
        self._lock = threading.Lock()

    def subscribe(self, callback: Subscriber) -> None:
        with self._lock:
            if callback not in self._subscribers:
                self._subscribers.append(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        with self._lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

    def publish(self, event: ChangeEvent) -> None:
        """
        Deliver event to every subscriber

        A failing subscriber is logged and skipped; the write that fired the
        event has already happened and must not be reported as failed.
        """
        with self._lock:
            subscribers = list(self._subscribers)

        for callback in subscribers:
            try:
                callback(event)
            except Exception:
                logger.exception(f"❌ Subscriber {callback!r} failed on {event}")
