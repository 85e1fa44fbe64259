"""One-shot events used to coordinate delivery and interruption."""

from __future__ import annotations

import itertools
import logging
import threading
from typing import Callable, List, Optional

LOGGER = logging.getLogger(__name__)

# Global firing order, so "first" is well defined across signals
_sequence = itertools.count()


class OneShotSignal:
    """An event that fires at most once. Firing again is a no-op."""

    def __init__(self, name: str):
        self.name = name
        self.sequence: Optional[int] = None
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._subscribers: List[Callable[["OneShotSignal"], None]] = []

    def __repr__(self) -> str:
        state = "fired" if self.is_set() else "pending"
        return f"<OneShotSignal {self.name} {state}>"

    def fire(self) -> bool:
        """Fire the signal. Returns True only for the call that fired it."""
        with self._lock:
            if self._event.is_set():
                return False
            self.sequence = next(_sequence)
            self._event.set()
            subscribers, self._subscribers = self._subscribers, []
        LOGGER.debug("Signal %s fired", self.name)
        for callback in subscribers:
            callback(self)
        return True

    def is_set(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._event.wait(timeout)

    def subscribe(self, callback: Callable[["OneShotSignal"], None]) -> None:
        """Call `callback` once when the signal fires, right away if it already has."""
        with self._lock:
            if not self._event.is_set():
                self._subscribers.append(callback)
                return
        callback(self)


def first_of(
    *signals: OneShotSignal, timeout: Optional[float] = None, poll: float = 0.25
) -> Optional[OneShotSignal]:
    """
    Block until one of `signals` fires and return the one that fired first.

    Returns None if `timeout` elapses first. Without a timeout the wait
    wakes every `poll` seconds so signal handlers on the main thread run.
    """
    if not signals:
        raise ValueError("first_of needs at least one signal")

    woken = threading.Event()
    for signal in signals:
        signal.subscribe(lambda _: woken.set())

    if timeout is None:
        while not woken.wait(poll):
            if any(signal.is_set() for signal in signals):
                break
    elif not woken.wait(timeout):
        return None

    fired = [signal for signal in signals if signal.is_set()]
    return min(fired, key=lambda signal: signal.sequence)
