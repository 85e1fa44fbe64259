"""Races delivery against interruption, then shuts the server down once."""

from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional, Protocol

from qreph.exceptions import ShutdownError
from qreph.signals import OneShotSignal, first_of

LOGGER = logging.getLogger(__name__)

DEFAULT_SHUTDOWN_TIMEOUT = 5.0


class LifecycleState(str, Enum):
    RUNNING = "running"
    DELIVERED_SHUTDOWN = "delivered_shutdown"
    INTERRUPTED_SHUTDOWN = "interrupted_shutdown"
    STOPPED = "stopped"


class Stoppable(Protocol):
    def shutdown(self, timeout: float) -> None: ...


class LifecycleCoordinator:
    """
    Running -> (DeliveredShutdown | InterruptedShutdown) -> Stopped.

    Waits for whichever of `completion` or `interrupt` fires first, then
    calls `server.shutdown(shutdown_timeout)` exactly once. A ShutdownError
    is logged and kept on `shutdown_error`; it does not change the outcome.
    """

    def __init__(
        self,
        server: Stoppable,
        completion: OneShotSignal,
        interrupt: OneShotSignal,
        shutdown_timeout: float = DEFAULT_SHUTDOWN_TIMEOUT,
    ):
        self._server = server
        self._completion = completion
        self._interrupt = interrupt
        self._shutdown_timeout = shutdown_timeout
        self.history: List[LifecycleState] = [LifecycleState.RUNNING]
        self.shutdown_error: Optional[ShutdownError] = None

    @property
    def state(self) -> LifecycleState:
        return self.history[-1]

    def _transition(self, state: LifecycleState) -> None:
        LOGGER.debug("Lifecycle %s -> %s", self.state.value, state.value)
        self.history.append(state)

    def run(self) -> LifecycleState:
        """Block until delivery or interruption, shut down, and return which one happened."""
        if self.state is not LifecycleState.RUNNING:
            raise RuntimeError(f"coordinator already ran (state: {self.state.value})")

        first = first_of(self._completion, self._interrupt)
        if first is self._completion:
            outcome = LifecycleState.DELIVERED_SHUTDOWN
            LOGGER.info("Note delivered; shutting down")
        else:
            outcome = LifecycleState.INTERRUPTED_SHUTDOWN
            LOGGER.info("Interrupted; shutting down")
        self._transition(outcome)

        try:
            self._server.shutdown(self._shutdown_timeout)
        except ShutdownError as exc:
            LOGGER.warning("server shutdown failed: %s", exc)
            self.shutdown_error = exc

        self._transition(LifecycleState.STOPPED)
        return outcome
