"""Bridging process signals into the interrupt signal."""

import logging
import signal
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, Tuple

from qreph.signals import OneShotSignal

LOGGER = logging.getLogger(__name__)

STOP_SIGNALS: Tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM)


@contextmanager
def forward_stop_signals(interrupt: OneShotSignal) -> Iterator[OneShotSignal]:
    """Fire `interrupt` on SIGINT/SIGTERM while inside the block."""

    def _fire(signum: int) -> None:
        LOGGER.debug("Received %s", signal.Signals(signum).name)
        interrupt.fire()

    def _handler(signum, frame) -> None:
        # Runs between bytecodes on the main thread, which may hold the signal lock
        threading.Thread(
            target=_fire, args=(signum,), name="qreph-interrupt", daemon=True
        ).start()

    previous: Dict[signal.Signals, object] = {}
    for signum in STOP_SIGNALS:
        previous[signum] = signal.signal(signum, _handler)
    try:
        yield interrupt
    finally:
        for signum, handler in previous.items():
            # None means the handler was installed outside Python
            if handler is not None:
                signal.signal(signum, handler)
