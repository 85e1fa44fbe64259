"""Single-release holder for the note payload."""

from __future__ import annotations

import logging
import threading
from typing import Optional

from qreph.exceptions import InvalidPayload

LOGGER = logging.getLogger(__name__)


class NoteStore:
    """
    Holds the payload until exactly one caller takes it.

    States are `loaded` and `released`. The check and the clear happen in one
    step under the lock, so concurrent callers see a single winner.
    """

    def __init__(self, payload: bytes):
        # memoryview rejects ints, which bytes() would turn into zero padding
        payload = bytes(memoryview(payload))
        if not payload:
            raise InvalidPayload()
        self._payload: Optional[bytes] = payload
        self._lock = threading.Lock()

    @property
    def released(self) -> bool:
        with self._lock:
            return self._payload is None

    def take(self) -> Optional[bytes]:
        """Return the payload to the first caller, None to everyone else."""
        with self._lock:
            payload, self._payload = self._payload, None
        if payload is not None:
            LOGGER.debug("Note released (%d bytes)", len(payload))
        return payload
