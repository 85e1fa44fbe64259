"""
One complete share: store -> token -> server -> link -> wait -> shutdown.

Fatal errors (empty payload, entropy, bind, address discovery) propagate to
the caller. If the listener was already up it is closed before they do.
"""

from __future__ import annotations

import logging
from typing import Optional

from rich.console import Console

from qreph.config import ServeConfig
from qreph.display import render_endpoint
from qreph.exceptions import ShutdownError
from qreph.lifecycle import LifecycleCoordinator, LifecycleState
from qreph.models import Endpoint
from qreph.network import discover_outbound_address
from qreph.secret import generate_path_token
from qreph.server import DeliveryServer
from qreph.signals import OneShotSignal
from qreph.store import NoteStore

LOGGER = logging.getLogger(__name__)


def share(
    payload: bytes,
    config: Optional[ServeConfig] = None,
    console: Optional[Console] = None,
    interrupt: Optional[OneShotSignal] = None,
) -> LifecycleState:
    """Serve `payload` once and return how the session ended."""
    config = config or ServeConfig()
    console = console or Console()
    interrupt = interrupt or OneShotSignal("interrupted")

    store = NoteStore(payload)
    token = generate_path_token(config.token_bytes)
    server = DeliveryServer.start(
        token, store, host=config.bind_host, port=config.port
    )

    try:
        host = config.advertise_host or discover_outbound_address()
        endpoint = Endpoint(host=host, port=server.port, path_token=token)
        render_endpoint(endpoint, console, show_qr=config.show_qr)
    except BaseException:
        try:
            server.shutdown(0)
        except ShutdownError as exc:
            LOGGER.warning("server shutdown failed: %s", exc)
        raise

    LOGGER.debug("Waiting for delivery on port %d", endpoint.port)
    coordinator = LifecycleCoordinator(
        server,
        server.completion,
        interrupt,
        shutdown_timeout=config.shutdown_timeout,
    )
    return coordinator.run()
