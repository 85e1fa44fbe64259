"""Outbound address discovery for the shared link."""

import logging
import socket
from typing import Tuple

from qreph.exceptions import AddressDiscoveryError

LOGGER = logging.getLogger(__name__)

DEFAULT_PROBE = ("8.8.8.8", 80)


def discover_outbound_address(probe: Tuple[str, int] = DEFAULT_PROBE) -> str:
    """
    Return the local address the OS would route `probe` through.

    Connecting a UDP socket only selects a route; no packet is sent.
    """
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.connect(probe)
            address = sock.getsockname()[0]
    except OSError as exc:
        raise AddressDiscoveryError(f"failed to get outbound ip: {exc}") from exc

    if not address or address == "0.0.0.0":
        raise AddressDiscoveryError("failed to get outbound ip: no route")
    LOGGER.debug("Outbound address: %s", address)
    return address
