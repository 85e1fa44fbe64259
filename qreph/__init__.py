"""Share a note exactly once over an ephemeral local HTTP link."""

from qreph.exceptions import (
    AddressDiscoveryError,
    BindError,
    ConfigError,
    EntropyError,
    InvalidPayload,
    QrephException,
    ShutdownError,
)
from qreph.lifecycle import LifecycleCoordinator, LifecycleState
from qreph.secret import generate_path_token
from qreph.server import DeliveryServer
from qreph.signals import OneShotSignal
from qreph.store import NoteStore

__all__ = [
    "AddressDiscoveryError",
    "BindError",
    "ConfigError",
    "DeliveryServer",
    "EntropyError",
    "InvalidPayload",
    "LifecycleCoordinator",
    "LifecycleState",
    "NoteStore",
    "OneShotSignal",
    "QrephException",
    "ShutdownError",
    "generate_path_token",
]
