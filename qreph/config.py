"""
Serve configuration.

Values are layered, highest first:
  1. explicit overrides (CLI options)
  2. QREPH_* environment variables
  3. the JSON config file ($QREPH_CONFIG or ~/.config/qreph/config.json)
  4. ServeConfig defaults
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from qreph.exceptions import ConfigError
from qreph.lifecycle import DEFAULT_SHUTDOWN_TIMEOUT
from qreph.secret import MIN_TOKEN_BYTES

LOGGER = logging.getLogger(__name__)

ENV_PREFIX = "QREPH_"
DEFAULT_CONFIG_PATH = os.path.join("~", ".config", "qreph", "config.json")

# Field name -> environment variable suffix
_ENV_FIELDS = {
    "bind_host": "BIND_HOST",
    "port": "PORT",
    "shutdown_timeout": "SHUTDOWN_TIMEOUT",
    "token_bytes": "TOKEN_BYTES",
    "advertise_host": "ADVERTISE_HOST",
    "show_qr": "QR",
}


class ServeConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    bind_host: str = ""
    """Interface to listen on; empty means all interfaces"""
    port: int = Field(default=0, ge=0, le=65535)
    """Listener port; 0 lets the OS pick one"""
    shutdown_timeout: float = Field(default=DEFAULT_SHUTDOWN_TIMEOUT, ge=0)
    """Seconds to let in-flight responses finish on shutdown"""
    token_bytes: int = Field(default=MIN_TOKEN_BYTES, ge=MIN_TOKEN_BYTES)
    """Random bytes behind the secret path"""
    advertise_host: Optional[str] = None
    """Host to put in the link; None means discover the outbound address"""
    show_qr: bool = True


def config_path(environ: Optional[Mapping[str, str]] = None) -> str:
    environ = os.environ if environ is None else environ
    return os.path.expanduser(environ.get(f"{ENV_PREFIX}CONFIG") or DEFAULT_CONFIG_PATH)


def load_config_file(path: str) -> Dict[str, Any]:
    """Load configuration from file. Missing or unreadable files yield {}."""
    try:
        if os.path.exists(path):
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if isinstance(data, dict):
                return data
            LOGGER.warning("Ignoring config file %s: expected a JSON object", path)
    except (json.JSONDecodeError, OSError) as exc:
        LOGGER.warning("Could not load config file %s: %s", path, exc)
    return {}


def env_overrides(environ: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    environ = os.environ if environ is None else environ
    values: Dict[str, str] = {}
    for field, suffix in _ENV_FIELDS.items():
        raw = environ.get(f"{ENV_PREFIX}{suffix}")
        if raw is not None and raw.strip() != "":
            values[field] = raw.strip()
    return values


def load_config(
    overrides: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
    path: Optional[str] = None,
) -> ServeConfig:
    """Build a ServeConfig from file, environment and explicit overrides."""
    values: Dict[str, Any] = {}
    values.update(load_config_file(path or config_path(environ)))
    values.update(env_overrides(environ))
    values.update({k: v for k, v in (overrides or {}).items() if v is not None})

    try:
        return ServeConfig(**values)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        )
        raise ConfigError(f"invalid configuration: {problems}") from exc
