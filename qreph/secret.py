"""Unguessable path tokens for the delivery route."""

import base64
import logging
import secrets

from qreph.exceptions import EntropyError

LOGGER = logging.getLogger(__name__)

MIN_TOKEN_BYTES = 32


def generate_path_token(nbytes: int = MIN_TOKEN_BYTES) -> str:
    """
    Return a URL-safe token encoding `nbytes` bytes from the OS CSPRNG.

    Padding is stripped, so the length depends only on `nbytes`
    (43 characters for the default 32 bytes).
    """
    if nbytes < MIN_TOKEN_BYTES:
        raise ValueError(f"token needs at least {MIN_TOKEN_BYTES} bytes, got {nbytes}")

    try:
        raw = secrets.token_bytes(nbytes)
    except (OSError, NotImplementedError) as exc:
        raise EntropyError(f"failed to generate random bytes: {exc}") from exc

    if len(raw) != nbytes:
        raise EntropyError(
            f"failed to generate random bytes: wanted {nbytes}, got {len(raw)}"
        )

    LOGGER.debug("Generated %d-byte path token", nbytes)
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")
