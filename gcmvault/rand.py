"""Cryptographically secure random data."""

import os

from .errors import CryptoError


def random_bytes(size):
    """Return ``size`` bytes of cryptographically secure random data."""
    if size < 0:
        raise ValueError("size must not be negative")
    try:
        return os.urandom(size)
    except (OSError, NotImplementedError) as exc:
        raise CryptoError(f"failed to generate random data: {exc}") from exc