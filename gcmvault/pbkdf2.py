"""Password based key derivation (PBKDF2)."""

import hashlib
from dataclasses import dataclass

from .constants import KDF_DIGEST, KDF_ITERATIONS, KDF_SALT_SIZE, KEY_SIZE
from .errors import CryptoError
from .rand import random_bytes
from .secure_string import SecureString


@dataclass(frozen=True)
class KdfParams:
    """Parameters of a key derivation."""

    salt: bytes
    digest: str
    iterations: int


def pbkdf2(password, salt, digest, iterations):
    """Derive a 32-byte key from a password.

    The password is consumed: a SecureString passed in is wiped afterwards.
    """
    if isinstance(password, SecureString):
        secret = password.take()
    else:
        secret = SecureString(password)
    try:
        derived = bytearray(
            hashlib.pbkdf2_hmac(
                digest, bytes(secret), bytes(salt), iterations, dklen=KEY_SIZE
            )
        )
    except (ValueError, TypeError, OverflowError) as exc:
        raise CryptoError(f"key derivation failed: {exc}") from exc
    finally:
        secret.clear()
    return SecureString(derived)


def pbkdf2_generate_params():
    """Return fresh parameters: a random salt, the default digest and iteration count."""
    return KdfParams(
        salt=random_bytes(KDF_SALT_SIZE),
        digest=KDF_DIGEST,
        iterations=KDF_ITERATIONS,
    )