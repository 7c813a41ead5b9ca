"""Exceptions raised by the cryptographic primitives."""


class CryptoError(Exception):
    """Raised when an underlying cryptographic operation fails."""