"""Streaming AES-256-GCM encryption, decryption and verification."""

from contextlib import contextmanager

from cryptography.exceptions import AlreadyFinalized, InvalidTag, UnsupportedAlgorithm
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .constants import KEY_SIZE, NONCE_SIZE, TAG_SIZE
from .errors import CryptoError
from .rand import random_bytes
from .secure_string import SecureString

_CHUNK_SIZE = 64 * 1024


@contextmanager
def _crypto_errors():
    """Turn failures of the cipher backend into CryptoError."""
    try:
        yield
    except (AlreadyFinalized, UnsupportedAlgorithm) as exc:
        raise CryptoError(str(exc) or type(exc).__name__) from exc


def _take_key(key):
    """Consume the key and return its bytes, checking the size."""
    secret = key.take() if isinstance(key, SecureString) else SecureString(key)
    try:
        if len(secret) != KEY_SIZE:
            raise ValueError("invalid key size")
        return bytes(secret)
    finally:
        secret.clear()


def _as_bytes(value):
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


def _process(context, data):
    with _crypto_errors():
        result = context.update(data)
    if len(result) != len(data):
        raise RuntimeError("output buffer size mismatch")
    return result


def _process_inplace(context, buffer):
    with memoryview(buffer) as view, view.cast("B") as flat:
        if flat.readonly:
            raise TypeError("buffer is read-only")
        for offset in range(0, len(flat), _CHUNK_SIZE):
            piece = flat[offset:offset + _CHUNK_SIZE]
            flat[offset:offset + len(piece)] = _process(context, piece)


def _decryption_context(key, nonce, tag, additional_data):
    key_bytes = _take_key(key)
    nonce = bytes(nonce)
    tag = bytes(tag)
    if len(nonce) != NONCE_SIZE:
        raise ValueError("invalid nonce size")
    if len(tag) != TAG_SIZE:
        raise ValueError("invalid tag size")
    with _crypto_errors():
        context = Cipher(algorithms.AES(key_bytes), modes.GCM(nonce, tag)).decryptor()
        additional_data = _as_bytes(additional_data)
        if additional_data:
            context.authenticate_additional_data(additional_data)
    return context


def _finalize_decryption(context):
    try:
        context.finalize()
    except InvalidTag:
        return False
    except AlreadyFinalized as exc:
        raise CryptoError(str(exc) or "context already finalized") from exc
    return True


class Encrypter:
    """AES-256-GCM encryption context with a fresh random nonce."""

    def __init__(self, key, additional_data=b""):
        self._nonce = random_bytes(NONCE_SIZE)
        key_bytes = _take_key(key)
        with _crypto_errors():
            self._context = Cipher(
                algorithms.AES(key_bytes), modes.GCM(self._nonce)
            ).encryptor()
            additional_data = _as_bytes(additional_data)
            if additional_data:
                self._context.authenticate_additional_data(additional_data)

    def update(self, data):
        """Encrypt data and return the ciphertext of the same length."""
        return _process(self._context, data)

    def update_inplace(self, buffer):
        """Encrypt a writable buffer in place."""
        _process_inplace(self._context, buffer)

    def finalize(self):
        """Finish the encryption and return the authentication tag."""
        with _crypto_errors():
            self._context.finalize()
            tag = self._context.tag
        return bytes(tag[:TAG_SIZE])

    @property
    def nonce(self):
        """The nonce (initialization vector) of this encryption."""
        return self._nonce


class Decrypter:
    """AES-256-GCM decryption context checked against a tag."""

    def __init__(self, key, nonce, tag, additional_data=b""):
        self._context = _decryption_context(key, nonce, tag, additional_data)

    def update(self, data):
        """Decrypt data and return the plaintext of the same length."""
        return _process(self._context, data)

    def update_inplace(self, buffer):
        """Decrypt a writable buffer in place."""
        _process_inplace(self._context, buffer)

    def finalize(self):
        """Return True if the data was authentic; decrypted data is invalid otherwise."""
        return _finalize_decryption(self._context)


class Verifier:
    """Checks the authenticity of AES-256-GCM data without keeping the plaintext."""

    def __init__(self, key, nonce, tag, additional_data=b""):
        self._context = _decryption_context(key, nonce, tag, additional_data)

    def update(self, data):
        """Feed ciphertext into the verification."""
        with memoryview(data) as view, view.cast("B") as flat:
            for offset in range(0, len(flat), _CHUNK_SIZE):
                _process(self._context, flat[offset:offset + _CHUNK_SIZE])

    def finalize(self):
        """Return True if the data fed in matches the tag."""
        return _finalize_decryption(self._context)