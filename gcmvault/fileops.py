"""Encryption, decryption and verification of whole files.

An encrypted file holds the ciphertext followed by an encryption
information block (see :mod:`gcmvault.encryption_info`).
"""

import contextlib
import os

from .cipher import Decrypter, Encrypter, Verifier
from .encryption_info import create_encryption_info, get_encryption_info
from .mapped_file import MappedFile
from .pbkdf2 import pbkdf2, pbkdf2_generate_params

_BUFFER_SIZE = 100 * 1024


def _remove_quietly(filename):
    with contextlib.suppress(FileNotFoundError):
        os.remove(filename)


def _write(out, data):
    try:
        out.write(data)
    except OSError as exc:
        raise OSError("failed to write to file") from exc


def _encrypt_stream(input_filename, out, password, additional_data):
    """Encrypt a file into a writable binary stream, info block included."""
    params = pbkdf2_generate_params()
    key = pbkdf2(password, params.salt, params.digest, params.iterations)
    encrypter = Encrypter(key, additional_data)

    try:
        source = open(input_filename, "rb")
    except OSError as exc:
        raise OSError("failed to open input file") from exc

    with source:
        try:
            for chunk in iter(lambda: source.read(_BUFFER_SIZE), b""):
                _write(out, encrypter.update(chunk))
        except OSError as exc:
            if str(exc) == "failed to write to file":
                raise
            raise OSError("failed to read from file") from exc

    tag = encrypter.finalize()
    info = create_encryption_info(
        params.salt,
        params.digest,
        params.iterations,
        encrypter.nonce,
        tag,
        additional_data,
    )
    _write(out, info)


def encrypt_file(input_filename, output_filename, password, additional_data=b""):
    """Encrypt a file into a new file; the output is removed on failure."""
    try:
        try:
            out = open(output_filename, "wb")
        except OSError as exc:
            params_error = OSError("failed to open output file")
            raise params_error from exc
        with out:
            _encrypt_stream(input_filename, out, password, additional_data)
    except BaseException:
        _remove_quietly(output_filename)
        raise


def encrypt_file_inplace(filename, password, additional_data=b""):
    """Encrypt a file in place and append the encryption information."""
    params = pbkdf2_generate_params()
    key = pbkdf2(password, params.salt, params.digest, params.iterations)
    encrypter = Encrypter(key, additional_data)

    with MappedFile(filename) as mapped:
        encrypter.update_inplace(mapped.buffer)

    tag = encrypter.finalize()
    info = create_encryption_info(
        params.salt,
        params.digest,
        params.iterations,
        encrypter.nonce,
        tag,
        additional_data,
    )
    try:
        with open(filename, "ab") as file:
            file.write(info)
    except OSError as exc:
        raise OSError("failed to write to file") from exc


def encrypt_file_tostream(input_filename, out, password, additional_data=b""):
    """Encrypt a file and write the result to a binary stream."""
    _encrypt_stream(input_filename, out, password, additional_data)


def _prepare_decryption(filename, password):
    info = get_encryption_info(filename)
    key = pbkdf2(password, info.kdf.salt, info.kdf.digest, info.kdf.iterations)
    verification_key = key.copy()
    return info, key, verification_key


def _verify(verifier, data, message):
    verifier.update(data)
    if not verifier.finalize():
        raise RuntimeError(message)


def _decrypt_to(input_filename, out, password, verify_message):
    """Verify, then decrypt into ``out``; return the decrypter, not yet finalized."""
    info, key, verification_key = _prepare_decryption(input_filename, password)
    decrypter = Decrypter(key, info.nonce, info.tag, info.additional_data)
    verifier = Verifier(verification_key, info.nonce, info.tag, info.additional_data)

    with MappedFile(input_filename, True) as mapped:
        size = mapped.size - info.size
        with memoryview(mapped.buffer) as whole, whole[:size] as data:
            _verify(verifier, data, verify_message)
            for offset in range(0, size, _BUFFER_SIZE):
                with data[offset:offset + _BUFFER_SIZE] as chunk:
                    _write(out, decrypter.update(chunk))
    return decrypter


def decrypt_file(input_filename, output_filename, password):
    """Decrypt an encrypted file into a new file."""
    try:
        out = open(output_filename, "wb")
    except OSError as exc:
        raise OSError("failed to write to file") from exc
    try:
        with out:
            decrypter = _decrypt_to(
                input_filename, out, password, "failed to verify file"
            )
    except BaseException:
        out.close()
        _remove_quietly(output_filename)
        raise

    if not decrypter.finalize():
        _remove_quietly(output_filename)
        raise RuntimeError("failed to decrypt file")


def decrypt_file_inplace(filename, password):
    """Decrypt an encrypted file in place, removing the encryption information."""
    info, key, verification_key = _prepare_decryption(filename, password)

    with MappedFile(filename) as mapped:
        data_size = mapped.size - info.size
        with memoryview(mapped.buffer) as whole, whole[:data_size] as data:
            verifier = Verifier(
                verification_key, info.nonce, info.tag, info.additional_data
            )
            _verify(verifier, data, "failed to verify file")

            decrypter = Decrypter(key, info.nonce, info.tag, info.additional_data)
            decrypter.update_inplace(data)
            if not decrypter.finalize():
                raise RuntimeError("failed to decrypt file")

    os.truncate(filename, data_size)


def decrypt_file_tostream(input_filename, out, password):
    """Decrypt an encrypted file and write the plaintext to a binary stream."""
    decrypter = _decrypt_to(
        input_filename,
        out,
        password,
        "failed to verify file (file data corrupted)",
    )
    if not decrypter.finalize():
        raise RuntimeError("error: failed to decrypt file")


def verify_file(input_filename, password):
    """Check that an encrypted file is authentic under the given password."""
    info = get_encryption_info(input_filename)
    key = pbkdf2(password, info.kdf.salt, info.kdf.digest, info.kdf.iterations)
    verifier = Verifier(key, info.nonce, info.tag, info.additional_data)
    with MappedFile(input_filename, True) as mapped:
        size = mapped.size - info.size
        with memoryview(mapped.buffer) as whole, whole[:size] as data:
            _verify(verifier, data, "failed to verify file")