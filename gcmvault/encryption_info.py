"""Encryption information block appended to encrypted files.

The block is a sequence of fields, each made of a one byte id, a three byte
big-endian length and the field data. It is closed by an end-of-info marker:
a zero id, the three byte size of the whole block and the signature.
"""

from dataclasses import dataclass, field
from enum import IntEnum
import os

from .constants import ENCRYPTION_METHOD, PBKDF2_ALGORITHM

SIGNATURE = b"ENC-INFO"
END_OF_INFO_SIZE = 4 + len(SIGNATURE)
MAX_INFO_SIZE = 1 * 1024 * 1024

_MAX_FIELD_SIZE = 0xFFFFFF
_TEXT_ENCODING = "utf-8"
_TEXT_ERRORS = "surrogateescape"


class _FieldId(IntEnum):
    END_OF_INFO = 0x00
    KDF_ALGORITHM = ord("k")
    KDF_SALT = ord("s")
    KDF_DIGEST = ord("d")
    KDF_ITERATIONS = ord("i")
    ENCRYPTION_METHOD = ord("m")
    NONCE = ord("n")
    TAG = ord("t")
    ADDITIONAL_DATA = ord("a")


@dataclass
class KdfInfo:
    """Parameters of the key derivation stored in an encrypted file."""

    algorithm: str = ""
    salt: bytes = b""
    digest: str = ""
    iterations: int = 0


@dataclass
class EncryptionInfo:
    """Encryption information read from an encrypted file."""

    size: int = 0
    kdf: KdfInfo = field(default_factory=KdfInfo)
    encryption_method: str = ""
    nonce: bytes = b""
    tag: bytes = b""
    additional_data: bytes = b""


def _to_bytes(value):
    if isinstance(value, str):
        return value.encode(_TEXT_ENCODING, _TEXT_ERRORS)
    return bytes(value)


def _to_text(value):
    return value.decode(_TEXT_ENCODING, _TEXT_ERRORS)


def _field(field_id, value):
    value = _to_bytes(value)
    if len(value) > _MAX_FIELD_SIZE:
        raise ValueError("field too large")
    return bytes([field_id]) + len(value).to_bytes(3, "big") + value


def _uint_field(field_id, value):
    if not 0 <= value <= 0xFFFFFFFF:
        raise ValueError("value does not fit into 4 bytes")
    return _field(field_id, value.to_bytes(4, "big"))


def create_encryption_info(salt, digest, iterations, nonce, tag, additional_data=b""):
    """Serialize encryption information into the block appended to encrypted files."""
    body = b"".join(
        (
            _field(_FieldId.KDF_ALGORITHM, PBKDF2_ALGORITHM),
            _field(_FieldId.KDF_SALT, salt),
            _field(_FieldId.KDF_DIGEST, digest),
            _uint_field(_FieldId.KDF_ITERATIONS, iterations),
            _field(_FieldId.ENCRYPTION_METHOD, ENCRYPTION_METHOD),
            _field(_FieldId.NONCE, nonce),
            _field(_FieldId.TAG, tag),
            _field(_FieldId.ADDITIONAL_DATA, additional_data),
        )
    )
    total = len(body) + END_OF_INFO_SIZE
    return (
        body
        + bytes([_FieldId.END_OF_INFO])
        + (total & 0xFFFFFF).to_bytes(3, "big")
        + SIGNATURE
    )


def _iter_fields(data):
    """Yield (id, value) pairs up to the end-of-info marker."""
    pos = 0
    while True:
        if len(data) <= pos:
            raise ValueError("parse error: id expected")
        field_id = data[pos]
        pos += 1
        if field_id == _FieldId.END_OF_INFO:
            return
        if len(data) <= pos + 3:
            raise ValueError("parse error: failed to read field size")
        size = int.from_bytes(data[pos:pos + 3], "big")
        pos += 3
        if pos + size >= len(data):
            raise ValueError("invalid id")
        yield field_id, bytes(data[pos:pos + size])
        pos += size


def _parse_uint(value):
    if len(value) != 4:
        raise ValueError("parse error: uint should be 4 bytes in size")
    return int.from_bytes(value, "big")


def parse_encryption_info(data):
    """Parse an encryption information block."""
    info = EncryptionInfo(size=len(data))
    for raw_id, value in _iter_fields(data):
        try:
            field_id = _FieldId(raw_id)
        except ValueError:
            raise ValueError("invalid id") from None
        match field_id:
            case _FieldId.KDF_ALGORITHM:
                info.kdf.algorithm = _to_text(value)
            case _FieldId.KDF_SALT:
                info.kdf.salt = value
            case _FieldId.KDF_DIGEST:
                info.kdf.digest = _to_text(value)
            case _FieldId.KDF_ITERATIONS:
                info.kdf.iterations = _parse_uint(value)
            case _FieldId.ENCRYPTION_METHOD:
                info.encryption_method = _to_text(value)
            case _FieldId.NONCE:
                info.nonce = value
            case _FieldId.TAG:
                info.tag = value
            case _FieldId.ADDITIONAL_DATA:
                info.additional_data = value
    return info


def get_encryption_info(filename):
    """Read the encryption information stored at the end of an encrypted file."""
    file_size = os.path.getsize(filename)
    if file_size < END_OF_INFO_SIZE:
        raise ValueError("file too small")

    with open(filename, "rb") as file:
        file.seek(file_size - END_OF_INFO_SIZE)
        end_of_info = file.read(END_OF_INFO_SIZE)
        if len(end_of_info) != END_OF_INFO_SIZE:
            raise ValueError("failed to read encryption info")
        if end_of_info[4:] != SIGNATURE:
            raise ValueError("invalid signature")

        info_size = int.from_bytes(end_of_info[:4], "big")
        if info_size > file_size or info_size > MAX_INFO_SIZE:
            raise ValueError("invalid info size")

        file.seek(file_size - info_size)
        raw_info = file.read(info_size)
        if len(raw_info) != info_size:
            raise ValueError("failed to read encryption info")

    return parse_encryption_info(raw_info)