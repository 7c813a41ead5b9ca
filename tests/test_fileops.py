import io

import pytest

from gcmvault.encryption_info import SIGNATURE, get_encryption_info
from gcmvault.fileops import (
    decrypt_file,
    decrypt_file_inplace,
    decrypt_file_tostream,
    encrypt_file,
    encrypt_file_inplace,
    encrypt_file_tostream,
    verify_file,
)
from gcmvault.secure_string import SecureString

PASSWORD = "secret"
WRONG_PASSWORD = "password"
SAMPLE = b"Sample"


@pytest.fixture
def plain_file(tmp_path):
    path = tmp_path / "unencrypted.txt"
    path.write_bytes(SAMPLE)
    return path


@pytest.fixture
def encrypted_file(tmp_path, plain_file):
    path = tmp_path / "encrypted.txt"
    encrypt_file(str(plain_file), str(path), PASSWORD)
    return path


def test_encrypt_and_decrypt_file(tmp_path, encrypted_file):
    decrypted = tmp_path / "decrypted.txt"
    decrypt_file(str(encrypted_file), str(decrypted), PASSWORD)
    assert decrypted.read_bytes() == SAMPLE


def test_encrypt_and_decrypt_file_inplace(tmp_path):
    path = tmp_path / "xcrypt.txt"
    path.write_bytes(SAMPLE)

    encrypt_file_inplace(str(path), PASSWORD)
    encrypted = path.read_bytes()
    assert encrypted[: len(SAMPLE)] != SAMPLE
    assert encrypted.endswith(SIGNATURE)

    decrypt_file_inplace(str(path), PASSWORD)
    assert path.read_bytes() == SAMPLE


def test_encrypted_file_layout(encrypted_file):
    data = encrypted_file.read_bytes()
    info = get_encryption_info(str(encrypted_file))
    assert data.endswith(SIGNATURE)
    assert len(data) == len(SAMPLE) + info.size
    assert data[: len(SAMPLE)] != SAMPLE
    assert info.kdf.algorithm == "PBKDF2"
    assert info.encryption_method == "AES256-GCM"


def test_stream_round_trip(tmp_path, plain_file):
    encrypted_stream = io.BytesIO()
    encrypt_file_tostream(str(plain_file), encrypted_stream, PASSWORD)
    encrypted = tmp_path / "streamed.bin"
    encrypted.write_bytes(encrypted_stream.getvalue())

    decrypted_stream = io.BytesIO()
    decrypt_file_tostream(str(encrypted), decrypted_stream, PASSWORD)
    assert decrypted_stream.getvalue() == SAMPLE


def test_additional_data_is_stored_and_authenticated(tmp_path, plain_file):
    encrypted = tmp_path / "encrypted.bin"
    encrypt_file(str(plain_file), str(encrypted), PASSWORD, b"header")
    assert get_encryption_info(str(encrypted)).additional_data == b"header"

    decrypted = tmp_path / "decrypted.bin"
    decrypt_file(str(encrypted), str(decrypted), PASSWORD)
    assert decrypted.read_bytes() == SAMPLE


def test_decrypt_with_wrong_password_fails(tmp_path, encrypted_file):
    decrypted = tmp_path / "decrypted.txt"
    with pytest.raises(RuntimeError, match="failed to verify file"):
        decrypt_file(str(encrypted_file), str(decrypted), WRONG_PASSWORD)
    assert not decrypted.exists()


def test_decrypt_inplace_with_wrong_password_keeps_file(encrypted_file):
    before = encrypted_file.read_bytes()
    with pytest.raises(RuntimeError, match="failed to verify file"):
        decrypt_file_inplace(str(encrypted_file), WRONG_PASSWORD)
    assert encrypted_file.read_bytes() == before


def test_verify_file_detects_corruption(encrypted_file):
    verify_file(str(encrypted_file), PASSWORD)
    data = bytearray(encrypted_file.read_bytes())
    data[0] ^= 0xFF
    encrypted_file.write_bytes(bytes(data))
    with pytest.raises(RuntimeError, match="failed to verify file"):
        verify_file(str(encrypted_file), PASSWORD)


def test_decrypt_tostream_reports_corruption(encrypted_file):
    data = bytearray(encrypted_file.read_bytes())
    data[1] ^= 0x01
    encrypted_file.write_bytes(bytes(data))
    out = io.BytesIO()
    with pytest.raises(RuntimeError, match="file data corrupted"):
        decrypt_file_tostream(str(encrypted_file), out, PASSWORD)
    assert out.getvalue() == b""


def test_encrypt_missing_input_removes_output(tmp_path):
    output = tmp_path / "out.bin"
    with pytest.raises(OSError, match="failed to open input file"):
        encrypt_file(str(tmp_path / "missing.txt"), str(output), PASSWORD)
    assert not output.exists()


def test_empty_file_round_trip(tmp_path):
    empty = tmp_path / "empty.txt"
    empty.write_bytes(b"")
    encrypted = tmp_path / "empty.enc"
    encrypt_file(str(empty), str(encrypted), PASSWORD)

    decrypted = tmp_path / "empty.dec"
    decrypt_file(str(encrypted), str(decrypted), PASSWORD)
    assert decrypted.read_bytes() == b""


def test_encrypt_inplace_rejects_empty_file(tmp_path):
    empty = tmp_path / "empty.txt"
    empty.write_bytes(b"")
    with pytest.raises(ValueError, match="file empty"):
        encrypt_file_inplace(str(empty), PASSWORD)


def test_secure_string_password_is_consumed(tmp_path, plain_file):
    secret_value = SecureString(PASSWORD)
    encrypted = tmp_path / "encrypted.bin"
    encrypt_file(str(plain_file), str(encrypted), secret_value)
    assert len(secret_value) == 0
    verify_file(str(encrypted), SecureString(PASSWORD))
    assert encrypted.read_bytes().endswith(SIGNATURE)