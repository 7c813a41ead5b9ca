"""Fixed parameters of the encryption scheme and the key derivation."""

KDF_SALT_SIZE = 16
NONCE_SIZE = 12
KEY_SIZE = 32
TAG_SIZE = 16
KDF_ITERATIONS = 600 * 1000
KDF_DIGEST = "sha256"
PBKDF2_ALGORITHM = "PBKDF2"
ENCRYPTION_METHOD = "AES256-GCM"