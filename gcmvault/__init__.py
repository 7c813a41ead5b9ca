"""Encrypt, decrypt and verify files with AES-256-GCM and PBKDF2-derived keys."""

__version__ = "1.0.0"