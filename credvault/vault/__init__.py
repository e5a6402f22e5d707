"""Vault — Encrypted-at-rest passwords for JSON test configuration.

Security Note (Threat Model):
    Decrypted passwords live in process memory for the whole test run and
    are not wiped afterwards. Anyone able to read the process memory or the
    ENCRYPTION_KEY variable can recover them. Protection covers the
    configuration file at rest only.
"""

from .crypto import (
    Envelope,
    ENCRYPTED_PREFIX,
    encrypt_secret,
    decrypt_secret,
    is_encrypted,
    mark,
    unmark,
)
from .config import VaultConfig, generate_encryption_key
from .resolver import load_config, loads_config, resolve_secrets
from .rotation import rotate_passphrase

__all__ = [
    "Envelope",
    "ENCRYPTED_PREFIX",
    "encrypt_secret",
    "decrypt_secret",
    "is_encrypted",
    "mark",
    "unmark",
    "VaultConfig",
    "generate_encryption_key",
    "load_config",
    "loads_config",
    "resolve_secrets",
    "rotate_passphrase",
]
