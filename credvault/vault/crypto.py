"""
Vault Crypto Core — Key derivation, envelope encryption/decryption and markers.

Envelope layout (base64-rendered for storage in JSON configuration):
    [salt 64B][iv 16B][GCM tag 16B][ciphertext]

Key derivation: PBKDF2-HMAC-SHA512(passphrase, salt, 100000) → 32-byte key.
Cipher: AES-256-GCM with a 16-byte iv.

Security Note:
    Never log plaintext, passphrases or envelope text.
    Salt and iv are drawn fresh for every encryption, so encrypting the same
    secret twice yields two different envelopes.
"""
import os
import base64
from typing import NamedTuple

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..exceptions import AuthenticationFailed, MalformedEnvelope

SALT_SIZE = 64
IV_SIZE = 16
TAG_SIZE = 16
KEY_LENGTH = 32  # AES-256
KDF_ITERATIONS = 100_000
HEADER_SIZE = SALT_SIZE + IV_SIZE + TAG_SIZE

ENCRYPTED_PREFIX = "encrypted:"


# ---------------------------------------------------------------------------
# Key derivation
# ---------------------------------------------------------------------------

def derive_key(passphrase: str, salt: bytes) -> bytes:
    """Derive a 32-byte encryption key using PBKDF2-HMAC-SHA512.

    Args:
        passphrase: Operator-supplied passphrase.
        salt: Per-envelope random salt.

    Returns:
        32-byte derived key.
    """
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA512(),
        length=KEY_LENGTH,
        salt=salt,
        iterations=KDF_ITERATIONS,
    )
    return kdf.derive(passphrase.encode("utf-8"))


# ---------------------------------------------------------------------------
# Envelope
# ---------------------------------------------------------------------------

class Envelope(NamedTuple):
    """Fixed-layout encrypted blob: salt, iv, tag and ciphertext."""

    salt: bytes
    iv: bytes
    tag: bytes
    ciphertext: bytes

    @classmethod
    def from_bytes(cls, data: bytes) -> "Envelope":
        """Split raw envelope bytes by fixed offsets.

        Raises:
            MalformedEnvelope: If data is shorter than the 96-byte header.
        """
        if len(data) < HEADER_SIZE:
            raise MalformedEnvelope(
                f"envelope too short: {len(data)} bytes "
                f"(minimum {HEADER_SIZE})"
            )
        return cls(
            salt=data[:SALT_SIZE],
            iv=data[SALT_SIZE:SALT_SIZE + IV_SIZE],
            tag=data[SALT_SIZE + IV_SIZE:HEADER_SIZE],
            ciphertext=data[HEADER_SIZE:],
        )

    @classmethod
    def from_text(cls, text: str) -> "Envelope":
        """Decode base64 envelope text.

        Raises:
            MalformedEnvelope: If text is not valid base64 or too short.
        """
        try:
            data = base64.b64decode(text, validate=True)
        except ValueError as err:
            raise MalformedEnvelope("envelope is not valid base64") from err
        return cls.from_bytes(data)

    def to_bytes(self) -> bytes:
        return self.salt + self.iv + self.tag + self.ciphertext

    def to_text(self) -> str:
        return base64.b64encode(self.to_bytes()).decode("ascii")


# ---------------------------------------------------------------------------
# Encryption / decryption
# ---------------------------------------------------------------------------

def encrypt_secret(plaintext: str, passphrase: str) -> str:
    """Encrypt a secret string into base64 envelope text.

    Args:
        plaintext: Secret to protect.
        passphrase: Passphrase used for key derivation.

    Returns:
        Base64 text of [salt][iv][tag][ciphertext].
    """
    salt = os.urandom(SALT_SIZE)
    iv = os.urandom(IV_SIZE)
    key = derive_key(passphrase, salt)
    # AESGCM appends the tag to the ciphertext.
    sealed = AESGCM(key).encrypt(iv, plaintext.encode("utf-8"), None)
    envelope = Envelope(
        salt=salt,
        iv=iv,
        tag=sealed[-TAG_SIZE:],
        ciphertext=sealed[:-TAG_SIZE],
    )
    return envelope.to_text()


def decrypt_secret(envelope_text: str, passphrase: str) -> str:
    """Decrypt base64 envelope text back to the secret string.

    Args:
        envelope_text: Output of ``encrypt_secret``.
        passphrase: Passphrase used at encryption time.

    Returns:
        Decrypted plaintext.

    Raises:
        MalformedEnvelope: If the envelope cannot be parsed.
        AuthenticationFailed: If the tag does not verify.
    """
    envelope = Envelope.from_text(envelope_text)
    key = derive_key(passphrase, envelope.salt)
    try:
        data = AESGCM(key).decrypt(
            envelope.iv, envelope.ciphertext + envelope.tag, None,
        )
    except InvalidTag:
        raise AuthenticationFailed() from None
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        raise MalformedEnvelope("envelope plaintext is not UTF-8") from None


# ---------------------------------------------------------------------------
# Marker prefix
# ---------------------------------------------------------------------------

def is_encrypted(value: object) -> bool:
    """True if value is a string carrying the ``encrypted:`` marker."""
    return isinstance(value, str) and value.startswith(ENCRYPTED_PREFIX)


def mark(envelope_text: str) -> str:
    return ENCRYPTED_PREFIX + envelope_text


def unmark(value: str) -> str:
    """Strip the marker prefix from a configuration value.

    Raises:
        ValueError: If value does not carry the marker.
    """
    if not is_encrypted(value):
        raise ValueError("value does not carry the encrypted: marker")
    return value[len(ENCRYPTED_PREFIX):]
