"""
Tests for the envelope codec.

Tests cover:
- Round-trip of empty, ASCII and non-ASCII secrets
- Non-deterministic encryption
- Envelope layout and length boundary
- Tamper detection and wrong passphrase rejection
- Marker prefix helpers
"""
import base64

import pytest

from credvault.exceptions import AuthenticationFailed, EnvelopeError, MalformedEnvelope
from credvault.vault.crypto import (
    ENCRYPTED_PREFIX,
    HEADER_SIZE,
    IV_SIZE,
    KEY_LENGTH,
    SALT_SIZE,
    TAG_SIZE,
    Envelope,
    decrypt_secret,
    derive_key,
    encrypt_secret,
    is_encrypted,
    mark,
    unmark,
)


def _flip(envelope_text: str, index: int) -> str:
    data = bytearray(base64.b64decode(envelope_text))
    data[index] ^= 0x01
    return base64.b64encode(bytes(data)).decode("ascii")


@pytest.fixture(scope="module")
def sealed():
    """A valid envelope of a short secret."""
    return encrypt_secret("s3cret-value", "k1")


# --- Test Round-trip ---

class TestRoundTrip:
    """Tests for encrypt → decrypt round-trip."""

    @pytest.mark.parametrize("plaintext", [
        "",
        "Automation@Tester@1990",
        "pässwörd 密码 🔐",
        "x" * 1000,
    ])
    def test_round_trip(self, plaintext):
        """Test that decrypt recovers the original secret."""
        envelope = encrypt_secret(plaintext, "passphrase")
        assert decrypt_secret(envelope, "passphrase") == plaintext

    def test_non_ascii_passphrase(self):
        """Test that non-ASCII passphrases work."""
        envelope = encrypt_secret("secret", "clé-ñ-鍵")
        assert decrypt_secret(envelope, "clé-ñ-鍵") == "secret"

    def test_encryption_is_non_deterministic(self):
        """Test that the same inputs produce different envelopes."""
        first = encrypt_secret("same", "key")
        second = encrypt_secret("same", "key")
        assert first != second
        assert decrypt_secret(first, "key") == "same"
        assert decrypt_secret(second, "key") == "same"


# --- Test Envelope Layout ---

class TestEnvelope:
    """Tests for the fixed envelope layout."""

    def test_layout_sizes(self, sealed):
        """Test salt, iv and tag sizes and ciphertext length."""
        envelope = Envelope.from_text(sealed)
        assert len(envelope.salt) == SALT_SIZE
        assert len(envelope.iv) == IV_SIZE
        assert len(envelope.tag) == TAG_SIZE
        assert len(envelope.ciphertext) == len("s3cret-value")

    def test_empty_secret_is_header_only(self):
        """Test that an empty secret yields exactly the 96-byte header."""
        data = base64.b64decode(encrypt_secret("", "key"))
        assert len(data) == HEADER_SIZE == 96

    def test_to_text_round_trip(self, sealed):
        """Test that parsing and re-rendering keeps the text unchanged."""
        assert Envelope.from_text(sealed).to_text() == sealed

    def test_envelope_is_immutable(self, sealed):
        """Test that envelope fields cannot be reassigned."""
        envelope = Envelope.from_text(sealed)
        with pytest.raises(AttributeError):
            envelope.salt = b"\x00" * SALT_SIZE

    def test_derive_key_length(self):
        """Test that derived keys are 32 bytes and salt dependent."""
        key = derive_key("passphrase", b"\x00" * SALT_SIZE)
        assert len(key) == KEY_LENGTH
        assert key == derive_key("passphrase", b"\x00" * SALT_SIZE)
        assert key != derive_key("passphrase", b"\x01" * SALT_SIZE)


# --- Test Malformed Input ---

class TestMalformedEnvelope:
    """Tests for structurally invalid envelopes."""

    @pytest.mark.parametrize("size", [0, 1, 64, 80, 95])
    def test_too_short(self, size):
        """Test that fewer than 96 decoded bytes is malformed."""
        text = base64.b64encode(b"\x00" * size).decode("ascii")
        with pytest.raises(MalformedEnvelope):
            decrypt_secret(text, "key")

    @pytest.mark.parametrize("text", ["not base64!!", "abc", "ümlaut=="])
    def test_invalid_base64(self, text):
        """Test that non-base64 input is malformed."""
        with pytest.raises(MalformedEnvelope):
            decrypt_secret(text, "key")

    def test_header_only_garbage_fails_authentication(self):
        """Test that exactly 96 random bytes parse but fail the tag check."""
        text = base64.b64encode(bytes(range(96))).decode("ascii")
        with pytest.raises(AuthenticationFailed):
            decrypt_secret(text, "key")

    def test_malformed_is_envelope_error(self):
        """Test the error hierarchy."""
        assert issubclass(MalformedEnvelope, EnvelopeError)
        assert issubclass(AuthenticationFailed, EnvelopeError)


# --- Test Authentication ---

class TestAuthentication:
    """Tests for tamper detection and wrong passphrase rejection."""

    def test_wrong_passphrase(self, sealed):
        """Test that a different passphrase is rejected."""
        with pytest.raises(AuthenticationFailed):
            decrypt_secret(sealed, "k2")

    @pytest.mark.parametrize("index", [
        HEADER_SIZE - TAG_SIZE,      # first tag byte
        HEADER_SIZE - 1,             # last tag byte
        HEADER_SIZE,                 # first ciphertext byte
        -1,                          # last ciphertext byte
    ])
    def test_flipped_tag_or_ciphertext(self, sealed, index):
        """Test that flipping a tag or ciphertext byte is detected."""
        with pytest.raises(AuthenticationFailed):
            decrypt_secret(_flip(sealed, index), "k1")

    @pytest.mark.parametrize("index", [0, SALT_SIZE])
    def test_flipped_salt_or_iv(self, sealed, index):
        """Test that flipping a salt or iv byte is detected."""
        with pytest.raises(AuthenticationFailed):
            decrypt_secret(_flip(sealed, index), "k1")

    def test_error_message_is_opaque(self, sealed):
        """Test that the failure does not leak secret material."""
        with pytest.raises(AuthenticationFailed) as exc_info:
            decrypt_secret(sealed, "k2")
        message = str(exc_info.value)
        assert "k2" not in message
        assert "s3cret" not in message
        assert sealed not in message


# --- Test Marker Helpers ---

class TestMarker:
    """Tests for the encrypted: marker prefix."""

    def test_prefix_value(self):
        assert ENCRYPTED_PREFIX == "encrypted:"

    def test_mark_unmark(self, sealed):
        """Test that mark and unmark are inverse."""
        value = mark(sealed)
        assert value == "encrypted:" + sealed
        assert is_encrypted(value)
        assert unmark(value) == sealed

    @pytest.mark.parametrize("value", [
        "plainPass123", "Encrypted:abc", " encrypted:abc", None, 42, "",
    ])
    def test_not_encrypted(self, value):
        """Test values that do not carry the marker exactly."""
        assert is_encrypted(value) is False

    def test_unmark_plain_value(self):
        """Test that unmark refuses unmarked values."""
        with pytest.raises(ValueError):
            unmark("plainPass123")
