"""Tests for passphrase rotation."""
import copy

import pytest

from credvault.exceptions import DecryptionFailed
from credvault.vault.crypto import decrypt_secret, is_encrypted, unmark
from credvault.vault.rotation import rotate_passphrase


class TestRotatePassphrase:
    """Tests for rotate_passphrase."""

    def test_rotates_encrypted_passwords(self, config_document, passphrase):
        """Test that encrypted passwords move to the new passphrase."""
        stats = rotate_passphrase(config_document, passphrase, "new-key")
        assert stats == {"total": 3, "rotated": 1, "skipped": 2}
        value = config_document["QA"]["credentials"]["password"]
        assert is_encrypted(value)
        assert decrypt_secret(unmark(value), "new-key") == "Automation@Tester@1990"

    def test_plaintext_untouched(self, config_document, passphrase):
        rotate_passphrase(config_document, passphrase, "new-key")
        assert config_document["UAT"]["credentials"]["password"] == "plainPass123"

    def test_wrong_old_passphrase(self, config_document):
        """Test that a failure leaves the document unmodified."""
        before = copy.deepcopy(config_document)
        with pytest.raises(DecryptionFailed) as exc_info:
            rotate_passphrase(config_document, "wrong", "new-key")
        assert exc_info.value.environment == "QA"
        assert config_document == before

    def test_empty_new_passphrase(self, config_document, passphrase):
        with pytest.raises(ValueError):
            rotate_passphrase(config_document, passphrase, "")
