"""
Vault Passphrase Rotation — Re-encryption of configuration passwords.

Re-encrypts every ``encrypted:`` password of a raw (still encrypted)
configuration document from one passphrase to another. Plaintext passwords are
left alone and counted as skipped. The operation is all-or-nothing: if any
entry fails to decrypt under the old passphrase the document is not modified.

Security Note:
    Plaintext exists in memory only during re-encryption of each entry.
    Never log plaintext, passphrases or envelope values.
"""
import logging

from ..exceptions import DecryptionFailed, EnvelopeError
from .crypto import decrypt_secret, encrypt_secret, is_encrypted, mark, unmark
from .resolver import iter_password_fields

logger = logging.getLogger("credvault.vault")


def rotate_passphrase(
    document: dict,
    old_passphrase: str,
    new_passphrase: str,
) -> dict:
    """Re-encrypt all encrypted passwords from old_passphrase to new_passphrase.

    Args:
        document: Raw configuration document, modified in place.
        old_passphrase: Passphrase the passwords are currently encrypted with.
        new_passphrase: Passphrase to encrypt them with.

    Returns:
        Stats dict with keys: total, rotated, skipped.

    Raises:
        ValueError: If new_passphrase is empty.
        DecryptionFailed: If an entry does not decrypt under old_passphrase.
    """
    if not new_passphrase:
        raise ValueError("New passphrase cannot be empty")

    stats = {"total": 0, "rotated": 0, "skipped": 0}
    rotated: list[tuple[dict, str]] = []

    logger.info("Starting passphrase rotation")

    for env, credentials in iter_password_fields(document):
        stats["total"] += 1
        password = credentials["password"]
        if not is_encrypted(password):
            stats["skipped"] += 1
            continue
        try:
            plaintext = decrypt_secret(unmark(password), old_passphrase)
        except EnvelopeError as err:
            logger.error("Error rotating password for environment=%s", env)
            raise DecryptionFailed(env, err) from err
        rotated.append((credentials, mark(encrypt_secret(plaintext, new_passphrase))))
        stats["rotated"] += 1

    for credentials, value in rotated:
        credentials["password"] = value

    logger.info("Passphrase rotation complete: %s", stats)
    return stats
