"""
Config Secret Resolver — Load a JSON configuration and decrypt its passwords.

Provides:
- ``loads_config(raw)`` — parse raw JSON text into a configuration document
- ``resolve_secrets(document, passphrase)`` — replace ``encrypted:`` passwords
  with plaintext, in place
- ``load_config(source)`` — read, parse and resolve in one call

A configuration document maps environment names to records::

    {"QA": {"baseURL": "...", "credentials": {"username": "...",
                                              "password": "encrypted:..."}}}

Security Note:
    Never log plaintext or envelope values. Only log environment names.
    The decrypted document lives in memory only and is never written back.
"""
import os
import logging
from collections.abc import Iterator
from typing import IO, Any, Optional, Union

import orjson

from ..exceptions import (
    DecryptionFailed,
    EnvelopeError,
    MissingEncryptionKey,
    ParseError,
)
from .config import ENCRYPTION_KEY_VAR, VaultConfig
from .crypto import decrypt_secret, is_encrypted, unmark

logger = logging.getLogger("credvault.vault")

Source = Union[str, os.PathLike, IO[str], IO[bytes]]


def iter_password_fields(document: dict) -> Iterator[tuple[str, dict]]:
    """Yield (environment name, credentials record) for every string password.

    Entries that are not objects, have no ``credentials`` object, or whose
    password is missing, empty or not a string are skipped.
    """
    for env, record in document.items():
        if not isinstance(record, dict):
            continue
        credentials = record.get("credentials")
        if not isinstance(credentials, dict):
            continue
        password = credentials.get("password")
        if isinstance(password, str) and password:
            yield env, credentials


def loads_config(raw: Union[str, bytes]) -> dict:
    """Parse raw JSON into a configuration document.

    Raises:
        ParseError: If raw is not valid JSON or not a JSON object.
    """
    try:
        document = orjson.loads(raw)
    except orjson.JSONDecodeError as err:
        raise ParseError(f"Invalid configuration JSON: {err}") from err
    if not isinstance(document, dict):
        raise ParseError(
            "Configuration must be a JSON object mapping environment names "
            f"to records, got {type(document).__name__}"
        )
    return document


def resolve_secrets(
    document: dict,
    passphrase: Optional[str] = None,
    *,
    settings: Optional[VaultConfig] = None,
) -> dict:
    """Decrypt every ``encrypted:`` password of a configuration document.

    Args:
        document: Parsed configuration document, modified in place.
        passphrase: Decryption passphrase. Defaults to the settings key, which
            itself defaults to the ENCRYPTION_KEY environment variable.
        settings: Optional settings; loaded from the environment when omitted.

    Returns:
        The same document with plaintext passwords.

    Raises:
        MissingEncryptionKey: If an encrypted password is present and no
            passphrase is available. Raised before any decryption.
        DecryptionFailed: If any encrypted password cannot be decrypted. The
            document is left untouched in that case.
    """
    pending = [
        (env, credentials)
        for env, credentials in iter_password_fields(document)
        if is_encrypted(credentials["password"])
    ]
    if not pending:
        return document

    if not passphrase:
        if settings is None:
            settings = VaultConfig.from_env()
        if settings.encryption_key is None:
            raise MissingEncryptionKey(ENCRYPTION_KEY_VAR)
        passphrase = settings.get_encryption_key()

    resolved: list[tuple[dict, str]] = []
    for env, credentials in pending:
        try:
            plaintext = decrypt_secret(
                unmark(credentials["password"]), passphrase,
            )
        except EnvelopeError as err:
            logger.error("Failed to decrypt password for environment=%s", env)
            raise DecryptionFailed(env, err) from err
        resolved.append((credentials, plaintext))
        logger.debug("Decrypted password for environment=%s", env)

    # All-or-nothing: only write once every entry decrypted.
    for credentials, plaintext in resolved:
        credentials["password"] = plaintext
    return document


def _read_source(source: Source) -> Union[str, bytes]:
    if isinstance(source, (str, os.PathLike)):
        with open(source, "rb") as fp:
            return fp.read()
    return source.read()


def load_config(
    source: Optional[Source] = None,
    *,
    passphrase: Optional[str] = None,
    settings: Optional[VaultConfig] = None,
) -> dict:
    """Read a configuration document and decrypt its passwords.

    Args:
        source: Path or readable file object. Defaults to the configured
            ``config_path`` (CREDVAULT_CONFIG, else ``config.json``).
        passphrase: Decryption passphrase, see ``resolve_secrets``.
        settings: Optional settings; loaded from the environment when omitted.

    Returns:
        Configuration document with plaintext passwords.

    Raises:
        ParseError: If the document is not a valid JSON object.
        MissingEncryptionKey: See ``resolve_secrets``.
        DecryptionFailed: See ``resolve_secrets``.
        OSError: If the source cannot be read.
    """
    if source is None:
        if settings is None:
            settings = VaultConfig.from_env()
        source = settings.config_path
    document = loads_config(_read_source(source))
    logger.debug("Loaded configuration with %d environment(s)", len(document))
    return resolve_secrets(document, passphrase, settings=settings)
