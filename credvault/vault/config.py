"""
Vault Configuration — Passphrase loading and validated settings.

Reads settings from environment variables, after loading a ``.env`` file
found from the working directory (existing variables win):
    ENCRYPTION_KEY   = <passphrase used to decrypt "encrypted:" passwords>
    ENV              = <environment name to select, default LIVE>
    CREDVAULT_CONFIG = <path to the JSON configuration, default config.json>

Empty values count as unset.

Security Note:
    Never log the passphrase. Only log variable names and environment names.
"""
import os
import secrets
import logging
from pathlib import Path
from typing import Optional, Union

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, SecretStr, field_validator

from ..exceptions import MissingEncryptionKey

logger = logging.getLogger("credvault.vault")

ENCRYPTION_KEY_VAR = "ENCRYPTION_KEY"
ENVIRONMENT_VAR = "ENV"
CONFIG_PATH_VAR = "CREDVAULT_CONFIG"

DEFAULT_ENVIRONMENT = "LIVE"
DEFAULT_CONFIG_PATH = "config.json"


def _getenv(name: str) -> str:
    return os.environ.get(name, "").strip()


def generate_encryption_key() -> str:
    """Generate a random url-safe passphrase.

    This is a utility for operators creating a new ENCRYPTION_KEY.

    Returns:
        43-character url-safe passphrase (32 random bytes).
    """
    return secrets.token_urlsafe(32)


class VaultConfig(BaseModel):
    """Validated credvault settings."""

    encryption_key: Optional[SecretStr] = None
    environment: str = Field(default=DEFAULT_ENVIRONMENT)
    config_path: Path = Field(default=Path(DEFAULT_CONFIG_PATH))

    @field_validator("encryption_key")
    @classmethod
    def empty_key_is_unset(cls, v: Optional[SecretStr]) -> Optional[SecretStr]:
        """An empty passphrase counts as not set."""
        if v is not None and not v.get_secret_value():
            return None
        return v

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Environment names are non-empty and upper-case."""
        v = v.strip()
        if not v:
            raise ValueError("Environment name cannot be empty")
        return v.upper()

    def get_encryption_key(self) -> str:
        """Return the raw passphrase.

        Raises:
            MissingEncryptionKey: If no passphrase is configured.
        """
        if self.encryption_key is None:
            raise MissingEncryptionKey(ENCRYPTION_KEY_VAR)
        return self.encryption_key.get_secret_value()

    @classmethod
    def from_env(
        cls,
        dotenv_path: Optional[Union[str, os.PathLike]] = None,
    ) -> "VaultConfig":
        """Create VaultConfig by loading values from environment.

        Args:
            dotenv_path: ``.env`` file to load first. Defaults to the nearest
                ``.env`` from the working directory, if any.

        Returns:
            Populated VaultConfig instance.
        """
        load_dotenv(dotenv_path or find_dotenv(usecwd=True))
        settings = cls(
            encryption_key=os.environ.get(ENCRYPTION_KEY_VAR),
            environment=_getenv(ENVIRONMENT_VAR) or DEFAULT_ENVIRONMENT,
            config_path=_getenv(CONFIG_PATH_VAR) or DEFAULT_CONFIG_PATH,
        )
        logger.debug(
            "Loaded settings: environment=%s config_path=%s key_set=%s",
            settings.environment,
            settings.config_path,
            settings.encryption_key is not None,
        )
        return settings
