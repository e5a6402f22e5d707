"""credvault: encrypted credentials for browser test configuration."""
from .version import __version__
from .exceptions import (
    CredVaultError,
    EnvelopeError,
    MalformedEnvelope,
    AuthenticationFailed,
    ConfigurationError,
    ParseError,
    MissingEncryptionKey,
    DecryptionFailed,
    UnknownEnvironment,
)
from .vault import (
    encrypt_secret,
    decrypt_secret,
    load_config,
    resolve_secrets,
    VaultConfig,
)
from .models import Credentials, EnvironmentConfig, select_environment

__all__ = [
    "__version__",
    "CredVaultError",
    "EnvelopeError",
    "MalformedEnvelope",
    "AuthenticationFailed",
    "ConfigurationError",
    "ParseError",
    "MissingEncryptionKey",
    "DecryptionFailed",
    "UnknownEnvironment",
    "encrypt_secret",
    "decrypt_secret",
    "load_config",
    "resolve_secrets",
    "VaultConfig",
    "Credentials",
    "EnvironmentConfig",
    "select_environment",
]
