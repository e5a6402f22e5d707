"""Custom exception classes for credvault.

Messages never carry secret material: no passphrases, keys, plaintext
passwords or envelope text.
"""
from typing import Optional


class CredVaultError(Exception):
    """Base class for all custom exceptions in credvault."""

    pass


class EnvelopeError(CredVaultError):
    """Raised by the envelope codec."""

    pass


class MalformedEnvelope(EnvelopeError):
    """Raised when input is not a structurally valid envelope (bad base64, too short)."""

    pass


class AuthenticationFailed(EnvelopeError):
    """Raised when the GCM tag does not verify.

    Wrong passphrase, corrupted data and tampering all end up here.
    """

    def __init__(self, message: str = "Envelope authentication failed"):
        super().__init__(message)


class ConfigurationError(CredVaultError):
    """Raised when loading or resolving a configuration document fails."""

    pass


class ParseError(ConfigurationError):
    """Raised when the configuration document is not a valid JSON object."""

    pass


class MissingEncryptionKey(ConfigurationError):
    """Raised when an encrypted field is present but no passphrase is set."""

    def __init__(self, variable: str = "ENCRYPTION_KEY"):
        self.variable = variable
        message = (
            f"{variable} environment variable is required to decrypt passwords. "
            f'Set it with: export {variable}="your-key-here"'
        )
        super().__init__(message)


class DecryptionFailed(ConfigurationError):
    """
    Raised when an encrypted password of a configuration entry
    cannot be decoded.
    """

    def __init__(
        self,
        environment: str,
        orig_exc: Optional[Exception] = None,
    ):
        self.environment = environment
        self.orig_exc = orig_exc
        full_msg = (
            f"Failed to decrypt password for {environment} environment. "
            "Verify the encryption key is correct"
        )
        if orig_exc:
            full_msg += f" (original error: {type(orig_exc).__name__}: {orig_exc})"
        super().__init__(full_msg)


class UnknownEnvironment(ConfigurationError):
    """Raised when the requested environment is not in the configuration."""

    def __init__(self, environment: str, available: list[str]):
        self.environment = environment
        self.available = available
        message = (
            f"Environment '{environment}' not found in configuration "
            f"(available: {', '.join(available) or 'none'})"
        )
        super().__init__(message)
