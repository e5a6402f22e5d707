"""Typed view of one environment record of a configuration document.

The browser-test configuration picks a single environment (``ENV``, default
``LIVE``) out of the resolved document and reads its base URL and credentials.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError

from .exceptions import ParseError, UnknownEnvironment
from .vault.config import VaultConfig


class Credentials(BaseModel):
    """Login credentials for the site under test.

    The password is held as a SecretStr so it never shows up in reprs or logs.
    """
    model_config = ConfigDict(extra="allow")

    username: str
    password: SecretStr


class EnvironmentConfig(BaseModel):
    """One environment record: base URL, credentials and any extra fields."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    base_url: str = Field(alias="baseURL")
    credentials: Credentials


def select_environment(
    document: dict,
    name: Optional[str] = None,
    *,
    settings: Optional[VaultConfig] = None,
) -> EnvironmentConfig:
    """Return the validated record of one environment.

    Args:
        document: Resolved configuration document.
        name: Environment name. Defaults to the ENV setting (``LIVE``).
        settings: Optional settings; loaded from the environment when omitted.

    Raises:
        UnknownEnvironment: If name is not in the document.
        ParseError: If the record is missing required fields.
    """
    if name is None:
        if settings is None:
            settings = VaultConfig.from_env()
        name = settings.environment
    if name not in document:
        raise UnknownEnvironment(name, sorted(document))
    if not isinstance(document[name], dict):
        raise ParseError(f"{name} is not an environment record")
    try:
        return EnvironmentConfig.model_validate(document[name])
    except ValidationError as err:
        # error details may echo field values, keep only locations
        fields = ", ".join(
            ".".join(str(p) for p in e["loc"]) for e in err.errors()
        )
        raise ParseError(
            f"Invalid record for {name} environment (fields: {fields})"
        ) from None
