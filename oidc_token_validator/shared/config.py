"""
Configuration management for the OIDC token validator.

Settings describe one relying-party connection to an identity provider and
are read from ``OIDC_*`` environment variables or a ``.env`` file.
"""

from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class ValidatorSettings(BaseSettings):
    """Relying-party settings for one identity provider."""

    model_config = SettingsConfigDict(
        env_prefix="OIDC_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Identity provider
    provider_uri: str = Field(default="http://localhost:8080/realms/master")
    discovery_enabled: bool = Field(default=True)
    discovery_path: str = Field(default=".well-known/openid-configuration")

    # Manual endpoint configuration, used when discovery is disabled
    authorization_path: str = Field(default="protocol/openid-connect/auth")
    token_path: str = Field(default="protocol/openid-connect/token")
    jwk_set_path: str = Field(default="protocol/openid-connect/certs")
    introspection_path: Optional[str] = Field(default="protocol/openid-connect/token/introspect")

    # Client credentials for token introspection
    client_id: Optional[str] = Field(default=None)
    client_secret: SecretStr = Field(default=SecretStr(""))

    # Base64 X.509 public key; skips the JWK set lookup when set
    public_key: Optional[str] = Field(default=None)

    # HTTP transport
    http_timeout: float = Field(default=10.0, gt=0)


def get_settings(**overrides) -> ValidatorSettings:
    """Load settings from the environment, applying explicit overrides."""
    return ValidatorSettings(**overrides)
