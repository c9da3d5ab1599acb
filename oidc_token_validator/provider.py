"""
Relying-party configuration for one identity provider.

Resolves provider metadata (discovery or manual), the signing key and the
client credentials once, and binds them to a ``TokenValidator``.
"""

from dataclasses import dataclass
from typing import Optional

import httpx

from .discovery.metadata import (
    ProviderMetadata,
    build_metadata_manually,
    resolve_metadata_from_discovery,
)
from .jwks.client import (
    SigningKey,
    resolve_signing_key_from_jwk_set,
    resolve_signing_key_from_string,
)
from .shared.config import ValidatorSettings
from .shared.errors import KeyResolutionError, TokenValidationError
from .shared.logging import get_logger
from .transport import DEFAULT_TIMEOUT, client_scope
from .validation.introspection import ClientCredentials
from .validation.models import FailureKind, ValidationResult
from .validation.token_validator import TokenValidator

logger = get_logger("oidc.provider")


@dataclass(frozen=True)
class ProviderConfiguration:
    """Immutable inputs for validating tokens of one provider."""

    metadata: ProviderMetadata
    signing_key: Optional[SigningKey] = None
    credentials: Optional[ClientCredentials] = None
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def from_settings(cls, settings: ValidatorSettings, *,
                      http_client: Optional[httpx.Client] = None,
                      resolve_signing_key: bool = True) -> "ProviderConfiguration":
        """Resolve metadata, signing key and credentials from ``settings``.

        With ``resolve_signing_key`` false and no ``public_key`` configured, the
        JWK set is not fetched and only introspection is available.
        """
        with client_scope(http_client, settings.http_timeout) as client:
            if settings.discovery_enabled:
                metadata = resolve_metadata_from_discovery(
                    settings.provider_uri, settings.discovery_path, http_client=client
                )
            else:
                metadata = build_metadata_manually(
                    settings.provider_uri,
                    settings.authorization_path,
                    settings.token_path,
                    settings.jwk_set_path,
                    settings.introspection_path,
                )

            signing_key = None
            if settings.public_key:
                signing_key = resolve_signing_key_from_string(settings.public_key)
            elif resolve_signing_key:
                signing_key = resolve_signing_key_from_jwk_set(metadata, http_client=client)

        credentials = None
        if settings.client_id:
            credentials = ClientCredentials(settings.client_id, settings.client_secret.get_secret_value())

        logger.info(
            "Provider configuration resolved",
            issuer=metadata.issuer,
            discovery=settings.discovery_enabled,
            has_signing_key=signing_key is not None,
            has_credentials=credentials is not None,
        )
        return cls(metadata=metadata, signing_key=signing_key, credentials=credentials,
                   timeout=settings.http_timeout)


class ProviderTokenValidator:
    """``TokenValidator`` bound to one provider configuration."""

    def __init__(self, configuration: ProviderConfiguration,
                 validator: Optional[TokenValidator] = None):
        self.configuration = configuration
        self.validator = validator or TokenValidator(timeout=configuration.timeout)

    def validate_locally(self, authorization_header: Optional[str]) -> ValidationResult:
        """Verify offline against the provider's signing key and issuer."""
        signing_key = self.configuration.signing_key
        if signing_key is None:
            return ValidationResult.failure(
                FailureKind.VALIDATION, KeyResolutionError("No signing key configured for local validation")
            )
        return self.validator.validate_locally(
            authorization_header, self.configuration.metadata.issuer, signing_key
        )

    def validate_by_introspection(self, authorization_header: Optional[str]) -> ValidationResult:
        """Validate at the provider's introspection endpoint."""
        credentials = self.configuration.credentials
        if credentials is None:
            return ValidationResult.failure(
                FailureKind.VALIDATION, TokenValidationError("No client credentials configured for introspection")
            )
        return self.validator.validate_by_introspection(
            authorization_header, self.configuration.metadata, credentials
        )