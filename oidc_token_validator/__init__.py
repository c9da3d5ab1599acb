"""
OAuth2 / OpenID Connect access token validation for relying parties.

Tokens are validated either locally, by verifying the JWT signature, issuer
and validity window against the provider's RSA key, or remotely through the
provider's RFC 7662 introspection endpoint.
"""

from .discovery.metadata import (
    ProviderMetadata,
    build_metadata_manually,
    join_uri,
    resolve_metadata_from_discovery,
)
from .jwks.client import resolve_signing_key_from_jwk_set, resolve_signing_key_from_string
from .provider import ProviderConfiguration, ProviderTokenValidator
from .shared.errors import ConnectivityError, TokenValidationError
from .validation.bearer import extract_access_token
from .validation.introspection import ClientCredentials, introspect
from .validation.local_verifier import LocalTokenVerifier, verify_access_token
from .validation.models import FailureKind, ValidationResult
from .validation.token_validator import TokenValidator

__version__ = "1.0.0"

__all__ = [
    "ClientCredentials",
    "ConnectivityError",
    "FailureKind",
    "LocalTokenVerifier",
    "ProviderConfiguration",
    "ProviderMetadata",
    "ProviderTokenValidator",
    "TokenValidationError",
    "TokenValidator",
    "ValidationResult",
    "build_metadata_manually",
    "extract_access_token",
    "introspect",
    "join_uri",
    "resolve_metadata_from_discovery",
    "resolve_signing_key_from_jwk_set",
    "resolve_signing_key_from_string",
    "verify_access_token",
]
