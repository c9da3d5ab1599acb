"""
Token validation entry point.

Both validation strategies are exposed here, and every failure is reported
as either a validation failure or a connectivity failure.
"""

from typing import Optional

import httpx

from ..discovery.metadata import ProviderMetadata
from ..jwks.client import SigningKey
from ..shared.errors import ConnectivityError, TokenValidationError, TokenValidatorException
from ..shared.logging import get_logger
from ..transport import DEFAULT_TIMEOUT
from .bearer import extract_access_token
from .introspection import ClientCredentials
from .local_verifier import LocalTokenVerifier
from .models import FailureKind, ValidationResult
from .strategies import (
    IntrospectionValidationStrategy,
    LocalValidationStrategy,
    TokenValidationStrategy,
)


class TokenValidator:
    """Validates bearer tokens locally or by introspection."""

    def __init__(self, verifier: Optional[LocalTokenVerifier] = None,
                 http_client: Optional[httpx.Client] = None, timeout: float = DEFAULT_TIMEOUT):
        self.verifier = verifier or LocalTokenVerifier()
        self.http_client = http_client
        self.timeout = timeout
        self.logger = get_logger("oidc.validator")

    def validate_locally(self, authorization_header: Optional[str], issuer: str,
                         signing_key: SigningKey) -> ValidationResult:
        """Verify the bearer token offline against ``signing_key`` and ``issuer``."""
        strategy = LocalValidationStrategy(signing_key, issuer, self.verifier)
        return self.validate(authorization_header, strategy)

    def validate_by_introspection(self, authorization_header: Optional[str],
                                  metadata: ProviderMetadata,
                                  credentials: ClientCredentials) -> ValidationResult:
        """Ask the identity provider whether the bearer token is active."""
        strategy = IntrospectionValidationStrategy(metadata, credentials, self.http_client, self.timeout)
        return self.validate(authorization_header, strategy)

    def validate(self, authorization_header: Optional[str],
                 strategy: TokenValidationStrategy) -> ValidationResult:
        """Extract the bearer token and validate it with ``strategy``."""
        try:
            raw_token = extract_access_token(authorization_header)
            claims = strategy.validate(raw_token)

        except ConnectivityError as e:
            self.logger.error("Identity provider unreachable", strategy=strategy.name,
                              provider=e.provider, error=e.cause)
            return ValidationResult.failure(FailureKind.CONNECTIVITY, e)

        except TokenValidationError as e:
            self.logger.warning("Token validation failed", strategy=strategy.name,
                                code=e.code, error=e.message)
            return ValidationResult.failure(FailureKind.VALIDATION, e)

        except Exception as e:
            self.logger.error("Unexpected error during token validation", strategy=strategy.name,
                              error=str(e), exc_type=type(e).__name__)
            return ValidationResult.failure(
                FailureKind.VALIDATION,
                TokenValidatorException("VALIDATION_ERROR", str(e) or type(e).__name__),
            )

        self.logger.info("Token validated", strategy=strategy.name, sub=claims.get("sub"))
        return ValidationResult.success(claims)
