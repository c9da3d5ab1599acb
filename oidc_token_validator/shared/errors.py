"""
Error types for the OIDC token validator.

Callers only ever see two kinds of failure: ``TokenValidationError`` (the
token cannot be accepted) and ``ConnectivityError`` (the identity provider
could not be reached). Everything more specific is a subclass of one of them.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response format."""

    code: str
    message: str
    details: Dict[str, Any] = {}


class TokenValidatorException(Exception):
    """Base exception for the token validator."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            details=self.details
        )


class TokenValidationError(TokenValidatorException):
    """The presented token is invalid, inactive or cannot be verified."""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str = "Token validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(type(self).code, message, details)


class MalformedHeaderError(TokenValidationError):
    """Authorization header is missing or does not carry a bearer token."""

    code = "MALFORMED_HEADER"


class TokenParseError(TokenValidationError):
    """Access token is not a well-formed signed JWT."""

    code = "TOKEN_PARSE_ERROR"


class SignatureError(TokenValidationError):
    """Token signature does not verify against the signing key."""

    code = "SIGNATURE_ERROR"


class IssuerMismatchError(TokenValidationError):
    """Token was issued by a different identity provider."""

    code = "ISSUER_MISMATCH"


class InactiveTokenError(TokenValidationError):
    """Token is expired, not yet valid, or reported inactive by the provider."""

    code = "INACTIVE_TOKEN"


class IntrospectionError(TokenValidationError):
    """Identity provider answered the introspection request with an error object."""

    code = "INTROSPECTION_ERROR"


class KeyResolutionError(TokenValidationError):
    """No usable signing key could be resolved."""

    code = "KEY_RESOLUTION_ERROR"


class DiscoveryError(TokenValidationError):
    """Provider metadata could not be built or parsed."""

    code = "DISCOVERY_ERROR"


class ConnectivityError(TokenValidatorException):
    """Identity provider could not be reached."""

    def __init__(self, provider: str, cause: str, details: Optional[Dict[str, Any]] = None):
        self.provider = provider
        self.cause = cause
        merged = {"provider": provider, "cause": cause}
        merged.update(details or {})
        super().__init__(
            "CONNECTIVITY_ERROR",
            f"Could not connect to the identity provider {provider} - Error: {cause}",
            merged
        )


class StorageError(TokenValidatorException):
    """Storage backend errors."""

    def __init__(self, message: str = "Storage error", details: Optional[Dict[str, Any]] = None):
        super().__init__("STORAGE_ERROR", message, details)
