"""
Result models for token validation.
"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel

from ..shared.errors import ConnectivityError, TokenValidationError, TokenValidatorException


class FailureKind(str, Enum):
    """Externally visible failure kinds."""
    VALIDATION = "validation"
    CONNECTIVITY = "connectivity"


class ValidationResult(BaseModel):
    """Outcome of validating one access token."""
    valid: bool
    claims: Optional[Dict[str, Any]] = None
    error_kind: Optional[FailureKind] = None
    error: Optional[str] = None
    details: Dict[str, Any] = {}

    @classmethod
    def success(cls, claims: Dict[str, Any]) -> "ValidationResult":
        return cls(valid=True, claims=claims)

    @classmethod
    def failure(cls, kind: FailureKind, exc: TokenValidatorException) -> "ValidationResult":
        details = dict(exc.details)
        details.setdefault("code", exc.code)
        return cls(valid=False, error_kind=kind, error=exc.message, details=details)

    @property
    def is_connectivity_failure(self) -> bool:
        return self.error_kind is FailureKind.CONNECTIVITY

    def claims_or_raise(self) -> Dict[str, Any]:
        """Return the claims, or raise the failure as its public exception type."""
        if self.valid:
            return self.claims or {}

        if self.error_kind is FailureKind.CONNECTIVITY:
            raise ConnectivityError(
                self.details.get("provider", ""),
                self.details.get("cause", self.error or ""),
            )
        raise TokenValidationError(self.error or "Token validation failed", details=self.details)
