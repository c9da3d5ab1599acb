"""
Offline verification of signed access tokens.
"""

import time
from typing import Any, Callable, Dict, Tuple

from cryptography.hazmat.primitives import serialization
from jose import jws, jwt
from jose.constants import ALGORITHMS
from jose.exceptions import JOSEError

from ..jwks.client import SigningKey
from ..shared.errors import (
    InactiveTokenError,
    IssuerMismatchError,
    SignatureError,
    TokenParseError,
)
from ..shared.logging import get_logger

ClaimSet = Dict[str, Any]
Clock = Callable[[], float]

RSA_ALGORITHMS = [ALGORITHMS.RS256, ALGORITHMS.RS384, ALGORITHMS.RS512]

logger = get_logger("oidc.local_verifier")


class LocalTokenVerifier:
    """Verifies signature, issuer and validity window of a signed JWT.

    Holds no state besides the clock, so one instance can be shared by any
    number of concurrent callers.
    """

    def __init__(self, clock: Clock = time.time):
        self.clock = clock

    def verify(self, raw_token: str, signing_key: SigningKey, expected_issuer: str) -> ClaimSet:
        """Verify ``raw_token`` and return its claims.

        Checks run in a fixed order and the first failure is raised:
        structure, signature, issuer, then ``nbf <= now < exp``.
        """
        header, claims = _parse_signed_token(raw_token)

        try:
            jws.verify(raw_token, _to_pem(signing_key), algorithms=RSA_ALGORITHMS)
        except JOSEError as exc:
            raise SignatureError("Wrong token signature", details={"alg": header.get("alg")}) from exc

        issuer = claims.get("iss")
        if issuer != expected_issuer:
            raise IssuerMismatchError(
                "Token has wrong issuer",
                details={"expected": expected_issuer, "actual": issuer}
            )

        if not self.is_active(claims):
            raise InactiveTokenError("Token isn't active")

        logger.debug("Token verified locally", sub=claims.get("sub"))
        return claims

    def is_active(self, claims: ClaimSet) -> bool:
        """True when the current instant lies in ``[nbf, exp)``."""
        expires_at = claims.get("exp")
        not_before = claims.get("nbf")
        if not (_is_numeric(expires_at) and _is_numeric(not_before)):
            return False

        now = self.clock()
        return not_before <= now < expires_at


def verify_access_token(
    raw_token: str,
    signing_key: SigningKey,
    expected_issuer: str,
    *,
    clock: Clock = time.time,
) -> ClaimSet:
    """Functional form of ``LocalTokenVerifier.verify``."""
    return LocalTokenVerifier(clock).verify(raw_token, signing_key, expected_issuer)


def _parse_signed_token(raw_token: str) -> Tuple[Dict[str, Any], ClaimSet]:
    try:
        header = jwt.get_unverified_header(raw_token)
        claims = jwt.get_unverified_claims(raw_token)
    except JOSEError as exc:
        raise TokenParseError(f"Malformed access token: {exc}") from exc
    return header, dict(claims)


def _to_pem(signing_key: SigningKey) -> str:
    return signing_key.public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode("ascii")


def _is_numeric(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
