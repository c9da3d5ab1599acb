"""
Signing key resolution for local token verification.

The RSA public key of an identity provider is taken either from its published
JSON Web Key Set or from a base64-encoded X.509 key string supplied in the
relying-party configuration.
"""

import base64
import binascii
from typing import Any, Dict, Optional

import httpx
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from jose.utils import base64_to_long

from ..discovery.metadata import ProviderMetadata
from ..shared.errors import KeyResolutionError
from ..shared.logging import get_logger
from ..transport import client_scope, fetch_json

SigningKey = rsa.RSAPublicKey

logger = get_logger("oidc.jwks")


class JWKSClient:
    """Client for fetching a provider's JWK set and picking its signing key."""

    def __init__(self, jwks_url: str, http_client: Optional[httpx.Client] = None):
        self.jwks_url = jwks_url
        self.http_client = http_client

    def get_jwks(self) -> Dict[str, Any]:
        """Fetch the JWK set document."""
        with client_scope(self.http_client) as client:
            response = fetch_json(client, self.jwks_url)

        if response.is_error:
            raise KeyResolutionError(
                f"JWK set request failed with HTTP {response.status_code}",
                details={"url": self.jwks_url, "status_code": response.status_code}
            )

        try:
            jwks = response.json()
        except ValueError as exc:
            raise KeyResolutionError(
                "JWK set is not valid JSON",
                details={"url": self.jwks_url, "error": str(exc)}
            ) from exc

        if not isinstance(jwks, dict):
            raise KeyResolutionError("JWK set must be a JSON object", details={"url": self.jwks_url})

        logger.debug("JWK set retrieved", keys_count=len(jwks.get("keys") or []))
        return jwks

    def get_signing_key(self) -> SigningKey:
        """Fetch the JWK set and convert its RSA signing key."""
        jwk = select_signing_jwk(self.get_jwks())
        public_key = rsa_public_key_from_jwk(jwk)
        logger.info("Signing key resolved from JWK set", kid=jwk.get("kid"))
        return public_key


def select_signing_jwk(jwks: Dict[str, Any]) -> Dict[str, Any]:
    """Return the RSA signing key of a JWK set.

    When several keys qualify, the last one in document order wins.
    """
    keys = jwks.get("keys")
    if not isinstance(keys, list):
        raise KeyResolutionError("JWK set missing 'keys' array")

    selected: Optional[Dict[str, Any]] = None
    for key in keys:
        if not isinstance(key, dict):
            continue
        if key.get("use") == "sig" and key.get("kty") == "RSA":
            selected = key

    if selected is None:
        raise KeyResolutionError("No RSA signing key found in JWK set")
    return selected


def rsa_public_key_from_jwk(jwk: Dict[str, Any]) -> SigningKey:
    """Build an RSA public key from the modulus and exponent of a JWK."""
    try:
        modulus = base64_to_long(jwk["n"])
        exponent = base64_to_long(jwk["e"])
        return rsa.RSAPublicNumbers(exponent, modulus).public_key()
    except (KeyError, TypeError, ValueError) as exc:
        raise KeyResolutionError(
            "Invalid RSA key in JWK set",
            details={"kid": jwk.get("kid"), "error": str(exc)}
        ) from exc


def resolve_signing_key_from_jwk_set(
    metadata: ProviderMetadata,
    *,
    http_client: Optional[httpx.Client] = None,
) -> SigningKey:
    """Resolve the provider's signing key from the JWK set named in ``metadata``.

    Raises:
        ConnectivityError: the JWK set endpoint could not be reached.
        KeyResolutionError: the document is invalid or holds no RSA signing key.
    """
    logger.debug("Sending HTTP request to retrieve JWK set from identity provider")
    return JWKSClient(metadata.jwks_uri, http_client).get_signing_key()


def resolve_signing_key_from_string(key_string: str) -> SigningKey:
    """Decode a base64 X.509 (SubjectPublicKeyInfo) RSA public key.

    PEM armour lines and embedded whitespace are tolerated.
    """
    body = "".join(
        line.strip()
        for line in (key_string or "").splitlines()
        if line.strip() and not line.strip().startswith("-----")
    )
    if not body:
        raise KeyResolutionError("Public key string is empty")

    try:
        key_bytes = base64.b64decode(body, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise KeyResolutionError("Public key string is not valid base64", details={"error": str(exc)}) from exc

    try:
        public_key = serialization.load_der_public_key(key_bytes)
    except (ValueError, UnsupportedAlgorithm) as exc:
        raise KeyResolutionError("Public key string is not an X.509 public key", details={"error": str(exc)}) from exc

    if not isinstance(public_key, rsa.RSAPublicKey):
        raise KeyResolutionError("Public key is not an RSA key", details={"type": type(public_key).__name__})
    return public_key
