"""
Token validation strategies.

A strategy turns a raw access token into its claims or raises one of the
validator's error types. Callers pick the strategy explicitly.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from ..discovery.metadata import ProviderMetadata
from ..jwks.client import SigningKey
from ..transport import DEFAULT_TIMEOUT
from .introspection import ClientCredentials, IntrospectionClient
from .local_verifier import LocalTokenVerifier


class TokenValidationStrategy(ABC):
    """Validates a raw access token."""

    name: str = "abstract"

    @abstractmethod
    def validate(self, raw_token: str) -> Dict[str, Any]:
        """Return the token's claims.

        Raises:
            TokenValidationError: the token is invalid or inactive.
            ConnectivityError: the identity provider could not be reached.
        """
        ...


class LocalValidationStrategy(TokenValidationStrategy):
    """Offline verification against a known signing key and issuer."""

    name = "local"

    def __init__(self, signing_key: SigningKey, issuer: str,
                 verifier: Optional[LocalTokenVerifier] = None):
        self.signing_key = signing_key
        self.issuer = issuer
        self.verifier = verifier or LocalTokenVerifier()

    def validate(self, raw_token: str) -> Dict[str, Any]:
        return self.verifier.verify(raw_token, self.signing_key, self.issuer)


class IntrospectionValidationStrategy(TokenValidationStrategy):
    """Remote validation at the provider's introspection endpoint."""

    name = "introspection"

    def __init__(self, metadata: ProviderMetadata, credentials: ClientCredentials,
                 http_client: Optional[httpx.Client] = None, timeout: float = DEFAULT_TIMEOUT):
        self.metadata = metadata
        self.credentials = credentials
        self.http_client = http_client
        self.timeout = timeout

    def validate(self, raw_token: str) -> Dict[str, Any]:
        client = IntrospectionClient(self.metadata, self.credentials, self.http_client, self.timeout)
        return client.introspect(raw_token)
