"""
OAuth 2.0 Token Introspection (RFC 7662).

The identity provider is asked directly whether a token is active. A provider
that cannot be reached is reported as ``ConnectivityError``; every answer the
provider does give, including malformed ones, is a validation outcome.
"""

import base64
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union
from urllib.parse import quote_plus

import httpx

from ..discovery.metadata import ProviderMetadata
from ..shared.errors import (
    ConnectivityError,
    InactiveTokenError,
    IntrospectionError,
    TokenValidationError,
)
from ..shared.logging import get_logger
from ..transport import DEFAULT_TIMEOUT, client_scope

logger = get_logger("oidc.introspection")

JSON_CONTENT_TYPE = "application/json"


@dataclass(frozen=True)
class ClientCredentials:
    """Client id and secret used for HTTP Basic client authentication."""

    client_id: str
    client_secret: str = field(repr=False)

    def authorization_header(self) -> str:
        """Build the ``client_secret_basic`` Authorization header value.

        Both parts are form-urlencoded before encoding, as RFC 6749 2.3.1 requires.
        """
        credentials = f"{quote_plus(self.client_id)}:{quote_plus(self.client_secret)}"
        encoded = base64.b64encode(credentials.encode("utf-8")).decode("ascii")
        return f"Basic {encoded}"


@dataclass(frozen=True)
class IntrospectionSuccess:
    """Successful introspection response; ``claims`` always holds a boolean ``active``."""

    claims: Dict[str, Any]

    @property
    def active(self) -> bool:
        return self.claims["active"]


@dataclass(frozen=True)
class IntrospectionFailure:
    """Introspection error object returned by the provider."""

    error: Optional[str]
    description: Optional[str]
    status_code: int

    @property
    def message(self) -> str:
        return self.description or self.error or f"Introspection failed with HTTP {self.status_code}"


IntrospectionOutcome = Union[IntrospectionSuccess, IntrospectionFailure]


class IntrospectionClient:
    """Sends introspection requests to one provider's introspection endpoint."""

    def __init__(self, metadata: ProviderMetadata, credentials: ClientCredentials,
                 http_client: Optional[httpx.Client] = None, timeout: float = DEFAULT_TIMEOUT):
        if not metadata.introspection_endpoint:
            raise TokenValidationError(
                "Provider metadata has no introspection endpoint",
                details={"issuer": metadata.issuer}
            )
        self.introspection_url = metadata.introspection_endpoint
        self.credentials = credentials
        self.http_client = http_client
        self.timeout = timeout

    def build_request(self, client: httpx.Client, raw_token: str) -> httpx.Request:
        """Build the introspection POST for ``raw_token``."""
        return client.build_request(
            "POST",
            self.introspection_url,
            data={"token": raw_token},
            headers={
                "Authorization": self.credentials.authorization_header(),
                "Accept": JSON_CONTENT_TYPE,
            },
        )

    def send(self, raw_token: str) -> IntrospectionOutcome:
        """Send the introspection request and parse the provider's answer."""
        with client_scope(self.http_client, self.timeout) as client:
            request = self.build_request(client, raw_token)
            logger.debug("Sending token introspection HTTP request to identity provider",
                         url=self.introspection_url)
            try:
                response = client.send(request)
            except httpx.TransportError as exc:
                logger.error("Could not connect to identity provider for token introspection",
                             url=self.introspection_url, error=str(exc))
                raise ConnectivityError(self.introspection_url, str(exc)) from exc

        return parse_introspection_response(response)

    def introspect(self, raw_token: str) -> Dict[str, Any]:
        """Return the claims of an active token."""
        outcome = self.send(raw_token)

        if isinstance(outcome, IntrospectionFailure):
            logger.debug("Received an error response from introspection request",
                         error=outcome.error, status_code=outcome.status_code)
            raise IntrospectionError(
                outcome.message,
                details={"error": outcome.error, "status_code": outcome.status_code}
            )

        if not outcome.active:
            logger.debug("Token validation with introspection failed. Token isn't active")
            raise InactiveTokenError("Token is not active")

        return outcome.claims


def parse_introspection_response(response: httpx.Response) -> IntrospectionOutcome:
    """Interpret an introspection HTTP response.

    The body is always read as JSON whatever the Content-Type says, since
    providers omit or mislabel it on introspection responses.
    """
    if response.status_code == httpx.codes.OK:
        body = _decode_json(response)
        active = body.get("active") if isinstance(body, dict) else None
        if not isinstance(active, bool):
            raise TokenValidationError(
                "Invalid introspection response: missing or non-boolean 'active'",
                details={"status_code": response.status_code}
            )
        return IntrospectionSuccess(claims=body)

    try:
        body = _decode_json(response)
    except TokenValidationError:
        body = {}
    if not isinstance(body, dict):
        body = {}
    error = body.get("error")
    description = body.get("error_description")
    return IntrospectionFailure(
        error=error if isinstance(error, str) else None,
        description=description if isinstance(description, str) else None,
        status_code=response.status_code,
    )


def introspect(
    raw_token: str,
    metadata: ProviderMetadata,
    credentials: ClientCredentials,
    *,
    http_client: Optional[httpx.Client] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> Dict[str, Any]:
    """Validate ``raw_token`` at the provider's introspection endpoint.

    Raises:
        ConnectivityError: the provider could not be reached.
        TokenValidationError: the token is inactive or the provider rejected it.
    """
    return IntrospectionClient(metadata, credentials, http_client, timeout).introspect(raw_token)


def _decode_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise TokenValidationError(
            "Introspection response is not valid JSON",
            details={"status_code": response.status_code, "error": str(exc)}
        ) from exc
