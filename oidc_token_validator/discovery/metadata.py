"""
Identity provider metadata.

Metadata is either fetched from the provider's OpenID Connect discovery
document or assembled manually from endpoint paths relative to the provider
URI.

See http://openid.net/specs/openid-connect-discovery-1_0.html#ProviderConfig
"""

from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from ..shared.errors import DiscoveryError
from ..shared.logging import get_logger
from ..transport import client_scope, fetch_json

logger = get_logger("oidc.discovery")

DEFAULT_DISCOVERY_PATH = ".well-known/openid-configuration"

_ENDPOINT_FIELDS = (
    "issuer",
    "authorization_endpoint",
    "token_endpoint",
    "introspection_endpoint",
    "jwks_uri",
    "userinfo_endpoint",
    "end_session_endpoint",
)


class ProviderMetadata(BaseModel):
    """Endpoints and capabilities of an OpenID Connect identity provider."""

    model_config = ConfigDict(frozen=True, extra="allow")

    issuer: str
    jwks_uri: str
    authorization_endpoint: Optional[str] = None
    token_endpoint: Optional[str] = None
    introspection_endpoint: Optional[str] = None
    userinfo_endpoint: Optional[str] = None
    end_session_endpoint: Optional[str] = None
    subject_types_supported: List[str] = ["public"]
    id_token_signing_alg_values_supported: Optional[List[str]] = None

    @field_validator(*_ENDPOINT_FIELDS)
    @classmethod
    def _require_absolute_uri(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        try:
            url = httpx.URL(value)
        except httpx.InvalidURL as exc:
            raise ValueError(f"invalid URI {value!r}: {exc}") from exc
        if not url.is_absolute_url:
            raise ValueError(f"URI must be absolute: {value!r}")
        return value


def join_uri(base_uri: str, path: str) -> str:
    """Append ``path`` to the path of ``base_uri`` with exactly one separator."""
    try:
        url = httpx.URL(base_uri)
    except httpx.InvalidURL as exc:
        raise DiscoveryError(f"Invalid provider URI: {base_uri}") from exc
    if not url.is_absolute_url:
        raise DiscoveryError(f"Provider URI must be absolute: {base_uri}")

    segment = (path or "").lstrip("/")
    if not segment:
        return base_uri

    joined_path = f"{url.path.rstrip('/')}/{segment}"
    return str(url.copy_with(path=joined_path))


def resolve_metadata_from_discovery(
    base_uri: str,
    discovery_path: str = DEFAULT_DISCOVERY_PATH,
    *,
    http_client: Optional[httpx.Client] = None,
) -> ProviderMetadata:
    """Fetch and parse the provider's discovery document.

    Raises:
        ConnectivityError: the provider could not be reached.
        DiscoveryError: the response is not a valid discovery document.
    """
    metadata_uri = join_uri(base_uri, discovery_path)
    logger.debug("Sending HTTP request to retrieve metadata from identity provider", url=metadata_uri)

    with client_scope(http_client) as client:
        response = fetch_json(client, metadata_uri)

    if response.is_error:
        raise DiscoveryError(
            f"Discovery request failed with HTTP {response.status_code}",
            details={"url": metadata_uri, "status_code": response.status_code}
        )

    try:
        document = response.json()
    except ValueError as exc:
        raise DiscoveryError(
            "Discovery document is not valid JSON",
            details={"url": metadata_uri, "error": str(exc)}
        ) from exc

    return parse_discovery_document(document, source=metadata_uri)


def parse_discovery_document(document: Any, source: str = "") -> ProviderMetadata:
    """Build metadata from an already decoded discovery document."""
    if not isinstance(document, dict):
        raise DiscoveryError("Discovery document must be a JSON object", details={"url": source})

    try:
        metadata = ProviderMetadata.model_validate(document)
    except ValidationError as exc:
        raise DiscoveryError(
            "Invalid discovery document",
            details={"url": source, "errors": exc.errors(include_url=False, include_context=False)}
        ) from exc

    logger.info("Provider metadata discovered", issuer=metadata.issuer)
    return metadata


def build_metadata_manually(
    base_uri: str,
    authorization_path: str,
    token_path: str,
    jwk_set_path: str,
    introspection_path: Optional[str] = None,
) -> ProviderMetadata:
    """Assemble metadata from endpoint paths relative to ``base_uri``.

    No network call is made. The issuer is ``base_uri`` itself and the
    subject type defaults to ``public``.
    """
    fields: Dict[str, Any] = {
        "issuer": base_uri,
        "authorization_endpoint": join_uri(base_uri, authorization_path),
        "token_endpoint": join_uri(base_uri, token_path),
        "jwks_uri": join_uri(base_uri, jwk_set_path),
        "subject_types_supported": ["public"],
    }
    if introspection_path:
        fields["introspection_endpoint"] = join_uri(base_uri, introspection_path)

    return ProviderMetadata(**fields)
