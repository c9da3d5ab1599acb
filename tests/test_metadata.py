"""
Unit tests for provider metadata discovery and manual construction.
"""

import httpx
import pytest
from pydantic import ValidationError

from oidc_token_validator.discovery.metadata import (
    ProviderMetadata,
    build_metadata_manually,
    join_uri,
    parse_discovery_document,
    resolve_metadata_from_discovery,
)
from oidc_token_validator.shared.errors import (
    ConnectivityError,
    DiscoveryError,
    TokenValidationError,
)

from token_helpers import ISSUER, json_response, mock_http_client, refuse_connection


class TestJoinUri:
    """Test cases for join_uri."""

    @pytest.mark.parametrize(
        "base, path",
        [
            (ISSUER, "protocol/openid-connect/certs"),
            (ISSUER + "/", "protocol/openid-connect/certs"),
            (ISSUER, "/protocol/openid-connect/certs"),
            (ISSUER + "/", "/protocol/openid-connect/certs"),
        ],
    )
    def test_single_separator(self, base, path):
        """Separators are neither lost nor duplicated."""
        assert join_uri(base, path) == ISSUER + "/protocol/openid-connect/certs"

    def test_base_without_path(self):
        """Test joining against a bare host."""
        assert (
            join_uri("https://idp.example.com", ".well-known/openid-configuration")
            == "https://idp.example.com/.well-known/openid-configuration"
        )

    def test_empty_path_returns_base(self):
        """Test empty path keeps the base URI."""
        assert join_uri(ISSUER, "") == ISSUER

    def test_relative_base_rejected(self):
        """Test relative base URIs are rejected."""
        with pytest.raises(DiscoveryError):
            join_uri("realms/demo", "protocol/openid-connect/certs")


class TestManualMetadata:
    """Test cases for build_metadata_manually."""

    def test_build_metadata_manually(self):
        """Test manual metadata without introspection endpoint."""
        metadata = build_metadata_manually(
            ISSUER,
            "protocol/openid-connect/auth",
            "protocol/openid-connect/token",
            "protocol/openid-connect/certs",
        )

        assert metadata.issuer == ISSUER
        assert metadata.authorization_endpoint == ISSUER + "/protocol/openid-connect/auth"
        assert metadata.token_endpoint == ISSUER + "/protocol/openid-connect/token"
        assert metadata.jwks_uri == ISSUER + "/protocol/openid-connect/certs"
        assert metadata.introspection_endpoint is None
        assert metadata.subject_types_supported == ["public"]

    def test_build_metadata_with_introspection(self):
        """Test manual metadata with introspection endpoint."""
        metadata = build_metadata_manually(
            ISSUER, "auth", "token", "certs", "token/introspect"
        )

        assert metadata.introspection_endpoint == ISSUER + "/token/introspect"

    def test_metadata_is_immutable(self):
        """Test metadata cannot be modified after construction."""
        metadata = build_metadata_manually(ISSUER, "auth", "token", "certs")

        with pytest.raises(ValidationError):
            metadata.issuer = "http://evil.example.com"


class TestDiscovery:
    """Test cases for resolve_metadata_from_discovery."""

    @pytest.fixture
    def discovery_document(self):
        """Keycloak-like discovery document."""
        return {
            "issuer": ISSUER,
            "authorization_endpoint": ISSUER + "/protocol/openid-connect/auth",
            "token_endpoint": ISSUER + "/protocol/openid-connect/token",
            "introspection_endpoint": ISSUER + "/protocol/openid-connect/token/introspect",
            "userinfo_endpoint": ISSUER + "/protocol/openid-connect/userinfo",
            "jwks_uri": ISSUER + "/protocol/openid-connect/certs",
            "subject_types_supported": ["public", "pairwise"],
            "response_types_supported": ["code"],
            "id_token_signing_alg_values_supported": ["RS256"],
        }

    def test_discovery_success(self, discovery_document):
        """Test successful metadata discovery."""
        requested = []

        def handler(request):
            requested.append(str(request.url))
            return json_response(discovery_document)

        metadata = resolve_metadata_from_discovery(
            ISSUER, ".well-known/openid-configuration", http_client=mock_http_client(handler)
        )

        assert requested == [ISSUER + "/.well-known/openid-configuration"]
        assert metadata.issuer == ISSUER
        assert metadata.jwks_uri == discovery_document["jwks_uri"]
        assert metadata.introspection_endpoint == discovery_document["introspection_endpoint"]
        assert metadata.subject_types_supported == ["public", "pairwise"]
        # Unknown fields are kept
        assert metadata.model_extra["response_types_supported"] == ["code"]

    def test_discovery_invalid_json(self):
        """Test discovery with a body that is not JSON."""
        client = mock_http_client(lambda request: httpx.Response(200, text="<html>login</html>"))

        with pytest.raises(DiscoveryError):
            resolve_metadata_from_discovery(ISSUER, http_client=client)

    def test_discovery_missing_jwks_uri(self, discovery_document):
        """Test discovery document without jwks_uri."""
        del discovery_document["jwks_uri"]
        client = mock_http_client(lambda request: json_response(discovery_document))

        with pytest.raises(DiscoveryError) as exc_info:
            resolve_metadata_from_discovery(ISSUER, http_client=client)

        assert isinstance(exc_info.value, TokenValidationError)

    def test_discovery_relative_endpoint(self, discovery_document):
        """Test discovery document with a relative endpoint."""
        discovery_document["token_endpoint"] = "/protocol/openid-connect/token"

        with pytest.raises(DiscoveryError):
            parse_discovery_document(discovery_document)

    def test_discovery_not_an_object(self):
        """Test discovery document that is a JSON array."""
        with pytest.raises(DiscoveryError):
            parse_discovery_document(["issuer"])

    def test_discovery_http_error(self):
        """Test discovery endpoint answering 404."""
        client = mock_http_client(lambda request: json_response({"error": "not found"}, 404))

        with pytest.raises(DiscoveryError) as exc_info:
            resolve_metadata_from_discovery(ISSUER, http_client=client)

        assert exc_info.value.details["status_code"] == 404

    def test_discovery_connection_refused(self):
        """Test discovery against an unreachable provider."""
        with pytest.raises(ConnectivityError) as exc_info:
            resolve_metadata_from_discovery(ISSUER, http_client=mock_http_client(refuse_connection))

        assert exc_info.value.provider == ISSUER + "/.well-known/openid-configuration"
        assert "Connection refused" in exc_info.value.cause

    def test_metadata_model_requires_issuer(self):
        """Test ProviderMetadata validation."""
        with pytest.raises(ValidationError):
            ProviderMetadata(jwks_uri=ISSUER + "/certs")
