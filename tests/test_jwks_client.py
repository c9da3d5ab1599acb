"""
Unit tests for signing key resolution.
"""

import httpx
import pytest
from cryptography.hazmat.primitives.asymmetric import ec

from oidc_token_validator.discovery.metadata import build_metadata_manually
from oidc_token_validator.jwks.client import (
    JWKSClient,
    resolve_signing_key_from_jwk_set,
    resolve_signing_key_from_string,
    rsa_public_key_from_jwk,
    select_signing_jwk,
)
from oidc_token_validator.shared.errors import (
    ConnectivityError,
    KeyResolutionError,
    TokenValidationError,
)

from token_helpers import (
    ISSUER,
    generate_rsa_key,
    json_response,
    mock_http_client,
    public_key_string,
    public_key_to_jwk,
    refuse_connection,
)


@pytest.fixture(scope="module")
def second_public_key():
    return generate_rsa_key().public_key()


@pytest.fixture
def metadata():
    return build_metadata_manually(
        ISSUER, "protocol/openid-connect/auth", "protocol/openid-connect/token", "protocol/openid-connect/certs"
    )


class TestSelectSigningJwk:
    """Test cases for select_signing_jwk."""

    def test_last_matching_key_wins(self, signing_public_key, second_public_key):
        """Test that the later RSA signing key is selected."""
        first = public_key_to_jwk(signing_public_key, "key-1")
        second = public_key_to_jwk(second_public_key, "key-2")

        assert select_signing_jwk({"keys": [first, second]}) is second

    def test_non_matching_keys_ignored(self, signing_public_key, second_public_key):
        """Test encryption keys and non-RSA keys are skipped."""
        signing = public_key_to_jwk(signing_public_key, "key-1")
        encryption = public_key_to_jwk(second_public_key, "key-enc", use="enc")
        elliptic = {"kty": "EC", "use": "sig", "crv": "P-256", "x": "x", "y": "y", "kid": "ec"}

        assert select_signing_jwk({"keys": [signing, encryption, elliptic]}) is signing

    def test_no_matching_key(self, second_public_key):
        """Test a set without RSA signing keys."""
        encryption = public_key_to_jwk(second_public_key, "key-enc", use="enc")

        with pytest.raises(KeyResolutionError):
            select_signing_jwk({"keys": [encryption]})

    def test_missing_keys_array(self):
        """Test a document without a keys array."""
        with pytest.raises(KeyResolutionError):
            select_signing_jwk({"issuer": ISSUER})

    def test_invalid_modulus(self):
        """Test a JWK whose modulus cannot be decoded."""
        with pytest.raises(KeyResolutionError):
            rsa_public_key_from_jwk({"kty": "RSA", "use": "sig", "e": "AQAB"})


class TestResolveFromJwkSet:
    """Test cases for resolve_signing_key_from_jwk_set."""

    def test_resolve_success(self, metadata, signing_public_key, second_public_key):
        """Test successful key resolution picks the last signing key."""
        jwks = {
            "keys": [
                public_key_to_jwk(signing_public_key, "key-1"),
                public_key_to_jwk(second_public_key, "key-2"),
            ]
        }
        requested = []

        def handler(request):
            requested.append(str(request.url))
            return json_response(jwks)

        key = resolve_signing_key_from_jwk_set(metadata, http_client=mock_http_client(handler))

        assert requested == [ISSUER + "/protocol/openid-connect/certs"]
        assert key.public_numbers() == second_public_key.public_numbers()

    def test_resolve_invalid_json(self, metadata):
        """Test a JWK set body that is not JSON."""
        client = mock_http_client(lambda request: httpx.Response(200, text="not json"))

        with pytest.raises(KeyResolutionError) as exc_info:
            resolve_signing_key_from_jwk_set(metadata, http_client=client)

        assert isinstance(exc_info.value, TokenValidationError)

    def test_resolve_http_error(self, metadata):
        """Test a JWK set endpoint answering 500."""
        client = mock_http_client(lambda request: httpx.Response(500))

        with pytest.raises(KeyResolutionError):
            resolve_signing_key_from_jwk_set(metadata, http_client=client)

    def test_resolve_connection_refused(self, metadata):
        """Test an unreachable JWK set endpoint."""
        with pytest.raises(ConnectivityError) as exc_info:
            resolve_signing_key_from_jwk_set(metadata, http_client=mock_http_client(refuse_connection))

        assert exc_info.value.provider == metadata.jwks_uri

    def test_client_get_jwks(self, signing_public_key):
        """Test JWKSClient returns the raw document."""
        jwks = {"keys": [public_key_to_jwk(signing_public_key, "key-1")]}
        client = JWKSClient("http://mock-keycloak/jwks", mock_http_client(lambda request: json_response(jwks)))

        assert client.get_jwks() == jwks


class TestResolveFromString:
    """Test cases for resolve_signing_key_from_string."""

    def test_resolve_base64_key(self, signing_public_key):
        """Test decoding a base64 X.509 key."""
        key = resolve_signing_key_from_string(public_key_string(signing_public_key))

        assert key.public_numbers() == signing_public_key.public_numbers()

    def test_resolve_pem_armoured_key(self, signing_public_key):
        """Test PEM armour and line breaks are tolerated."""
        body = public_key_string(signing_public_key)
        lines = [body[i:i + 64] for i in range(0, len(body), 64)]
        pem = "-----BEGIN PUBLIC KEY-----\n" + "\n".join(lines) + "\n-----END PUBLIC KEY-----\n"

        key = resolve_signing_key_from_string(pem)

        assert key.public_numbers() == signing_public_key.public_numbers()

    @pytest.mark.parametrize("key_string", ["", "not base64 !!", "AAAA"])
    def test_invalid_key_string(self, key_string):
        """Test garbage key strings."""
        with pytest.raises(KeyResolutionError):
            resolve_signing_key_from_string(key_string)

    def test_non_rsa_key(self):
        """Test an EC key is rejected."""
        ec_key = ec.generate_private_key(ec.SECP256R1()).public_key()

        with pytest.raises(KeyResolutionError):
            resolve_signing_key_from_string(public_key_string(ec_key))
