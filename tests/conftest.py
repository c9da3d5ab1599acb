"""
Shared fixtures for the token validator tests.
"""

import pytest

from token_helpers import ISSUER, NOW, generate_rsa_key


@pytest.fixture(scope="session")
def signing_private_key():
    """Private key of the mock identity provider."""
    return generate_rsa_key()


@pytest.fixture(scope="session")
def signing_public_key(signing_private_key):
    return signing_private_key.public_key()


@pytest.fixture(scope="session")
def foreign_private_key():
    """Private key the identity provider does not know."""
    return generate_rsa_key()


@pytest.fixture
def valid_claims():
    """Claims of a token that is active at ``NOW``."""
    return {
        "iss": ISSUER,
        "sub": "user1",
        "preferred_username": "john.doe",
        "email": "john.doe@example.com",
        "realm_access": {"roles": ["user", "analyst"]},
        "nbf": NOW - 60,
        "iat": NOW - 60,
        "exp": NOW + 300,
    }


@pytest.fixture
def fixed_clock():
    return lambda: NOW
