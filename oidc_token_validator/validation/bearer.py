"""
Bearer token extraction from the ``Authorization`` header.
"""

from typing import Optional

from ..shared.errors import MalformedHeaderError

BEARER_PREFIX = "Bearer "


def extract_access_token(authorization_header: Optional[str]) -> str:
    """Return the raw access token of a ``Bearer <token>`` header value.

    The scheme is matched case-sensitively with a single space separator.
    """
    if not authorization_header:
        raise MalformedHeaderError("Missing Authorization header")

    if not authorization_header.startswith(BEARER_PREFIX):
        raise MalformedHeaderError("Authorization header does not use the Bearer scheme")

    token = authorization_header[len(BEARER_PREFIX):]
    if not token.strip():
        raise MalformedHeaderError("Authorization header contained empty bearer token")
    if any(ch.isspace() for ch in token):
        raise MalformedHeaderError("Bearer token must not contain whitespace")

    return token
