"""
Shared building blocks for the OIDC token validator.

- config: Relying-party settings via pydantic-settings
- logging: Structured logging with structlog
- errors: Canonical error types and responses

Do not import from the validation packages into shared/.
"""
