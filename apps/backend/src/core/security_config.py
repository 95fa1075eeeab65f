"""Security configuration constants for the Blueprint Architect API.

This module centralizes security-related configuration including:
- Keys that should be sanitized from structured logs
- Which error response fields are exposed per environment
"""

# Keys redacted from structured log payloads. Matching is substring based,
# so "gemini_api_key" and "x-api-key" are both covered by "api_key"/"api-key".
SENSITIVE_KEYS: set[str] = {
    # Credentials for the upstream LLM providers and the API itself
    "password",
    "secret",
    "token",
    "authorization",
    "api_key",
    "api-key",
    "bearer",
    "connection_string",
    "cookie",
    "session_id",
    # Free text supplied by users may contain personal data
    "source_text",
    "project_idea",
    "email",
    "phone",
}

# Production error responses only carry these fields
PRODUCTION_ERROR_FIELDS: set[str] = {
    "correlation_id",
    "type",
}

# Development adds diagnostics on top of the production fields
DEVELOPMENT_ERROR_FIELDS: set[str] = PRODUCTION_ERROR_FIELDS | {
    "details",
    "traceback",
    "exception_type",
    "validation_errors",
}


def get_allowed_error_fields(environment: str) -> set[str]:
    """Get allowed error response fields based on environment."""
    if environment == "production":
        return PRODUCTION_ERROR_FIELDS.copy()
    return DEVELOPMENT_ERROR_FIELDS.copy()


def is_sensitive_key(key: str) -> bool:
    """Return True if ``key`` names a value that must be redacted from logs."""
    key_lower = key.lower()
    return any(sensitive in key_lower for sensitive in SENSITIVE_KEYS)
