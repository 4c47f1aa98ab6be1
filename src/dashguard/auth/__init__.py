"""Authentication gate for dashguard."""

from dashguard.auth.credentials import (
    Credentials,
    generate_credentials,
    hash_password,
    verify_password,
)
from dashguard.auth.gate import (
    AuthGate,
    Decision,
    DenyReason,
    GateRequest,
    decide,
    extract_authorization_value,
    is_authentication_required,
    parse_basic_credentials,
    validate_credentials,
)
from dashguard.auth.middleware import BasicAuthMiddleware, is_local_request, use_basic_auth

__all__ = [
    "AuthGate",
    "BasicAuthMiddleware",
    "Credentials",
    "Decision",
    "DenyReason",
    "GateRequest",
    "decide",
    "extract_authorization_value",
    "generate_credentials",
    "hash_password",
    "is_authentication_required",
    "is_local_request",
    "parse_basic_credentials",
    "use_basic_auth",
    "validate_credentials",
    "verify_password",
]
