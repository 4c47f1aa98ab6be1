"""HTTP Basic authentication gate for a protected path prefix.

The gate is a pure decision pipeline over an immutable ``GateConfig`` and a
read-only view of one request:

1. Decide whether authentication applies (configuration, local bypass, prefix).
2. Extract the first ``Authorization`` header value.
3. Parse the ``Basic`` credentials.
4. Compare them with the configured username and secret.

Every failure becomes a ``Decision`` with a ``DenyReason``. Reasons are for
logs only and never reach the client.
"""

import base64
import binascii
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from starlette.datastructures import Headers

from dashguard.auth.credentials import Credentials, constant_time_equals, verify_password
from dashguard.config import GateConfig, SecretMode

logger = logging.getLogger(__name__)

BASIC_SCHEME = "basic "

PasswordVerifier = Callable[[str, str], bool]


class DenyReason(str, Enum):
    """Why a request was refused."""

    HEADER_MISSING = "missing header"
    HEADER_MALFORMED = "malformed header"
    CREDENTIAL_MISMATCH = "invalid credentials"


@dataclass(frozen=True)
class Decision:
    """Outcome of the gate for one request."""

    allowed: bool
    reason: DenyReason | None = None
    authenticated: bool = False

    @classmethod
    def allow(cls, authenticated: bool = False) -> "Decision":
        return cls(allowed=True, authenticated=authenticated)

    @classmethod
    def deny(cls, reason: DenyReason) -> "Decision":
        return cls(allowed=False, reason=reason)


@dataclass(frozen=True)
class GateRequest:
    """The parts of an incoming request the gate reads."""

    path: str
    headers: Headers
    is_local: bool = False


def equals_ignore_case(left: str, right: str) -> bool:
    """Ordinal comparison using per-character case mapping.

    Unlike ``casefold`` this never expands a character, so ``straße`` and
    ``STRASSE`` stay different.
    """
    if len(left) != len(right):
        return False
    return all(a == b or a.upper() == b.upper() for a, b in zip(left, right))


def path_is_under(path: str, prefix: str) -> bool:
    """Segment-aware, case-insensitive prefix match.

    ``/hangfire`` matches ``/hangfire`` and ``/hangfire/jobs`` but not
    ``/hangfireX``.
    """
    base = prefix.rstrip("/")
    if not base:
        return True

    if not equals_ignore_case(path[: len(base)], base):
        return False
    return len(path) == len(base) or path[len(base)] == "/"


def is_authentication_required(config: GateConfig, request: GateRequest) -> bool:
    """Check whether this request must present credentials."""
    if not config.auth_enabled:
        return False

    if config.local_bypass_enabled and request.is_local:
        return False

    return path_is_under(request.path, config.protected_path_prefix)


def extract_authorization_value(request: GateRequest) -> str | None:
    """Return the first ``Authorization`` header value, or None if absent or blank."""
    # Headers.get returns the first value and never joins repeated headers
    value = request.headers.get("authorization")
    if value is None or not value.strip():
        return None
    return value


def parse_basic_credentials(header_value: str) -> Credentials | None:
    """Parse ``Basic <base64(username:password)>`` into credentials.

    Returns:
        The credentials, or None if the value is not a well-formed Basic
        credential. Decoding faults never escape as exceptions.
    """
    if header_value[: len(BASIC_SCHEME)].lower() != BASIC_SCHEME:
        return None

    encoded = header_value[len(BASIC_SCHEME) :].strip()
    if not encoded:
        return None

    try:
        raw = base64.b64decode(encoded, validate=True)
        decoded = raw.decode("utf-8")
    except (binascii.Error, ValueError):
        # UnicodeDecodeError is a ValueError
        return None

    username, sep, password = decoded.partition(":")
    if not sep or not username:
        return None

    return Credentials(username=username, password=password)


def validate_credentials(
    config: GateConfig,
    credentials: Credentials,
    verifier: PasswordVerifier = verify_password,
) -> bool:
    """Check presented credentials against the configured identity.

    Both the username and the password check always run so a wrong username
    costs the same as a wrong password.
    """
    if config.username is None or config.credential_secret is None:
        return False

    username_ok = equals_ignore_case(credentials.username, config.username)

    if config.secret_mode is SecretMode.HASHED:
        try:
            password_ok = bool(verifier(credentials.password, config.credential_secret))
        except Exception as e:
            # Verifier faults must not reach the host; the record is never logged
            logger.warning("Password verification failed: %s", type(e).__name__)
            password_ok = False
    else:
        password_ok = constant_time_equals(credentials.password, config.credential_secret)

    return username_ok & password_ok


def decide(
    config: GateConfig,
    request: GateRequest,
    verifier: PasswordVerifier = verify_password,
) -> Decision:
    """Run the full gate pipeline for one request."""
    if not is_authentication_required(config, request):
        return Decision.allow()

    value = extract_authorization_value(request)
    if value is None:
        return Decision.deny(DenyReason.HEADER_MISSING)

    credentials = parse_basic_credentials(value)
    if credentials is None:
        return Decision.deny(DenyReason.HEADER_MALFORMED)

    if not validate_credentials(config, credentials, verifier):
        return Decision.deny(DenyReason.CREDENTIAL_MISMATCH)

    return Decision.allow(authenticated=True)


class AuthGate:
    """Binds a gate configuration and password verifier, and logs outcomes."""

    def __init__(self, config: GateConfig, verifier: PasswordVerifier = verify_password) -> None:
        self.config = config
        self.verifier = verifier

    def requires_authentication(self, request: GateRequest) -> bool:
        return is_authentication_required(self.config, request)

    def decide(self, request: GateRequest) -> Decision:
        decision = decide(self.config, request, self.verifier)

        if decision.reason is not None:
            logger.warning("Dashboard authentication denied: %s", decision.reason.value)
        elif decision.authenticated:
            logger.debug("Authentication successful")

        return decision
