"""
Security policy.

A single decision function over the request and a configuration-derived
security mode. The mode is fixed when the application is built.
"""

import base64
import binascii
import secrets
from dataclasses import dataclass
from typing import Optional, Tuple

from http_source.domain.value_objects import (
    AuthDecision,
    AuthOutcome,
    InboundRequest,
    SecurityMode,
)
from http_source.infrastructure.security.csrf import DEFAULT_MAX_AGE, verify_csrf_token


STATE_CHANGING_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


@dataclass(frozen=True)
class SecurityConfig:
    """
    Immutable view of the security settings.

    Attributes:
        mode: DISABLED, ENABLED_NO_CSRF or ENABLED_WITH_CSRF
        user_name: Basic-auth user
        password: Basic-auth password
        exempt_paths: Paths that never require authentication
        csrf_secret: Key used to derive CSRF tokens
        csrf_header_name: Header carrying the CSRF token
        csrf_token_max_age: Seconds a CSRF token stays valid
    """

    mode: SecurityMode
    user_name: str = "user"
    password: str = ""
    exempt_paths: Tuple[str, ...] = ("/health",)
    csrf_secret: str = ""
    csrf_header_name: str = "X-CSRF-TOKEN"
    csrf_token_max_age: int = DEFAULT_MAX_AGE

    @classmethod
    def from_settings(cls, settings) -> "SecurityConfig":
        return cls(
            mode=settings.security_mode,
            user_name=settings.security_user_name,
            password=settings.security_user_password,
            exempt_paths=tuple(settings.security_exempt_paths),
            csrf_secret=settings.csrf_secret,
            csrf_header_name=settings.csrf_header_name,
            csrf_token_max_age=settings.csrf_token_max_age,
        )


def parse_basic_auth(value: Optional[str]) -> Optional[Tuple[str, str]]:
    """
    Extract ``(user, password)`` from an Authorization header.

    Returns None when the header is absent, not Basic, or malformed.
    """
    if not value:
        return None
    scheme, _, encoded = value.strip().partition(" ")
    if scheme.lower() != "basic" or not encoded:
        return None
    try:
        decoded = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    user, sep, password = decoded.partition(":")
    if not sep:
        return None
    return user, password


def _credentials_match(user: str, password: str, config: SecurityConfig) -> bool:
    user_ok = secrets.compare_digest(user.encode("utf-8"), config.user_name.encode("utf-8"))
    password_ok = secrets.compare_digest(password.encode("utf-8"), config.password.encode("utf-8"))
    return user_ok and password_ok


def authorize(request: InboundRequest, config: SecurityConfig) -> AuthDecision:
    """
    Decide whether a request may proceed.

    - DISABLED: always allowed
    - exempt paths: always allowed
    - ENABLED_*: valid Basic credentials required
    - ENABLED_WITH_CSRF: state-changing methods also need a valid CSRF token
    """
    if config.mode is SecurityMode.DISABLED:
        return AuthDecision(AuthOutcome.ALLOWED)

    if request.path in config.exempt_paths:
        return AuthDecision(AuthOutcome.ALLOWED)

    # Basic credentials
    credentials = parse_basic_auth(request.header("authorization"))
    if credentials is None:
        return AuthDecision(AuthOutcome.MISSING_CREDENTIALS)

    user, password = credentials
    if not _credentials_match(user, password, config):
        return AuthDecision(AuthOutcome.BAD_CREDENTIALS)

    # CSRF token on state-changing methods
    if (
        config.mode is SecurityMode.ENABLED_WITH_CSRF
        and request.method.upper() in STATE_CHANGING_METHODS
    ):
        token = request.header(config.csrf_header_name) or ""
        if not verify_csrf_token(
            token, user, config.csrf_secret, max_age=config.csrf_token_max_age
        ):
            return AuthDecision(AuthOutcome.INVALID_CSRF_TOKEN, principal=user)

    return AuthDecision(AuthOutcome.ALLOWED, principal=user)
