"""
CSRF token issue and verification.

A token is ``<issued_at>.<nonce>.<signature>`` where the signature is
HMAC-SHA256 over principal, issue time and nonce. Tokens are stateless and
expire after ``max_age`` seconds.
"""

import hashlib
import hmac
import secrets
import time
from typing import Optional

DEFAULT_MAX_AGE = 3600


def _sign(principal: str, issued_at: int, nonce: str, secret: str) -> str:
    payload = f"{principal}.{issued_at}.{nonce}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()


def issue_csrf_token(principal: str, secret: str, now: Optional[int] = None) -> str:
    issued_at = int(time.time()) if now is None else now
    nonce = secrets.token_hex(8)
    return f"{issued_at}.{nonce}.{_sign(principal, issued_at, nonce, secret)}"


def verify_csrf_token(
    token: str,
    principal: str,
    secret: str,
    max_age: int = DEFAULT_MAX_AGE,
    now: Optional[int] = None,
) -> bool:
    """
    Check a token against ``principal`` and ``secret``.

    Returns False for malformed, forged, future-dated or expired tokens.
    """
    if not token:
        return False
    issued_raw, _, rest = token.partition(".")
    nonce, _, signature = rest.partition(".")
    if not issued_raw.isdigit() or not nonce or not signature:
        return False

    issued_at = int(issued_raw)
    current = int(time.time()) if now is None else now
    if issued_at > current or current - issued_at > max_age:
        return False

    return hmac.compare_digest(_sign(principal, issued_at, nonce, secret), signature)
