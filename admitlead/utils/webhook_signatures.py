"""
Webhook shared-secret validation for Tally form webhooks.

Tally forwards a static secret either as `Authorization: Bearer <secret>` or
verbatim in `x-tally-signature`. Either header carrying the configured
secret authenticates the call.

When no secret is configured for an endpoint the check always passes. This
leaves the endpoint open; the app logs a warning
for it at startup.
"""
import hashlib
import hmac
import logging
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

AUTHORIZATION_HEADER = "authorization"
SIGNATURE_HEADER = "x-tally-signature"
BEARER_PREFIX = "Bearer "


def _matches(expected: str, provided: Optional[str]) -> bool:
    if not provided:
        return False
    return hmac.compare_digest(expected.encode("utf-8"), provided.encode("utf-8"))


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token of a `Bearer <token>` header, or None for any other scheme."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    return authorization[len(BEARER_PREFIX):]


def validate_shared_secret(secret: str, headers: Mapping[str, str]) -> bool:
    """
    Check request headers against the configured shared secret.
    Returns True if no secret is configured (open endpoint).
    """
    if not secret:
        return True

    authorization = headers.get(AUTHORIZATION_HEADER)
    if _matches(secret, extract_bearer_token(authorization)):
        return True
    if _matches(secret, headers.get(SIGNATURE_HEADER)):
        return True

    logger.warning(
        "Webhook secret mismatch (authorization=%s signature=%s)",
        "present" if authorization else "absent",
        "present" if headers.get(SIGNATURE_HEADER) else "absent",
    )
    return False


def compute_payload_hash(body: bytes) -> str:
    """Compute SHA-256 hash of raw payload for log correlation."""
    return hashlib.sha256(body).hexdigest()
