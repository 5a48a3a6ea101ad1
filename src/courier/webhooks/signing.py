"""HMAC-SHA256 signing of webhook bodies.

The signature covers the exact serialized body string, so a receiver
verifies by recomputing the HMAC over the raw bytes it received.
"""

from __future__ import annotations

import hashlib
import hmac

from courier.logging import get_logger

logger = get_logger(__name__)


def sign_payload(secret: str | None, body: str) -> str | None:
    """Compute the lowercase hex HMAC-SHA256 of ``body``.

    Args:
        secret: Endpoint signing secret. Empty or None means unsigned.
        body: Exact JSON string that will be sent.

    Returns:
        Hex digest, or None when unsigned or when signing fails. A
        signing failure never blocks delivery.
    """
    if not secret:
        return None
    try:
        return hmac.new(
            key=secret.encode("utf-8"),
            msg=body.encode("utf-8"),
            digestmod=hashlib.sha256,
        ).hexdigest()
    except Exception as e:
        logger.warning("Webhook signing failed, sending unsigned", error=str(e))
        return None


def verify_signature(body: str, secret: str, signature: str) -> bool:
    """Verify a signature the way a receiver would.

    Args:
        body: Raw body string as received.
        secret: Shared secret.
        signature: Value of the ``X-Webhook-Signature`` header.

    Returns:
        True if the signature matches.
    """
    expected = sign_payload(secret, body)
    if expected is None:
        return False
    return hmac.compare_digest(expected, signature.lower())
