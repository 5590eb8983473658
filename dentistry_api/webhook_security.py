"""
Webhook Security Module

Signature verification for incoming Cal.com webhooks:
- Constant-time signature comparison
- Verification against the raw request body
"""

import hashlib
import hmac
import logging

from fastapi import Request

from .shared.errors import ApiError

logger = logging.getLogger(__name__)

CALCOM_SIGNATURE_HEADER = "X-Cal-Signature-256"


def constant_time_compare(a: str, b: str) -> bool:
    """
    Compare two strings in constant time to prevent timing attacks.
    Uses hmac.compare_digest which is designed for this purpose.
    """
    if not a or not b:
        return False
    return hmac.compare_digest(a, b)


def compute_hmac_sha256(secret: str, payload: bytes) -> str:
    """Compute HMAC-SHA256 signature of payload"""
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()


async def verify_calcom_webhook(
    request: Request, secret: str, raise_on_failure: bool = True
) -> tuple[bool, bytes]:
    """
    Verify Cal.com webhook signature.

    Cal.com uses:
    - Header: 'X-Cal-Signature-256' (hex HMAC-SHA256 of the raw body)

    Args:
        request: FastAPI request object
        secret: Secret configured on the Cal.com webhook
        raise_on_failure: If True, raises ApiError on failure

    Returns:
        Tuple of (is_valid, raw_body)
    """
    raw_body = await request.body()
    signature_header = request.headers.get(CALCOM_SIGNATURE_HEADER, "")

    logger.debug("📥 Cal.com webhook received")

    if not signature_header:
        logger.warning("🚫 Cal.com webhook missing signature header")
        if raise_on_failure:
            raise ApiError(401, "Missing webhook signature")
        return False, raw_body

    expected_signature = compute_hmac_sha256(secret, raw_body)

    if not constant_time_compare(expected_signature, signature_header.strip().lower()):
        logger.warning("🚫 Cal.com webhook signature mismatch")
        if raise_on_failure:
            raise ApiError(401, "Invalid webhook signature")
        return False, raw_body

    logger.debug("✅ Cal.com webhook signature verified")
    return True, raw_body
