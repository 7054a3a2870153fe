"""HMAC-SHA256 signature check for Hospitable webhooks."""

from __future__ import annotations

import hashlib
import hmac
from typing import Mapping, Optional

# Header names Hospitable (and relays in front of it) have used for the signature
SIGNATURE_HEADERS: tuple[str, ...] = (
    "x-webhook-signature",
    "x-signature",
    "x-hospitable-signature",
)


def compute_signature(raw_body: bytes, secret: str) -> str:
    """Return the hex HMAC-SHA256 of ``raw_body`` keyed with ``secret``."""
    return hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).hexdigest()


def find_signature(headers: Mapping[str, str]) -> Optional[str]:
    """Return the first non-empty signature header, matched case-insensitively."""
    lowered = {k.lower(): v for k, v in headers.items()}
    for name in SIGNATURE_HEADERS:
        value = lowered.get(name)
        if value:
            return value
    return None


def verify_signature(raw_body: bytes, signature: Optional[str], secret: str) -> bool:
    """
    Check a webhook signature in constant time.

    Args:
        raw_body: Request body exactly as received
        signature: Hex signature from the request headers, if any
        secret: Shared secret; empty means verification is disabled

    Returns:
        True when no secret is configured or the signature matches
    """
    if not secret:
        return True
    if not signature:
        return False

    expected = compute_signature(raw_body, secret)
    return hmac.compare_digest(signature.strip().encode("utf-8"), expected.encode("utf-8"))
