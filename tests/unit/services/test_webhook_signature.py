import hashlib
import hmac

from str_access.services.webhook_signature import (
    compute_signature,
    find_signature,
    verify_signature,
)

BODY = b'{"data":{"code":"5039895833"}}'


def test_compute_signature_is_hex_hmac_sha256() -> None:
    expected = hmac.new(b"secret", BODY, hashlib.sha256).hexdigest()
    assert compute_signature(BODY, "secret") == expected


def test_no_secret_accepts_everything() -> None:
    assert verify_signature(BODY, None, "") is True
    assert verify_signature(BODY, "garbage", "") is True


def test_secret_requires_matching_signature() -> None:
    good = compute_signature(BODY, "secret")

    assert verify_signature(BODY, good, "secret") is True
    assert verify_signature(BODY, None, "secret") is False
    assert verify_signature(BODY, "deadbeef", "secret") is False
    assert verify_signature(BODY + b" ", good, "secret") is False


def test_find_signature_checks_known_headers_in_order() -> None:
    assert find_signature({"X-Hospitable-Signature": "c"}) == "c"
    assert find_signature({"x-signature": "b", "X-Hospitable-Signature": "c"}) == "b"
    assert find_signature({"X-Webhook-Signature": "a", "x-signature": "b"}) == "a"
    assert find_signature({"Content-Type": "application/json"}) is None
