"""Tests for HMAC-SHA256 payload signing."""

import hashlib
import hmac
from unittest.mock import patch

from courier.webhooks.signing import sign_payload, verify_signature

BODY = '{"id":"dlv_1","type":"lead.updated","data":{"id":"L1"}}'


class TestSignPayload:
    """Tests for sign_payload."""

    def test_no_secret_returns_none(self) -> None:
        assert sign_payload(None, BODY) is None

    def test_empty_secret_returns_none(self) -> None:
        assert sign_payload("", BODY) is None

    def test_matches_independent_hmac(self) -> None:
        expected = hmac.new(b"abc", BODY.encode("utf-8"), hashlib.sha256).hexdigest()
        assert sign_payload("abc", BODY) == expected

    def test_lowercase_hex(self) -> None:
        signature = sign_payload("abc", BODY)
        assert signature is not None
        assert len(signature) == 64
        assert signature == signature.lower()
        int(signature, 16)

    def test_deterministic(self) -> None:
        assert sign_payload("abc", BODY) == sign_payload("abc", BODY)

    def test_different_body_different_signature(self) -> None:
        assert sign_payload("abc", BODY) != sign_payload("abc", BODY + " ")

    def test_different_secret_different_signature(self) -> None:
        assert sign_payload("abc", BODY) != sign_payload("abd", BODY)

    def test_backend_failure_returns_none(self) -> None:
        """A crypto failure must not propagate."""
        with patch("courier.webhooks.signing.hmac.new", side_effect=RuntimeError("boom")):
            assert sign_payload("abc", BODY) is None


class TestVerifySignature:
    """Tests for verify_signature."""

    def test_valid_signature(self) -> None:
        signature = sign_payload("abc", BODY)
        assert signature is not None
        assert verify_signature(BODY, "abc", signature)

    def test_upper_case_signature_accepted(self) -> None:
        signature = sign_payload("abc", BODY)
        assert signature is not None
        assert verify_signature(BODY, "abc", signature.upper())

    def test_tampered_body_rejected(self) -> None:
        signature = sign_payload("abc", BODY)
        assert signature is not None
        assert not verify_signature(BODY.replace("L1", "L2"), "abc", signature)

    def test_wrong_secret_rejected(self) -> None:
        signature = sign_payload("abc", BODY)
        assert signature is not None
        assert not verify_signature(BODY, "other", signature)

    def test_empty_secret_rejected(self) -> None:
        assert not verify_signature(BODY, "", "deadbeef")
