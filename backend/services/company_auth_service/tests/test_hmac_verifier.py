"""
Tests for callback canonicalization and HMAC verification.
"""

import hashlib
import hmac

import pytest

from services.company_auth_service.services.hmac_verifier import (
    HmacVerifier,
    canonicalize,
    encode_uri_component,
)

SECRET = "test-client-secret-0123456789abcdef"

PARAMS = {
    "code": "abc123",
    "company_id": "co_1",
    "redirect_to": "https://app.example.com/done",
    "timestamp": "1700000000",
}


class TestCanonicalize:
    """Tests for the canonical string."""

    def test_sorted_and_encoded(self):
        assert canonicalize(PARAMS) == (
            "code=abc123&company_id=co_1"
            "&redirect_to=https%3A%2F%2Fapp.example.com%2Fdone"
            "&timestamp=1700000000"
        )

    def test_extra_fields_ignored(self):
        assert canonicalize({**PARAMS, "hmac": "x", "foo": "bar"}) == canonicalize(PARAMS)

    def test_missing_field_is_empty(self):
        params = {k: v for k, v in PARAMS.items() if k != "redirect_to"}
        assert "&redirect_to=&" in canonicalize(params)

    def test_encode_uri_component_rules(self):
        """Test that the encoding matches JavaScript encodeURIComponent."""
        assert encode_uri_component("a b") == "a%20b"
        assert encode_uri_component("!~*'()-_.") == "!~*'()-_."
        assert encode_uri_component("a/b?c=d&e") == "a%2Fb%3Fc%3Dd%26e"
        assert encode_uri_component("é") == "%C3%A9"


class TestHmacVerifier:
    """Tests for sign/verify."""

    def test_known_vector(self, verifier):
        expected = hmac.new(
            SECRET.encode(), canonicalize(PARAMS).encode(), hashlib.sha256
        ).hexdigest()
        assert verifier.sign(PARAMS) == expected

    def test_signature_is_lowercase_hex(self, verifier):
        signature = verifier.sign(PARAMS)
        assert len(signature) == 64
        assert signature == signature.lower()
        int(signature, 16)

    def test_round_trip(self, verifier):
        assert verifier.verify(PARAMS, verifier.sign(PARAMS)) is True

    @pytest.mark.parametrize("field", ["code", "company_id", "redirect_to", "timestamp"])
    def test_mutated_param_fails(self, verifier, field):
        signature = verifier.sign(PARAMS)
        mutated = dict(PARAMS)
        mutated[field] = mutated[field][:-1] + chr(ord(mutated[field][-1]) ^ 1)
        assert verifier.verify(mutated, signature) is False

    @pytest.mark.parametrize("position", [0, 31, 63])
    def test_mutated_signature_fails(self, verifier, position):
        signature = verifier.sign(PARAMS)
        flipped = "0" if signature[position] != "0" else "1"
        mutated = signature[:position] + flipped + signature[position + 1:]
        assert verifier.verify(PARAMS, mutated) is False

    @pytest.mark.parametrize(
        "signature",
        [None, "", "zz", "not-hex-at-all", "g" * 64, "é" * 64, "0" * 63, "0" * 65],
    )
    def test_malformed_signature_returns_false(self, verifier, signature):
        assert verifier.verify(PARAMS, signature) is False

    def test_uppercase_signature_rejected(self, verifier):
        signature = verifier.sign(PARAMS)
        assert signature != signature.upper()
        assert verifier.verify(PARAMS, signature.upper()) is False

    def test_other_secret_fails(self, verifier):
        other = HmacVerifier("another-secret")
        assert verifier.verify(PARAMS, other.sign(PARAMS)) is False
