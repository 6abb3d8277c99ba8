"""
HMAC signing and verification of OAuth callback parameters.

The authorization server signs the callback query with the shared client
secret. The canonical string is built from exactly four parameters
(code, company_id, redirect_to, timestamp): keys sorted, keys and values
percent-encoded the way the provider's JavaScript ``encodeURIComponent`` does,
joined as ``key=value`` pairs with ``&``. The signature is HMAC-SHA256 over the
UTF-8 bytes of that string, rendered as lowercase hex.

Example:
    ```python
    verifier = HmacVerifier(secret="client-secret")
    params = {
        "code": "abc123",
        "company_id": "co_1",
        "redirect_to": "https://app.example.com/done",
        "timestamp": "1700000000",
    }
    signature = verifier.sign(params)
    assert verifier.verify(params, signature)
    ```
"""

from collections.abc import Mapping
import hashlib
import hmac
from urllib.parse import quote

SIGNED_FIELDS = ("code", "company_id", "redirect_to", "timestamp")

# Characters encodeURIComponent leaves untouched besides alphanumerics and "-_."
_URI_COMPONENT_SAFE = "!~*'()"


def encode_uri_component(value: str) -> str:
    return quote(value, safe=_URI_COMPONENT_SAFE)


def canonicalize(params: Mapping[str, str | None]) -> str:
    """
    Build the canonical string for the signed callback fields.

    Fields other than SIGNED_FIELDS are ignored. A missing field canonicalizes
    as an empty value.
    """
    return "&".join(
        f"{encode_uri_component(key)}={encode_uri_component(params.get(key) or '')}"
        for key in sorted(SIGNED_FIELDS)
    )


class HmacVerifier:
    """Pure signer/verifier keyed by the process-wide client secret."""

    def __init__(self, secret: str) -> None:
        self._key = secret.encode("utf-8")

    def sign(self, params: Mapping[str, str | None]) -> str:
        message = canonicalize(params).encode("utf-8")
        return hmac.new(self._key, message, hashlib.sha256).hexdigest()

    def verify(self, params: Mapping[str, str | None], signature: str | None) -> bool:
        """
        Check ``signature`` against the recomputed one in constant time.

        Returns False, never raises, for a missing signature, non-ASCII or
        malformed hex, or a length mismatch.
        """
        if not isinstance(signature, str) or not signature:
            return False
        expected = self.sign(params).encode("ascii")
        try:
            received = signature.encode("ascii")
        except UnicodeEncodeError:
            return False
        if len(received) != len(expected):
            return False
        # Lowercase hex only: an uppercased digit is a different signature
        return hmac.compare_digest(expected, received)
