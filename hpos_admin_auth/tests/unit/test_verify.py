"""
Tests for canonical payloads and signature verification.
"""
import base64
import os

import pytest

from hpos_admin_auth.core.signing.keys import generate_keypair
from hpos_admin_auth.core.signing.verify import (
    HEADER_ADMIN_SIGNATURE,
    HEADER_ORIGINAL_URI,
    VerificationError,
    create_canonical_payload,
    sign_request,
    verify,
    verify_signature,
)


def _sign(private_key, payload: bytes) -> str:
    return base64.b64encode(private_key.sign(payload)).decode("ascii").rstrip("=")


class TestCanonicalPayload:
    """Test canonical payload construction"""

    def test_reference_payload(self):
        payload = create_canonical_payload("POST", "/admin/reset", b'{"x":1}')
        assert payload == b'{"method":"post","uri":"/admin/reset","body":"{\\"x\\":1}"}'

    def test_method_is_lower_cased(self):
        assert create_canonical_payload("POST", "/a", b"") == create_canonical_payload("post", "/a", b"")
        assert create_canonical_payload("Get", "/a", b"") == create_canonical_payload("GET", "/a", b"")

    def test_empty_body(self):
        assert create_canonical_payload("GET", "/api/status") == b'{"method":"get","uri":"/api/status","body":""}'

    def test_str_and_bytes_body_agree(self):
        assert create_canonical_payload("PUT", "/x", "café") == create_canonical_payload("PUT", "/x", "café".encode("utf-8"))

    def test_non_ascii_kept_as_utf8(self):
        payload = create_canonical_payload("PUT", "/x", "café".encode("utf-8"))
        assert "café".encode("utf-8") in payload
        assert b"\\u00e9" not in payload

    def test_slash_not_escaped(self):
        payload = create_canonical_payload("GET", "/a/b?c=d/e", b"")
        assert b"\\/" not in payload

    def test_control_characters_escaped(self):
        payload = create_canonical_payload("POST", "/x", b"line1\nline2\ttab\x01")
        assert payload == b'{"method":"post","uri":"/x","body":"line1\\nline2\\ttab\\u0001"}'

    def test_uri_kept_verbatim(self):
        uri = "/api/v1/config?Key=Value&x=%20"
        payload = create_canonical_payload("GET", uri, b"")
        assert uri.encode("utf-8") in payload

    def test_invalid_utf8_body_raises(self):
        with pytest.raises(UnicodeDecodeError):
            create_canonical_payload("POST", "/x", b"\xff\xfe")


class TestVerifySignature:
    """Test detached signature verification"""

    def test_valid_signature(self, private_key, public_key):
        payload = create_canonical_payload("POST", "/admin/reset", b'{"x":1}')
        result = verify_signature(payload, _sign(private_key, payload), public_key)
        assert result.success
        assert result.error is None

    def test_padded_signature_rejected(self, private_key, public_key):
        payload = create_canonical_payload("GET", "/", b"")
        padded = base64.b64encode(private_key.sign(payload)).decode("ascii")
        assert padded.endswith("==")
        result = verify_signature(payload, padded, public_key)
        assert result.error == VerificationError.INVALID_SIGNATURE_FORMAT

    def test_mutated_payload(self, private_key, public_key):
        payload = create_canonical_payload("POST", "/admin/reset", b'{"x":1}')
        signature = _sign(private_key, payload)
        mutated = create_canonical_payload("POST", "/admin/reset", b'{"x":2}')
        result = verify_signature(mutated, signature, public_key)
        assert not result.success
        assert result.error == VerificationError.SIGNATURE_VERIFICATION_FAILED

    def test_wrong_key(self, private_key):
        _, other_public_key = generate_keypair()
        payload = create_canonical_payload("GET", "/", b"")
        assert not verify(payload, _sign(private_key, payload), other_public_key)

    def test_malformed_base64(self, public_key):
        result = verify_signature(b"payload", "not$valid$base64!", public_key)
        assert not result.success
        assert result.error == VerificationError.INVALID_SIGNATURE_FORMAT

    def test_non_ascii_signature_text(self, public_key):
        result = verify_signature(b"payload", "éééé", public_key)
        assert result.error == VerificationError.INVALID_SIGNATURE_FORMAT

    def test_wrong_length(self, private_key, public_key):
        payload = create_canonical_payload("GET", "/", b"")
        truncated = base64.b64encode(private_key.sign(payload)[:63]).decode("ascii")
        result = verify_signature(payload, truncated, public_key)
        assert result.error == VerificationError.INVALID_SIGNATURE_LENGTH

    def test_empty_signature(self, public_key):
        result = verify_signature(b"payload", "", public_key)
        assert result.error == VerificationError.INVALID_SIGNATURE_LENGTH

    def test_random_signature(self, public_key):
        payload = create_canonical_payload("GET", "/", b"")
        random_signature = base64.b64encode(os.urandom(64)).decode("ascii").rstrip("=")
        assert not verify(payload, random_signature, public_key)


class TestSignRequest:
    """Test the reference signer"""

    def test_headers(self, private_key, public_key):
        headers = sign_request(private_key, "POST", "/admin/reset", b'{"x":1}')
        assert headers[HEADER_ORIGINAL_URI] == "/admin/reset"
        assert not headers[HEADER_ADMIN_SIGNATURE].endswith("=")

        payload = create_canonical_payload("post", "/admin/reset", b'{"x":1}')
        assert verify(payload, headers[HEADER_ADMIN_SIGNATURE], public_key)
