"""
Signature Verification

Verifies detached Ed25519 signatures over admin requests forwarded by the
reverse proxy.

Canonical Payload Format:
    {"method":"<method>","uri":"<uri>","body":"<body>"}

Where:
    - method: HTTP method, lower-cased
    - uri: Original request target as forwarded in X-Original-URI
    - body: Request body as UTF-8 text

The payload is compact JSON with keys in exactly this order. Non-ASCII text
is emitted as raw UTF-8 and only quotes, backslashes and control characters
are escaped. Signers must produce the same bytes.

Signatures travel as unpadded standard base64; a padded signature is
rejected as malformed.
"""

import base64
import json
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

from hpos_admin_auth.core.signing.keys import b64decode_unpadded


SIGNATURE_LENGTH = 64

HEADER_ORIGINAL_URI = "X-Original-URI"
HEADER_ORIGINAL_METHOD = "X-Original-Method"
HEADER_ADMIN_SIGNATURE = "X-Hpos-Admin-Signature"


class VerificationError(Enum):
    """Enumeration of possible verification failures."""
    INVALID_SIGNATURE_FORMAT = "invalid_signature_format"
    INVALID_SIGNATURE_LENGTH = "invalid_signature_length"
    SIGNATURE_VERIFICATION_FAILED = "signature_verification_failed"


@dataclass(frozen=True)
class VerificationResult:
    """
    Result of signature verification.

    Attributes:
        success: Whether the signature is valid for the payload
        error: Failure kind if verification failed
    """
    success: bool
    error: Optional[VerificationError] = None

    @classmethod
    def ok(cls) -> "VerificationResult":
        return cls(success=True)

    @classmethod
    def fail(cls, error: VerificationError) -> "VerificationResult":
        return cls(success=False, error=error)


def create_canonical_payload(
    method: str,
    uri: str,
    body: Union[bytes, str] = b"",
) -> bytes:
    """
    Create the canonical payload bytes for signing/verification.

    Args:
        method: HTTP method, any case
        uri: Original request URI
        body: Request body; bytes must be valid UTF-8

    Returns:
        UTF-8 encoded canonical JSON

    Raises:
        UnicodeDecodeError: If body bytes are not valid UTF-8

    Example:
        >>> create_canonical_payload("POST", "/admin/reset", b'{"x":1}')
        b'{"method":"post","uri":"/admin/reset","body":"{\\\\"x\\\\":1}"}'
    """
    if isinstance(body, bytes):
        body = body.decode("utf-8")

    payload = {
        "method": method.lower(),
        "uri": uri,
        "body": body,
    }
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def verify_signature(
    payload: bytes,
    signature_b64: str,
    public_key: Ed25519PublicKey,
) -> VerificationResult:
    """
    Verify a detached signature over a canonical payload.

    Never raises and never logs: malformed input is just a failed result.

    Args:
        payload: Canonical payload bytes
        signature_b64: Unpadded standard base64 signature (from header)
        public_key: HP Admin Ed25519 public key

    Returns:
        VerificationResult with success status and failure kind
    """
    try:
        signature_bytes = b64decode_unpadded(signature_b64)
    except ValueError:
        return VerificationResult.fail(VerificationError.INVALID_SIGNATURE_FORMAT)

    if len(signature_bytes) != SIGNATURE_LENGTH:
        return VerificationResult.fail(VerificationError.INVALID_SIGNATURE_LENGTH)

    try:
        public_key.verify(signature_bytes, payload)
    except InvalidSignature:
        return VerificationResult.fail(VerificationError.SIGNATURE_VERIFICATION_FAILED)

    return VerificationResult.ok()


def verify(payload: bytes, signature_b64: str, public_key: Ed25519PublicKey) -> bool:
    """Return True only if the signature is valid for the payload."""
    return verify_signature(payload, signature_b64, public_key).success


def sign_request(
    private_key: Ed25519PrivateKey,
    method: str,
    uri: str,
    body: Union[bytes, str] = b"",
) -> dict:
    """
    Sign a request (for testing and client implementation reference).

    Returns:
        Dict with headers to add to the proxied request:
        {
            "X-Original-URI": "...",
            "X-Hpos-Admin-Signature": "...",
        }
    """
    payload = create_canonical_payload(method, uri, body)
    signature = private_key.sign(payload)
    signature_b64 = base64.b64encode(signature).decode("ascii").rstrip("=")

    return {
        HEADER_ORIGINAL_URI: uri,
        HEADER_ADMIN_SIGNATURE: signature_b64,
    }
