"""
Admin Request Signing Module

Ed25519 verification of detached signatures over proxied admin requests.
The HP Admin public key is loaded once from the HPOS state file.
"""

from hpos_admin_auth.core.signing.keys import (
    KeyLoadStage,
    KeyStoreError,
    b64decode_unpadded,
    base64_to_public_key,
    generate_keypair,
    load_admin_public_key,
    public_key_to_base64,
)
from hpos_admin_auth.core.signing.verify import (
    HEADER_ADMIN_SIGNATURE,
    HEADER_ORIGINAL_METHOD,
    HEADER_ORIGINAL_URI,
    VerificationError,
    VerificationResult,
    create_canonical_payload,
    sign_request,
    verify,
    verify_signature,
)

__all__ = [
    # Keys
    "KeyLoadStage",
    "KeyStoreError",
    "b64decode_unpadded",
    "base64_to_public_key",
    "generate_keypair",
    "load_admin_public_key",
    "public_key_to_base64",
    # Verification
    "HEADER_ADMIN_SIGNATURE",
    "HEADER_ORIGINAL_METHOD",
    "HEADER_ORIGINAL_URI",
    "VerificationError",
    "VerificationResult",
    "create_canonical_payload",
    "sign_request",
    "verify",
    "verify_signature",
]
