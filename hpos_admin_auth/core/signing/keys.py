"""
Ed25519 Key Management

Loads the HP Admin public key from the HPOS state document and provides
the base64 helpers shared by key and signature decoding.
Uses the cryptography library for all cryptographic operations.
"""

import base64
import json
import logging
from enum import Enum
from pathlib import Path
from typing import Tuple, Union

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

logger = logging.getLogger(__name__)


PUBLIC_KEY_LENGTH = 32

# Location of the admin key inside the HPOS state document
DEFAULT_ADMIN_PUBLIC_KEY_FIELD = "v1.admin_public_key"


class KeyLoadStage(Enum):
    """Stage of key loading at which a failure occurred."""
    READ = "read"
    PARSE = "parse"
    FIELD = "field"
    DECODE = "decode"


class KeyStoreError(RuntimeError):
    """Raised when the HP Admin public key cannot be loaded."""

    def __init__(self, stage: KeyLoadStage, message: str):
        super().__init__(f"[{stage.value}] {message}")
        self.stage = stage


def b64decode_unpadded(value: str) -> bytes:
    """
    Decode unpadded standard-alphabet base64.

    Padding and any character outside the base64 alphabet (including
    whitespace) are rejected rather than skipped.

    Raises:
        ValueError: If the value is not valid unpadded base64
    """
    if "=" in value:
        raise ValueError("Padding is not allowed in unpadded base64")
    value += "=" * (-len(value) % 4)
    return base64.b64decode(value, validate=True)


def generate_keypair() -> Tuple[Ed25519PrivateKey, Ed25519PublicKey]:
    """
    Generate a new Ed25519 keypair.

    Returns:
        Tuple of (private_key, public_key)
    """
    private_key = Ed25519PrivateKey.generate()
    return private_key, private_key.public_key()


def public_key_to_base64(public_key: Ed25519PublicKey) -> str:
    """
    Serialize a public key to unpadded base64 (43 characters).
    """
    raw_bytes = public_key.public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )
    return base64.b64encode(raw_bytes).decode("ascii").rstrip("=")


def base64_to_public_key(b64_key: str) -> Ed25519PublicKey:
    """
    Deserialize a base64-encoded public key string.

    Args:
        b64_key: Unpadded base64-encoded raw public key

    Returns:
        Ed25519 public key object

    Raises:
        ValueError: If the key is invalid or wrong length
    """
    try:
        raw_bytes = b64decode_unpadded(b64_key)
        if len(raw_bytes) != PUBLIC_KEY_LENGTH:
            raise ValueError(
                f"Invalid public key length: {len(raw_bytes)} bytes "
                f"(expected {PUBLIC_KEY_LENGTH})"
            )
        return Ed25519PublicKey.from_public_bytes(raw_bytes)
    except Exception as e:
        raise ValueError(f"Invalid public key: {e}") from e


def _lookup_field(document: object, field: str) -> object:
    """Walk a dotted field path through nested JSON objects."""
    value = document
    for part in field.split("."):
        if not isinstance(value, dict) or part not in value:
            raise KeyError(part)
        value = value[part]
    return value


def load_admin_public_key(
    path: Union[str, Path],
    field: str = DEFAULT_ADMIN_PUBLIC_KEY_FIELD,
) -> Ed25519PublicKey:
    """
    Load the HP Admin public key from an HPOS state file.

    Called once at startup. There is no retry: any failure here is a
    deployment problem and must stop the service from serving.

    Args:
        path: Path to the JSON state document
        field: Dotted path of the base64 public key inside the document

    Returns:
        Ed25519 public key object

    Raises:
        KeyStoreError: With the stage (read, parse, field, decode) that failed
    """
    path = Path(path)

    try:
        contents = path.read_bytes()
    except OSError as e:
        raise KeyStoreError(
            KeyLoadStage.READ,
            f"Cannot read HPOS state file {path}: {e}",
        ) from e

    try:
        document = json.loads(contents)
    except ValueError as e:
        raise KeyStoreError(
            KeyLoadStage.PARSE,
            f"HPOS state file {path} is not valid JSON: {e}",
        ) from e

    try:
        b64_key = _lookup_field(document, field)
    except KeyError as e:
        raise KeyStoreError(
            KeyLoadStage.FIELD,
            f"HPOS state file {path} has no '{field}' field (missing '{e.args[0]}')",
        ) from e

    if not isinstance(b64_key, str):
        raise KeyStoreError(
            KeyLoadStage.FIELD,
            f"Field '{field}' in {path} is not a string",
        )

    try:
        public_key = base64_to_public_key(b64_key)
    except ValueError as e:
        raise KeyStoreError(
            KeyLoadStage.DECODE,
            f"HP Admin public key in {path} seems to be corrupted: {e}",
        ) from e

    logger.info(f"Loaded HP Admin public key from {path}")
    return public_key
