"""
Admin Signature Gateway

Answers the reverse proxy's auth_request subrequests.

Checks (in order, first failure denies):
1. Path is `/` (any other path is denied by the catch-all route)
2. X-Original-URI header present
3. Body is valid UTF-8
4. X-Hpos-Admin-Signature header present
5. Signature valid for the canonical payload

Every denial is the same empty 401 so callers learn nothing about which
check failed. Both routes accept every HTTP method, including ones
FastAPI does not know about (TRACE, PROPFIND, ...).

Header values arrive latin-1 decoded. A URI forwarded as raw UTF-8 bytes
therefore canonicalizes differently from what was signed and is denied;
the proxy is expected to forward the percent-encoded request target.
"""

import logging
import uuid
from typing import Mapping

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey
from fastapi import Request, Response, status
from starlette.routing import Route

from hpos_admin_auth.core.signing.verify import (
    HEADER_ADMIN_SIGNATURE,
    HEADER_ORIGINAL_METHOD,
    HEADER_ORIGINAL_URI,
    create_canonical_payload,
    verify_signature,
)

logger = logging.getLogger(__name__)
error_logger = logging.getLogger("api.errors")


def get_admin_public_key(request: Request) -> Ed25519PublicKey:
    """HP Admin key loaded at startup."""
    return request.app.state.admin_public_key


def decision_response(accepted: bool) -> Response:
    """Empty response; the status code is the whole answer."""
    if accepted:
        return Response(status_code=status.HTTP_200_OK)
    return Response(status_code=status.HTTP_401_UNAUTHORIZED)


def authorize_request(
    method: str,
    headers: Mapping[str, str],
    body: bytes,
    public_key: Ed25519PublicKey,
) -> bool:
    """
    Decide whether a proxied admin request carries a valid signature.

    Args:
        method: Method of the subrequest; overridden by X-Original-Method
        headers: Subrequest headers (case-insensitive mapping)
        body: Raw subrequest body
        public_key: HP Admin public key

    Returns:
        True to accept, False to deny
    """
    original_uri = headers.get(HEADER_ORIGINAL_URI)
    if original_uri is None:
        logger.warning(f"Denied: missing {HEADER_ORIGINAL_URI} header")
        return False

    method = headers.get(HEADER_ORIGINAL_METHOD) or method

    try:
        payload = create_canonical_payload(method, original_uri, body)
    except UnicodeDecodeError:
        logger.warning(f"Denied: body of {method} {original_uri} is not valid UTF-8")
        return False

    signature = headers.get(HEADER_ADMIN_SIGNATURE)
    if signature is None:
        logger.warning(f"Denied: missing {HEADER_ADMIN_SIGNATURE} header for {method} {original_uri}")
        return False

    result = verify_signature(payload, signature, public_key)
    if not result.success:
        logger.warning(f"Denied: {result.error.value} for {method} {original_uri}")
        return False

    logger.debug(f"Accepted admin request {method} {original_uri}")
    return True


async def authorize(request: Request) -> Response:
    """
    Verify the HP Admin signature of the proxied request.

    Unexpected errors are logged under an error id and denied here, so they
    never reach the server's error middleware.
    """
    try:
        body = await request.body()
        accepted = authorize_request(
            request.method,
            request.headers,
            body,
            get_admin_public_key(request),
        )
    except Exception as e:
        error_id = str(uuid.uuid4())
        error_logger.error(
            f"Error {error_id}: {type(e).__name__} while verifying {request.method} request",
            exc_info=True,
        )
        accepted = False
    return decision_response(accepted)


async def deny_unknown_path(request: Request) -> Response:
    """Unknown paths look exactly like a failed verification."""
    logger.warning(f"Denied: unknown path {request.url.path}")
    return decision_response(False)


# methods=None: every method reaches the handler instead of a 405
routes = [
    Route("/", authorize, methods=None),
    Route("/{path:path}", deny_unknown_path, methods=None, include_in_schema=False),
]
