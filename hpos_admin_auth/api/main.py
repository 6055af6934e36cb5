"""
FastAPI application for the HPOS Admin auth sidecar.

The HP Admin public key is loaded by the entry point before the app is
built, and handed to `create_app`; the app never serves without one.
"""
import logging
import sys

import uvicorn
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey
from fastapi import FastAPI
from pydantic import ValidationError

from hpos_admin_auth import __version__
from hpos_admin_auth.api import gateway
from hpos_admin_auth.core.config import get_settings
from hpos_admin_auth.core.signing.keys import KeyStoreError, load_admin_public_key

logger = logging.getLogger(__name__)


def create_app(admin_public_key: Ed25519PublicKey) -> FastAPI:
    """
    Build the auth app around an already-loaded HP Admin public key.

    Docs and OpenAPI routes are disabled: every path except `/` answers 401,
    whatever the method.
    """
    app = FastAPI(
        title="HPOS Admin Auth",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.admin_public_key = admin_public_key

    app.router.routes.extend(gateway.routes)
    return app


def main():
    """Entry point: load settings and key, then serve."""
    try:
        settings = get_settings()
    except ValidationError as e:
        logging.basicConfig(level=logging.INFO)
        logger.critical(f"Invalid configuration (is HPOS_STATE_PATH set?): {e}")
        sys.exit(1)

    logging.basicConfig(level=settings.log_level.upper(), format=settings.log_format)

    logger.info(f"Reading HP Admin Public Key from {settings.hpos_state_path}.")
    try:
        public_key = load_admin_public_key(
            settings.hpos_state_path,
            settings.admin_public_key_field,
        )
    except KeyStoreError as e:
        logger.critical(f"Cannot start without HP Admin public key: {e}")
        sys.exit(1)

    app = create_app(public_key)

    logger.info(f"Listening on {settings.listen_url}")
    uvicorn.run(app, host=settings.listen_host, port=settings.listen_port)


if __name__ == "__main__":
    main()
