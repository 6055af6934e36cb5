"""
Shared fixtures: an HP Admin keypair, a state file holding its public key,
and a test client for the auth app.
"""
import json

import pytest
from fastapi.testclient import TestClient

from hpos_admin_auth.api.main import create_app
from hpos_admin_auth.core.signing.keys import generate_keypair, public_key_to_base64


@pytest.fixture
def admin_keypair():
    """Fresh Ed25519 keypair standing in for the HP Admin key."""
    return generate_keypair()


@pytest.fixture
def private_key(admin_keypair):
    return admin_keypair[0]


@pytest.fixture
def public_key(admin_keypair):
    return admin_keypair[1]


@pytest.fixture
def state_file(tmp_path, public_key):
    """HPOS state file carrying the admin public key."""
    path = tmp_path / "hpos-state.json"
    path.write_text(json.dumps({
        "v1": {
            "admin_public_key": public_key_to_base64(public_key),
            "seed": "not-used-here",
        }
    }))
    return path


@pytest.fixture
def client(public_key):
    """Test client for an app built around the admin public key."""
    app = create_app(public_key)
    with TestClient(app) as test_client:
        yield test_client
