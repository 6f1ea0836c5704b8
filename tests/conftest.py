"""
Pytest configuration and shared fixtures for synapse-register tests
"""
import json
import pytest
from unittest.mock import AsyncMock, MagicMock

from synapse_register.matrix.admin_client import SynapseAdminClient


# ============================================================================
# Configuration Fixtures
# ============================================================================

HOMESERVER_URL = "https://matrix.test"
SHARED_SECRET = "test_shared_secret"


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every variable the package reads from the environment"""
    for name in (
        "SYNAPSE_HOMESERVER_URL",
        "SYNAPSE_REGISTRATION_SHARED_SECRET",
        "SYNAPSE_REGISTRATION_PASSWORD",
        "SYNAPSE_VERIFY_TLS",
        "SYNAPSE_ALLOW_INSECURE_ORIGIN",
        "SYNAPSE_REQUEST_TIMEOUT",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def admin_client():
    """SynapseAdminClient pointed at a test homeserver"""
    return SynapseAdminClient(
        homeserver_url=HOMESERVER_URL,
        registration_shared_secret=SHARED_SECRET,
    )


# ============================================================================
# Mock HTTP Session Fixtures
# ============================================================================

def make_response(status=200, payload=None, body=None):
    """Build a mock aiohttp response usable as an async context manager"""
    if body is None:
        body = json.dumps(payload).encode() if payload is not None else b""

    response = MagicMock()
    response.status = status
    response.reason = "OK" if status == 200 else "Error"
    response.url = f"{HOMESERVER_URL}/_synapse/admin/v1/register"
    response.headers = {"Content-Type": "application/json"}
    response.json = AsyncMock(return_value=payload)
    response.read = AsyncMock(return_value=body)
    response.__aenter__ = AsyncMock(return_value=response)
    response.__aexit__ = AsyncMock(return_value=None)
    return response


def make_session(get_response=None, post_response=None):
    """Build a mock aiohttp ClientSession returning the given responses"""
    session = MagicMock()
    session.get = MagicMock(return_value=get_response)
    session.post = MagicMock(return_value=post_response)
    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock(return_value=None)
    return session


@pytest.fixture
def nonce_response():
    return make_response(200, {"nonce": "test_nonce_123"})


@pytest.fixture
def registration_response():
    return make_response(200, {
        "access_token": "syt_test_token",
        "user_id": "@alice:matrix.test",
        "home_server": "matrix.test",
        "device_id": "TESTDEVICE",
    })


@pytest.fixture
def response_factory():
    return make_response


@pytest.fixture
def session_factory():
    return make_session
