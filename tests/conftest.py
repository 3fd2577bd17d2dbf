"""
Pytest configuration for fmdata-sdk tests.

Unit tests run against ``FakeTransport`` (see ``tests/fakes.py``) and need no
server. Integration tests are marked ``integration`` and skipped unless the
``FM_*`` connection variables are set (a ``.env`` file is honored).

Shared connection constants are defined here so integration test files can
import them instead of reading the environment themselves.
"""

import os
from collections.abc import Generator

import pytest
from dotenv import load_dotenv

from fmdata_sdk import DataAPI
from tests.fakes import FakeClock, FakeTransport

load_dotenv()

# ---------------------------------------------------------------------------
# Shared connection constants (import these in test files)
# ---------------------------------------------------------------------------
FM_SERVER_URL = os.getenv("FM_SERVER_URL", "")
FM_DATABASE = os.getenv("FM_DATABASE", "")
FM_USERNAME = os.getenv("FM_USERNAME", "")
FM_PASSWORD = os.getenv("FM_PASSWORD", "")
FM_LAYOUT = os.getenv("FM_LAYOUT", "")
FM_SSL_VERIFY = os.getenv("FM_SSL_VERIFY", "true").lower() in ("1", "true", "yes")

HAS_SERVER = all([FM_SERVER_URL, FM_DATABASE, FM_USERNAME, FM_PASSWORD])


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip integration tests when no server is configured."""
    if HAS_SERVER:
        return
    skip_integration = pytest.mark.skip(reason="FM_SERVER_URL/FM_DATABASE/FM_USERNAME/FM_PASSWORD not set")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def api(transport: FakeTransport, clock: FakeClock) -> Generator[DataAPI, None, None]:
    """A session logged in as ``admin`` holding ``token-1``."""
    transport.queue_login("token-1")
    session = DataAPI(transport.base_url, "Contacts DB", "admin", "secret", transport=transport, clock=clock)
    transport.calls.clear()
    yield session
