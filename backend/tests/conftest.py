import logging
import os
from typing import Iterator

import fakeredis
import fakeredis.aioredis
import pytest
import respx
from fastapi.testclient import TestClient

VOUCHED_BASE_URL = "https://verify.vouched.test"

# Set test environment variables
os.environ.update(
    {
        "VOUCHED_BASE_URL": VOUCHED_BASE_URL,
        "VOUCHED_PRIVATE_API_KEY": "test-private-key",
        "VOUCHED_SSN_PRIVATE_API_KEY": "test-ssn-key",
        "REDIS_URL": "redis://localhost:6379/2",
        "RATE_LIMIT_TIMES": "40",
        "RATE_LIMIT_SECONDS": "60",
    }
)

# Import app modules after setting environment variables
from idvdemo.core.config import Settings, get_settings
from idvdemo.main import app
from idvdemo.storage.kv import KeyValueStore

logger = logging.getLogger(__name__)


@pytest.fixture
def redis_server() -> fakeredis.FakeServer:
    return fakeredis.FakeServer()


@pytest.fixture
def fake_redis(redis_server):
    """A Redis client backed by a fresh in-memory server per test."""
    return fakeredis.aioredis.FakeRedis(server=redis_server, decode_responses=True)


@pytest.fixture
def store(fake_redis) -> KeyValueStore:
    return KeyValueStore(fake_redis)


@pytest.fixture
def settings() -> Settings:
    return get_settings()


@pytest.fixture
def client(fake_redis) -> Iterator[TestClient]:
    app.state.redis = fake_redis
    with TestClient(app) as test_client:
        logger.info("Test client created")
        yield test_client
    app.dependency_overrides.clear()
    logger.info("Test client closed")


@pytest.fixture
def override_settings():
    """Swap the app's settings for a copy with some fields changed."""

    def _override(**changes) -> Settings:
        patched = get_settings().model_copy(update=changes)
        app.dependency_overrides[get_settings] = lambda: patched
        return patched

    yield _override
    app.dependency_overrides.pop(get_settings, None)


@pytest.fixture
def vouched_api() -> Iterator[respx.MockRouter]:
    """Mock of the Vouched REST API; unrouted requests fail the test."""
    with respx.mock(base_url=VOUCHED_BASE_URL, assert_all_called=False) as mock:
        yield mock
