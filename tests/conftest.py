"""Shared pytest fixtures for the match collector tests."""

import sys
from pathlib import Path

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import unused_port

# Add the parent directory to the path if not already there
# This ensures the packages under test can be imported in CI
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from lol_match_collector.config import Config
from mock_riot_api.control import MockRiotControlClient
from mock_riot_api.mock_riot_server import MockRiotAPIServer
from tests.fakes import InMemoryMatchStore

TEST_API_KEY = "test-api-key"

CONFIG_ENV_VARS = [
    "RIOT_API_KEY", "OUTPUT_DIR", "RIOT_PLATFORM", "RIOT_API_BASE_URL",
    "RIOT_API_TIMEOUT_SECONDS", "LADDER_QUEUE", "LADDER_TIER", "LADDER_DIVISION",
    "MATCH_QUEUE_TYPE", "MATCH_COUNT", "MATCH_LOOKBACK_DAYS", "RETRY_MAX_ATTEMPTS",
    "RETRY_WAIT_MIN_SECONDS", "RETRY_WAIT_MAX_SECONDS", "LOG_LEVEL", "LOG_FORMAT",
]


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every environment variable the configuration reads."""
    for var in CONFIG_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


@pytest.fixture
def memory_store():
    return InMemoryMatchStore()


@pytest_asyncio.fixture
async def mock_riot_api_server():
    """Start the mock Riot API server on a free local port."""
    port = unused_port()
    server = MockRiotAPIServer(port=port, api_key=TEST_API_KEY)

    runner = web.AppRunner(server.app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", port)
    await site.start()

    yield server

    await runner.cleanup()


@pytest_asyncio.fixture
async def mock_riot_control(mock_riot_api_server):
    """Create mock Riot API control client."""
    client = MockRiotControlClient(f"http://127.0.0.1:{mock_riot_api_server.port}")
    await client.reset_server()
    return client


@pytest.fixture
def e2e_config(mock_riot_api_server, tmp_path):
    """Configuration pointing the collector at the mock server."""
    return Config(
        riot_api_key=TEST_API_KEY,
        output_dir=str(tmp_path / "out"),
        riot_api_base_url=f"http://127.0.0.1:{mock_riot_api_server.port}",
        riot_api_timeout_seconds=5,
        retry_max_attempts=0,
    )
