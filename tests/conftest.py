import sys
from pathlib import Path

import pytest

# Add the src directory to the Python path for imports
project_root = Path(__file__).parent.parent
src_path = project_root / "src"
sys.path.insert(0, str(src_path))

from anki_mcp_bridge.cache import SchemaCache  # noqa: E402
from anki_mcp_bridge.client import AnkiClient  # noqa: E402
from anki_mcp_bridge.config import RemoteConfig  # noqa: E402
from anki_mcp_bridge.dispatcher import ToolDispatcher  # noqa: E402

from .fake_anki import ANKI_URL, FakeAnki  # noqa: E402


class SleepRecorder:
    """Records backoff delays instead of sleeping."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_anki():
    return FakeAnki()


@pytest.fixture
def sleeper():
    return SleepRecorder()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_client(fake_anki, sleeper):
    """Factory for clients wired to the fake service."""

    def _make(**config) -> AnkiClient:
        return AnkiClient(
            RemoteConfig(url=ANKI_URL, **config), transport=fake_anki.transport(), sleep=sleeper
        )

    return _make


@pytest.fixture
def client(make_client):
    return make_client()


@pytest.fixture
def cache(make_client, clock):
    # No retries so each injected failure is seen exactly once
    return SchemaCache(make_client(max_retries=0), ttl=300.0, clock=clock)


@pytest.fixture
def dispatcher(cache):
    return ToolDispatcher(cache.client, cache)
