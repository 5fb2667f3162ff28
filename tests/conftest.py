import pytest

from karmabot.rate.rate_limiter import reset_buckets
from karmabot.karma.store import KarmaStore
from tests.fixtures.fake_transport import FakeConnector


@pytest.fixture(autouse=True)
def _fresh_rate_buckets():
    """Buckets are process-wide; give every test its own set."""
    reset_buckets()
    yield
    reset_buckets()


@pytest.fixture(autouse=True)
def _concise_logging(monkeypatch):
    monkeypatch.delenv("DEBUG", raising=False)


@pytest.fixture
def connector():
    return FakeConnector()


@pytest.fixture
def store(tmp_path):
    return KarmaStore(tmp_path / "karma.json")


@pytest.fixture
def bot_config():
    return {
        "server": "irc.example.org",
        "port": 6667,
        "nickname": "karmabot",
        "channels": ["#one", "#two"],
    }
