"""
Kraken Desk — Test Configuration & Fixtures
Shared fixtures for all test modules.
"""
import pytest

from kraken_desk.config.settings import KrakenSettings
from kraken_desk.data.models import PricePoint
from kraken_desk.exchange.kraken_client import KrakenClient
from kraken_desk.tests.fakes import BASE_URL, TEST_API_KEY, TEST_API_SECRET, FakeSession


@pytest.fixture
def kraken_settings():
    return KrakenSettings(
        kraken_api_key=TEST_API_KEY,
        kraken_api_secret=TEST_API_SECRET,
        kraken_base_url=BASE_URL,
    )


@pytest.fixture
def make_client(kraken_settings):
    """Build a client wired to a FakeSession holding the given responses."""
    def _make(*responses):
        session = FakeSession(responses)
        client = KrakenClient(session=session, settings=kraken_settings)
        return client, session
    return _make


@pytest.fixture
def flat_history():
    """Twelve hourly candles at a constant price."""
    return [PricePoint(timestamp=1700000000 + i * 3600, close=100.0) for i in range(12)]


@pytest.fixture
def choppy_history():
    """Four alternating closes: high volatility, too short for momentum."""
    return [100.0, 110.0, 100.0, 110.0]
