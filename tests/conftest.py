import os
import random

import pytest

# Keep settings deterministic regardless of the developer's environment
os.environ["ALPHA_VANTAGE_KEY"] = ""
os.environ["DEMO_MODE"] = "False"
os.environ["NEWS_API_KEY"] = ""
os.environ.pop("EXCHANGE_RATE_URL", None)

from fintracker.adapters.base import QuoteSource, StaticConfigurationProvider  # noqa: E402
from fintracker.adapters.cache import ExpiringCache  # noqa: E402
from fintracker.adapters.synthetic_data import SyntheticQuoteGenerator  # noqa: E402
from fintracker.models.quotes import StockQuote  # noqa: E402
from fintracker.services.metrics import MetricsRecorder  # noqa: E402
from fintracker.services.quote_service import FetchOrchestrator  # noqa: E402
from fintracker.services.validation import SymbolValidator  # noqa: E402


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow running tests")


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeQuoteSource(QuoteSource):
    """Quote source returning scripted outcomes in order."""

    name = "fake"

    def __init__(self, outcomes=None):
        self.outcomes = list(outcomes or [])
        self.calls: list[str] = []

    async def get_quote(self, symbol: str) -> StockQuote | None:
        self.calls.append(symbol)
        if not self.outcomes:
            raise ConnectionError("no scripted outcome left")
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        if callable(outcome):
            return await outcome(symbol)
        return outcome


def make_quote(symbol: str = "AAPL", price: float = 189.5) -> StockQuote:
    return StockQuote(symbol=symbol, price=price, change=1.25, change_percent=0.66)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return ExpiringCache(max_size=100, default_ttl=60.0, clock=clock)


@pytest.fixture
def metrics():
    return MetricsRecorder()


@pytest.fixture
def generator():
    return SyntheticQuoteGenerator(rng=random.Random(42))


@pytest.fixture
def make_orchestrator(cache, metrics, generator):
    """Build an orchestrator around a scripted source."""

    def _make(
        outcomes=None,
        available: bool = True,
        demo_mode: bool = False,
        timeout: float = 10.0,
    ):
        source = FakeQuoteSource(outcomes)
        orchestrator = FetchOrchestrator(
            source=source,
            config_provider=StaticConfigurationProvider(available, demo_mode),
            validator=SymbolValidator(max_length=10),
            cache=cache,
            metrics=metrics,
            generator=generator,
            quote_ttl=60.0,
            fallback_ttl=30.0,
            error_ttl=10.0,
            timeout=timeout,
        )
        return orchestrator, source

    return _make
