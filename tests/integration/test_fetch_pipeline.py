"""
Integration tests for the fetch pipelines.

Drives FetchOrchestrator against the real Alpha Vantage, exchange rate and
NewsAPI adapters over httpx mock transports, covering cache expiry, rate limiting, HTTP failures
and the two-tier real-then-synthetic fetch.
"""

import httpx
import pytest

from fintracker.adapters.alpha_vantage import AlphaVantageConfig, AlphaVantageQuoteSource
from fintracker.adapters.base import StaticConfigurationProvider
from fintracker.adapters.exchange_rates import ExchangeRateConfig, ExchangeRateSource
from fintracker.adapters.news import NewsApiConfig, NewsApiSource
from fintracker.adapters.synthetic_data import SyntheticNewsGenerator, SyntheticRatesGenerator
from fintracker.core.exceptions import RemoteFailureError
from fintracker.models.fetch import DataKind, SourceLabel
from fintracker.services.currency import CurrencyConverter
from fintracker.services.quote_service import FetchOrchestrator
from fintracker.services.validation import (
    CurrencyValidator,
    NewsCategoryValidator,
    SymbolValidator,
)

pytestmark = pytest.mark.integration


def global_quote(symbol: str, price: str) -> dict:
    return {
        "Global Quote": {
            "01. symbol": symbol,
            "05. price": price,
            "09. change": "1.5000",
            "10. change percent": "0.8000%",
        }
    }


class ScriptedAlphaVantage:
    """Mock transport handler replaying responses and recording requested symbols."""

    def __init__(self, responses):
        self.responses = list(responses)
        self.symbols: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.symbols.append(request.url.params["symbol"])
        return self.responses.pop(0)


@pytest.fixture
def build_pipeline(cache, metrics, generator):
    def _build(responses, available: bool = True):
        handler = ScriptedAlphaVantage(responses)
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        source = AlphaVantageQuoteSource(
            AlphaVantageConfig(api_key="integration-key", base_url="https://av.test/query"),
            client=client,
        )
        orchestrator = FetchOrchestrator(
            source=source,
            config_provider=StaticConfigurationProvider(available=available),
            validator=SymbolValidator(max_length=10),
            cache=cache,
            metrics=metrics,
            generator=generator,
        )
        return orchestrator, handler

    return _build


class TestFetchPipeline:
    @pytest.mark.asyncio
    async def test_live_quote_cached_then_refreshed(self, build_pipeline, clock):
        orchestrator, handler = build_pipeline(
            [
                httpx.Response(200, json=global_quote("IBM", "170.2500")),
                httpx.Response(200, json=global_quote("IBM", "171.0000")),
            ]
        )

        first = await orchestrator.fetch("ibm", permit_synthetic=False)
        clock.advance(30.0)
        cached = await orchestrator.fetch("IBM", permit_synthetic=False)
        clock.advance(30.0)
        refreshed = await orchestrator.fetch("IBM", permit_synthetic=False)

        assert first.source_label == SourceLabel.REMOTE
        assert first.payload.price == 170.25
        assert cached.source_label == SourceLabel.CACHE
        assert refreshed.source_label == SourceLabel.REMOTE
        assert refreshed.payload.price == 171.0
        assert handler.symbols == ["IBM", "IBM"]

        stats = orchestrator.metrics.get_stats()
        assert stats["api_calls"] == 2
        assert stats["cache_hits"] == 1
        assert stats["cache_hit_rate"] == pytest.approx(33.33, abs=0.01)

    @pytest.mark.asyncio
    async def test_rate_limit_falls_back_and_retries_sooner(self, build_pipeline, clock):
        orchestrator, handler = build_pipeline(
            [
                httpx.Response(200, json={"Note": "API call frequency exceeded"}),
                httpx.Response(200, json=global_quote("MSFT", "410.0000")),
            ]
        )

        degraded = await orchestrator.fetch("MSFT")
        clock.advance(10.0)
        recovered = await orchestrator.fetch("MSFT")

        assert degraded.source_label == SourceLabel.SYNTHETIC_FALLBACK
        assert degraded.error_reason == "Invalid stock symbol or API limit reached"
        assert recovered.source_label == SourceLabel.REMOTE
        assert recovered.payload.price == 410.0
        assert len(handler.symbols) == 2

    @pytest.mark.asyncio
    async def test_http_error_surfaces_reason(self, build_pipeline):
        orchestrator, _ = build_pipeline([httpx.Response(500)])

        with pytest.raises(RemoteFailureError) as exc_info:
            await orchestrator.fetch("AAPL", permit_synthetic=False)

        assert "500" in exc_info.value.reason
        assert orchestrator.source.get_performance_metrics()["error_count"] == 1

    @pytest.mark.asyncio
    async def test_preferring_real_degrades_after_http_error(self, build_pipeline):
        orchestrator, handler = build_pipeline(
            [httpx.Response(502), httpx.Response(502)]
        )

        result = await orchestrator.fetch_preferring_real("NVDA")

        assert result.source_label == SourceLabel.SYNTHETIC_FALLBACK
        assert result.payload.source == "api_fallback"
        assert "502" in result.error_reason
        assert handler.symbols == ["NVDA", "NVDA"]

    @pytest.mark.asyncio
    async def test_unconfigured_pipeline_never_hits_network(self, build_pipeline):
        orchestrator, handler = build_pipeline([], available=False)

        results = await orchestrator.fetch_many(["AAPL", "GOOGL"])

        assert {r.source_label for r in results.values()} == {SourceLabel.SYNTHETIC_NO_CONFIG}
        assert handler.symbols == []

        status = orchestrator.get_status()
        assert status["config_available"] is False
        assert status["cache"]["size"] == 2


class TestRatesAndNewsPipelines:
    @pytest.mark.asyncio
    async def test_conversion_over_live_rates(self, cache, metrics, clock):
        paths = []

        def handler(request: httpx.Request) -> httpx.Response:
            paths.append(request.url.path)
            return httpx.Response(
                200, json={"base": "USD", "rates": {"USD": 1, "EUR": 0.9, "GBP": 0.75}}
            )

        source = ExchangeRateSource(
            ExchangeRateConfig(base_url="https://rates.test/v4/latest"),
            client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )
        orchestrator = FetchOrchestrator(
            source=source,
            config_provider=StaticConfigurationProvider(),
            validator=CurrencyValidator(),
            cache=cache,
            metrics=metrics,
            generator=SyntheticRatesGenerator(),
            quote_ttl=300.0,
            kind=DataKind.RATES,
        )
        converter = CurrencyConverter(orchestrator)

        assert await converter.convert(90, "EUR", "GBP") == pytest.approx(75.0)
        clock.advance(299.0)
        assert await converter.convert(100, "USD", "EUR") == pytest.approx(90.0)
        clock.advance(1.0)
        await converter.convert(1, "USD", "EUR")

        assert paths == ["/v4/latest/USD", "/v4/latest/USD"]

    @pytest.mark.asyncio
    async def test_news_rate_limit_served_synthetic(self, cache, metrics, clock):
        body = {"status": "error", "code": "rateLimited", "message": "Too many requests"}
        source = NewsApiSource(
            NewsApiConfig(api_key="news-key", base_url="https://news.test/v2/everything"),
            client=httpx.AsyncClient(
                transport=httpx.MockTransport(lambda request: httpx.Response(429, json=body))
            ),
        )
        orchestrator = FetchOrchestrator(
            source=source,
            config_provider=StaticConfigurationProvider(),
            validator=NewsCategoryValidator(),
            cache=cache,
            metrics=metrics,
            generator=SyntheticNewsGenerator(),
            quote_ttl=300.0,
            fallback_ttl=150.0,
            kind=DataKind.NEWS,
        )

        result = await orchestrator.fetch_preferring_real("markets")

        assert result.source_label == SourceLabel.SYNTHETIC_FALLBACK
        assert "429" in result.error_reason
        assert result.payload.articles
        assert source.get_performance_metrics()["error_count"] == 2
