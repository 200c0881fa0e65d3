"""Unit tests for AlphaVantageQuoteSource using httpx mock transports."""

import httpx
import pytest

from fintracker.adapters.alpha_vantage import (
    AlphaVantageConfig,
    AlphaVantageQuoteSource,
    parse_global_quote,
)
from fintracker.core.exceptions import QuoteSourceError

GLOBAL_QUOTE_BODY = {
    "Global Quote": {
        "01. symbol": "IBM",
        "02. open": "168.1000",
        "05. price": "170.2500",
        "08. previous close": "168.0000",
        "09. change": "2.2500",
        "10. change percent": "1.3393%",
    }
}


def make_source(handler) -> AlphaVantageQuoteSource:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    config = AlphaVantageConfig(api_key="test-key", base_url="https://av.test/query")
    return AlphaVantageQuoteSource(config=config, client=client)


class TestParseGlobalQuote:
    def test_parses_fields(self):
        quote = parse_global_quote(GLOBAL_QUOTE_BODY)

        assert quote.symbol == "IBM"
        assert quote.price == 170.25
        assert quote.change == 2.25
        assert quote.change_percent == pytest.approx(1.3393)
        assert quote.is_synthetic is False

    @pytest.mark.parametrize("body", [{}, {"Global Quote": {}}, {"Global Quote": []}])
    def test_empty_payload(self, body):
        assert parse_global_quote(body) is None

    def test_unparseable_numbers_become_zero(self):
        body = {"Global Quote": {"01. symbol": "IBM", "05. price": "n/a"}}

        quote = parse_global_quote(body)

        assert quote.price == 0.0
        assert not quote.is_valid


class TestAlphaVantageQuoteSource:
    @pytest.mark.asyncio
    async def test_successful_quote(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json=GLOBAL_QUOTE_BODY)

        source = make_source(handler)
        quote = await source.get_quote("IBM")

        assert quote.price == 170.25
        assert seen["params"] == {
            "function": "GLOBAL_QUOTE",
            "symbol": "IBM",
            "apikey": "test-key",
        }
        assert source.get_performance_metrics()["request_count"] == 1

    @pytest.mark.asyncio
    async def test_rate_limit_note_is_soft_failure(self):
        source = make_source(
            lambda request: httpx.Response(200, json={"Note": "Thank you for using Alpha Vantage!"})
        )

        assert await source.get_quote("IBM") is None

    @pytest.mark.asyncio
    async def test_unknown_symbol_is_soft_failure(self):
        source = make_source(lambda request: httpx.Response(200, json={"Global Quote": {}}))

        assert await source.get_quote("NOPE") is None

    @pytest.mark.asyncio
    async def test_non_2xx_raises(self):
        source = make_source(lambda request: httpx.Response(503))

        with pytest.raises(QuoteSourceError) as exc_info:
            await source.get_quote("IBM")

        assert exc_info.value.status_code == 503
        assert source.get_performance_metrics()["error_count"] == 1

    @pytest.mark.asyncio
    async def test_transport_error_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        source = make_source(handler)

        with pytest.raises(QuoteSourceError, match="Transport error"):
            await source.get_quote("IBM")

    @pytest.mark.asyncio
    async def test_non_json_body_raises(self):
        source = make_source(lambda request: httpx.Response(200, text="<html>oops</html>"))

        with pytest.raises(QuoteSourceError):
            await source.get_quote("IBM")

    @pytest.mark.asyncio
    async def test_aclose_leaves_injected_client_open(self):
        source = make_source(lambda request: httpx.Response(200, json=GLOBAL_QUOTE_BODY))

        await source.aclose()

        assert await source.get_quote("IBM") is not None
