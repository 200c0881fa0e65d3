"""
Alpha Vantage adapter for live stock quotes.
"""

import time
from typing import Any

import httpx

from fintracker.adapters.base import QuoteSource, SourceConfig
from fintracker.adapters.http_source import HttpJsonSource
from fintracker.core.exceptions import QuoteSourceError
from fintracker.core.logging import logger
from fintracker.models.quotes import StockQuote

GLOBAL_QUOTE_KEY = "Global Quote"
RATE_LIMIT_KEYS = ("Note", "Information")
DEFAULT_BASE_URL = "https://www.alphavantage.co/query"


class AlphaVantageConfig(SourceConfig):
    """Configuration for the Alpha Vantage source."""

    name: str = "alpha_vantage"
    base_url: str | None = DEFAULT_BASE_URL


def _to_float(value: Any) -> float:
    try:
        return float(str(value).replace("%", "").strip())
    except (TypeError, ValueError):
        return 0.0


def parse_global_quote(data: dict[str, Any]) -> StockQuote | None:
    """Turn a GLOBAL_QUOTE response body into a quote, or None if it is empty."""
    quote = data.get(GLOBAL_QUOTE_KEY)
    if not isinstance(quote, dict) or not quote:
        return None

    symbol = quote.get("01. symbol")
    if not symbol:
        return None

    return StockQuote(
        symbol=symbol,
        price=_to_float(quote.get("05. price")),
        change=_to_float(quote.get("09. change")),
        change_percent=_to_float(quote.get("10. change percent")),
        source="alpha_vantage",
    )


class AlphaVantageQuoteSource(HttpJsonSource, QuoteSource):
    """Live quote source using the Alpha Vantage GLOBAL_QUOTE endpoint."""

    name = "alpha_vantage"
    error_class = QuoteSourceError

    def __init__(
        self,
        config: AlphaVantageConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        super().__init__(config or AlphaVantageConfig(), client)

    async def get_quote(self, symbol: str) -> StockQuote | None:
        """Get a single quote for a symbol."""
        start_time = time.time()
        params = {
            "function": "GLOBAL_QUOTE",
            "symbol": symbol,
            "apikey": self.config.api_key or "",
        }

        data = await self._get_json(
            self.config.base_url or DEFAULT_BASE_URL, params=params, identifier=symbol
        )
        duration = time.time() - start_time

        if any(key in data for key in RATE_LIMIT_KEYS):
            logger.warning(
                "quote_request_rate_limited",
                extra={"symbol": symbol, "duration": duration, "adapter": self.name},
            )
            return None

        quote = parse_global_quote(data)
        if quote is None:
            logger.warning(
                "quote_request_no_data",
                extra={"symbol": symbol, "duration": duration, "adapter": self.name},
            )
        else:
            logger.info(
                "quote_request_completed",
                extra={
                    "symbol": symbol,
                    "price": quote.price,
                    "duration": duration,
                    "adapter": self.name,
                },
            )
        return quote
