"""
Exchange rate adapter for the keyless exchangerate-api.com v4 endpoint.
"""

import time
from typing import Any

import httpx

from fintracker.adapters.base import SourceConfig
from fintracker.adapters.http_source import HttpJsonSource
from fintracker.core.logging import logger
from fintracker.models.rates import ExchangeRates

DEFAULT_BASE_URL = "https://api.exchangerate-api.com/v4/latest"


class ExchangeRateConfig(SourceConfig):
    name: str = "exchange_rate_api"
    base_url: str | None = DEFAULT_BASE_URL


def parse_latest_rates(data: dict[str, Any], base: str) -> ExchangeRates | None:
    """Turn a ``/latest/{base}`` body into rates, or None if it has none."""
    raw_rates = data.get("rates")
    if not isinstance(raw_rates, dict):
        return None

    rates: dict[str, float] = {}
    for code, value in raw_rates.items():
        try:
            rate = float(value)
        except (TypeError, ValueError):
            continue
        if rate > 0:
            rates[str(code)] = rate

    if not rates:
        return None
    return ExchangeRates(base=data.get("base") or base, rates=rates)


class ExchangeRateSource(HttpJsonSource):
    """Live source of latest rates for a base currency."""

    name = "exchange_rate_api"

    def __init__(
        self,
        config: ExchangeRateConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        super().__init__(config or ExchangeRateConfig(), client)

    async def fetch(self, identifier: str) -> ExchangeRates | None:
        return await self.get_rates(identifier)

    async def get_rates(self, base: str) -> ExchangeRates | None:
        start_time = time.time()
        base_url = (self.config.base_url or DEFAULT_BASE_URL).rstrip("/")

        data = await self._get_json(f"{base_url}/{base}", identifier=base)
        rates = parse_latest_rates(data, base)

        logger.info(
            "rates_request_completed" if rates else "rates_request_no_data",
            extra={
                "base": base,
                "count": len(rates.rates) if rates else 0,
                "duration": time.time() - start_time,
                "adapter": self.name,
            },
        )
        return rates
