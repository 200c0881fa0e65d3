"""
Currency conversion over fetched exchange rates.
"""

import time

from fintracker.core.exceptions import ConversionError
from fintracker.core.logging import logger
from fintracker.models.rates import ExchangeRates
from fintracker.services.quote_service import FetchOrchestrator
from fintracker.services.validation import sanitize_input, validate_amount


def convert_currency(
    rates: ExchangeRates, amount: float, from_currency: str, to_currency: str
) -> float:
    """
    Convert ``amount`` between two currencies, crossing through the rates' base.

    Raises:
        ConversionError: amount out of range or a currency missing from the rates
    """
    if not validate_amount(amount):
        raise ConversionError(
            "Please enter a valid amount (positive number up to 1 billion)"
        )

    from_code = sanitize_input(from_currency).upper()
    to_code = sanitize_input(to_currency).upper()
    from_rate = rates.rate_for(from_code)
    to_rate = rates.rate_for(to_code)

    if from_rate is None or to_rate is None:
        missing = from_code if from_rate is None else to_code
        raise ConversionError(f"No exchange rate for {missing} against {rates.base}")

    return amount / from_rate * to_rate


class CurrencyConverter:
    """Converts amounts using rates fetched through a rates orchestrator."""

    def __init__(self, orchestrator: FetchOrchestrator, base: str = "USD"):
        self.orchestrator = orchestrator
        self.base = base

    async def convert(self, amount: float, from_currency: str, to_currency: str) -> float:
        """Fetch (possibly synthetic) rates for the base currency and convert."""
        result = await self.orchestrator.fetch(self.base, permit_synthetic=True)

        start = time.perf_counter()
        try:
            converted = convert_currency(result.payload, amount, from_currency, to_currency)
        except ConversionError as e:
            self.orchestrator.metrics.record_error(e, "currency_conversion")
            raise

        self.orchestrator.metrics.record_latency((time.perf_counter() - start) * 1000)
        logger.debug(
            f"Converted {amount} {from_currency} to {converted:.4f} {to_currency}"
            f" using {result.source_label.value} rates"
        )
        return converted
