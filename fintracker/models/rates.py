"""
Currency exchange rate models.
"""

from datetime import UTC, datetime

from pydantic import BaseModel, Field, field_validator


class ExchangeRates(BaseModel):
    """Rates for one base currency: 1 unit of ``base`` buys ``rates[code]`` units of ``code``."""

    base: str = Field(..., description="ISO 4217 base currency code")
    rates: dict[str, float] = Field(
        default_factory=dict, description="Quote currency code to rate"
    )
    last_updated: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="When the rates were produced",
    )
    is_synthetic: bool = Field(False, description="Generated rather than fetched")
    source: str = Field("exchange_rate_api", description="Producer of the rates")
    error_reason: str | None = Field(
        None, description="Why synthetic rates replaced live ones"
    )

    @field_validator("base")
    @classmethod
    def normalize_base(cls, v: str) -> str:
        return v.strip().upper()

    @field_validator("rates")
    @classmethod
    def normalize_codes(cls, v: dict[str, float]) -> dict[str, float]:
        return {code.strip().upper(): rate for code, rate in v.items()}

    @property
    def is_valid(self) -> bool:
        """Usable rates are non-empty and strictly positive."""
        return bool(self.rates) and all(rate > 0 for rate in self.rates.values())

    def rate_for(self, currency: str) -> float | None:
        """Units of ``currency`` per unit of base; the base itself is 1."""
        code = currency.strip().upper()
        if code == self.base:
            return 1.0
        return self.rates.get(code)
