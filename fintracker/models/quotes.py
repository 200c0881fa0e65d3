"""
Quote models for fetched and synthetic market data.
"""

from datetime import UTC, datetime

from pydantic import BaseModel, Field, field_validator


class StockQuote(BaseModel):
    """Latest price snapshot for a single stock symbol."""

    symbol: str = Field(..., description="Upper-cased ticker symbol")
    price: float = Field(..., description="Last trade price")
    change: float = Field(0.0, description="Absolute change since previous close")
    change_percent: float = Field(
        0.0, description="Percentage change since previous close"
    )
    last_updated: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="When the quote was produced",
    )
    is_synthetic: bool = Field(False, description="Generated rather than fetched")
    source: str = Field("alpha_vantage", description="Producer of the quote")
    error_reason: str | None = Field(
        None, description="Why a synthetic quote replaced a live one"
    )

    @field_validator("symbol")
    @classmethod
    def normalize_symbol(cls, v: str) -> str:
        return v.strip().upper()

    @property
    def is_valid(self) -> bool:
        """A usable quote has a positive price."""
        return self.price > 0

