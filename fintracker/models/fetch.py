"""
Types shared by every kind of fetched data.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from fintracker.models.news import NewsDigest
    from fintracker.models.quotes import StockQuote
    from fintracker.models.rates import ExchangeRates

    Payload = Union[StockQuote, ExchangeRates, NewsDigest]


class DataKind(str, Enum):
    """Kinds of perishable data the tracker fetches; values prefix cache keys."""

    QUOTE = "quote"
    RATES = "rates"
    NEWS = "news"


class SourceLabel(str, Enum):
    """Where a fetch result came from."""

    CACHE = "cache"
    REMOTE = "remote"
    SYNTHETIC_FALLBACK = "synthetic-fallback"
    SYNTHETIC_NO_CONFIG = "synthetic-no-config"


@dataclass
class FetchResult:
    """Outcome of one orchestrated fetch."""

    payload: "Payload"
    is_synthetic: bool
    source_label: SourceLabel
    error_reason: str | None = None
