from .fetch import DataKind, FetchResult, SourceLabel
from .news import NewsArticle, NewsDigest
from .quotes import StockQuote
from .rates import ExchangeRates

__all__ = [
    "DataKind",
    "ExchangeRates",
    "FetchResult",
    "NewsArticle",
    "NewsDigest",
    "SourceLabel",
    "StockQuote",
]
