"""
Data adapters package for quotes, exchange rates and news.

This package provides the collaborator interfaces of the fetch pipeline, the
expiring cache, the live sources and the synthetic generators.
"""

from .alpha_vantage import AlphaVantageConfig, AlphaVantageQuoteSource
from .base import (ConfigurationProvider, DataSource, IdentifierValidator,
                   QuoteSource, SettingsConfigurationProvider, SourceConfig,
                   StaticConfigurationProvider, SyntheticGenerator)
from .cache import CacheEntry, ExpiringCache
from .exchange_rates import ExchangeRateConfig, ExchangeRateSource
from .http_source import HttpJsonSource
from .news import NewsApiConfig, NewsApiSource
from .synthetic_data import (SyntheticNewsGenerator, SyntheticQuoteGenerator,
                             SyntheticRatesGenerator)

__all__ = [
    # Live sources
    "AlphaVantageConfig",
    "AlphaVantageQuoteSource",
    "ExchangeRateConfig",
    "ExchangeRateSource",
    "HttpJsonSource",
    "NewsApiConfig",
    "NewsApiSource",
    # Caching
    "CacheEntry",
    "ExpiringCache",
    # Base classes
    "ConfigurationProvider",
    "DataSource",
    "IdentifierValidator",
    "QuoteSource",
    "SettingsConfigurationProvider",
    "SourceConfig",
    "StaticConfigurationProvider",
    "SyntheticGenerator",
    # Synthetic data
    "SyntheticNewsGenerator",
    "SyntheticQuoteGenerator",
    "SyntheticRatesGenerator",
]
