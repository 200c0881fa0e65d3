"""
Service factory for creating and configuring the fetch pipelines.

This module wires the cache, metrics recorder, synthetic generator and live
source of each data kind together from application settings. Process-wide
orchestrators share one cache and one metrics recorder.
"""

from typing import TYPE_CHECKING, Any

from fintracker.core.config import Settings, settings
from fintracker.models.fetch import DataKind

if TYPE_CHECKING:
    from fintracker.adapters.cache import ExpiringCache
    from fintracker.services.metrics import MetricsRecorder
    from fintracker.services.quote_service import FetchOrchestrator

_orchestrators: dict[DataKind, "FetchOrchestrator"] = {}
_shared_cache: "ExpiringCache | None" = None
_shared_metrics: "MetricsRecorder | None" = None


def create_cache(app_settings: Settings | None = None) -> "ExpiringCache":
    from fintracker.adapters.cache import ExpiringCache

    cfg = app_settings or settings
    return ExpiringCache(
        max_size=cfg.CACHE_MAX_SIZE,
        default_ttl=cfg.CACHE_QUOTE_TTL,
        cleanup_interval=cfg.CACHE_CLEANUP_INTERVAL,
    )


def create_metrics(app_settings: Settings | None = None) -> "MetricsRecorder":
    from fintracker.services.metrics import MetricsRecorder

    cfg = app_settings or settings
    return MetricsRecorder(
        latency_window=cfg.METRICS_LATENCY_WINDOW,
        error_window=cfg.METRICS_ERROR_WINDOW,
        slow_call_threshold_ms=cfg.SLOW_CALL_THRESHOLD_MS,
    )


def _kind_components(cfg: Settings, kind: DataKind) -> dict[str, Any]:
    """Source, validator, generator and lifetimes for one data kind."""
    if kind is DataKind.RATES:
        from fintracker.adapters.exchange_rates import ExchangeRateConfig, ExchangeRateSource
        from fintracker.adapters.synthetic_data import SyntheticRatesGenerator
        from fintracker.services.validation import CurrencyValidator

        return {
            "source": ExchangeRateSource(
                ExchangeRateConfig(base_url=cfg.EXCHANGE_RATE_URL, timeout=cfg.API_TIMEOUT)
            ),
            "validator": CurrencyValidator(),
            "generator": SyntheticRatesGenerator(),
            "quote_ttl": cfg.CACHE_RATES_TTL,
            "fallback_ttl": cfg.CACHE_FALLBACK_TTL,
        }

    if kind is DataKind.NEWS:
        from fintracker.adapters.news import NewsApiConfig, NewsApiSource
        from fintracker.adapters.synthetic_data import SyntheticNewsGenerator
        from fintracker.services.validation import NewsCategoryValidator

        return {
            "source": NewsApiSource(
                NewsApiConfig(
                    api_key=cfg.NEWS_API_KEY or None,
                    base_url=cfg.NEWS_API_URL,
                    page_size=cfg.NEWS_PAGE_SIZE,
                    timeout=cfg.API_TIMEOUT,
                )
            ),
            "validator": NewsCategoryValidator(),
            "generator": SyntheticNewsGenerator(),
            "quote_ttl": cfg.CACHE_NEWS_TTL,
            "fallback_ttl": cfg.CACHE_NEWS_FALLBACK_TTL,
        }

    from fintracker.adapters.alpha_vantage import AlphaVantageConfig, AlphaVantageQuoteSource
    from fintracker.adapters.synthetic_data import SyntheticQuoteGenerator
    from fintracker.services.validation import SymbolValidator

    return {
        "source": AlphaVantageQuoteSource(
            AlphaVantageConfig(
                api_key=cfg.ALPHA_VANTAGE_KEY or None,
                base_url=cfg.ALPHA_VANTAGE_URL,
                timeout=cfg.API_TIMEOUT,
            )
        ),
        "validator": SymbolValidator(max_length=cfg.MAX_SYMBOL_LENGTH),
        "generator": SyntheticQuoteGenerator(),
        "quote_ttl": cfg.CACHE_QUOTE_TTL,
        "fallback_ttl": cfg.CACHE_FALLBACK_TTL,
    }


def create_fetch_orchestrator(
    app_settings: Settings | None = None,
    kind: DataKind = DataKind.QUOTE,
    cache: "ExpiringCache | None" = None,
    metrics: "MetricsRecorder | None" = None,
) -> "FetchOrchestrator":
    """Create a FetchOrchestrator for one data kind.

    Args:
        app_settings: Settings to build from, the global settings if None
        kind: Which data the orchestrator serves
        cache: Cache to share, a fresh one if None
        metrics: Metrics recorder to share, a fresh one if None

    Returns:
        Configured FetchOrchestrator instance
    """
    from fintracker.adapters.base import SettingsConfigurationProvider
    from fintracker.services.quote_service import FetchOrchestrator

    cfg = app_settings or settings
    kind = DataKind(kind)

    return FetchOrchestrator(
        config_provider=SettingsConfigurationProvider(cfg, kind),
        cache=cache if cache is not None else create_cache(cfg),
        metrics=metrics if metrics is not None else create_metrics(cfg),
        error_ttl=cfg.CACHE_ERROR_TTL,
        timeout=cfg.API_TIMEOUT,
        kind=kind,
        **_kind_components(cfg, kind),
    )


def get_fetch_orchestrator(kind: DataKind = DataKind.QUOTE) -> "FetchOrchestrator":
    """Get the process-wide orchestrator for ``kind``, creating it on first use."""
    global _shared_cache, _shared_metrics
    kind = DataKind(kind)
    if kind not in _orchestrators:
        if _shared_cache is None:
            _shared_cache = create_cache()
        if _shared_metrics is None:
            _shared_metrics = create_metrics()
        _orchestrators[kind] = create_fetch_orchestrator(
            kind=kind, cache=_shared_cache, metrics=_shared_metrics
        )
    return _orchestrators[kind]


def reset_fetch_orchestrator() -> None:
    """Forget the process-wide orchestrators and their shared cache.

    This is primarily for testing purposes.
    """
    global _shared_cache, _shared_metrics
    _orchestrators.clear()
    _shared_cache = None
    _shared_metrics = None
