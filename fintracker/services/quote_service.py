"""
Fetching perishable data with cache, live source and synthetic fallback.

A fetch walks a fixed chain: cache, configuration gate, live source,
synthetic generator. Each successful step writes back to the cache with a
lifetime that depends on how the payload was obtained, so degraded results
are retried sooner than live ones. Metrics are recorded on every branch.

One orchestrator serves one kind of data (quotes, exchange rates or news);
the payload only has to expose ``is_valid``, ``is_synthetic`` and
``error_reason``. Orchestrators of different kinds may share a cache and a
metrics recorder since cache keys carry the kind as a prefix.

Concurrent fetches for the same identifier are not coalesced: both miss and
both call the source, and the cache keeps whichever write completes last.
"""

import asyncio
import math
import time
from collections.abc import Iterable
from typing import Any

from fintracker.adapters.base import (
    ConfigurationProvider,
    DataSource,
    IdentifierValidator,
    SyntheticGenerator,
)
from fintracker.adapters.cache import ExpiringCache
from fintracker.adapters.synthetic_data import MOCK_SOURCE, SyntheticQuoteGenerator
from fintracker.core.exceptions import (
    ConfigurationUnavailableError,
    FetchError,
    InvalidIdentifierError,
    RemoteFailureError,
    SyntheticGenerationError,
)
from fintracker.core.logging import logger
from fintracker.models.fetch import DataKind, FetchResult, SourceLabel
from fintracker.services.metrics import MetricsRecorder

BATCH_CONTEXT = "batch_fetch"
DEMO_SOURCE = "demo_mode"
FALLBACK_SOURCE = "api_fallback"

SOFT_FAILURE_REASONS = {
    DataKind.QUOTE: "Invalid stock symbol or API limit reached",
    DataKind.RATES: "No exchange rates returned",
    DataKind.NEWS: "No articles returned or API limit reached",
}


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


def _is_positive_seconds(value: object) -> bool:
    return (
        isinstance(value, int | float)
        and not isinstance(value, bool)
        and math.isfinite(value)
        and value > 0
    )


class FetchOrchestrator:
    """
    Resolves an identifier to a payload, degrading to synthetic data when allowed.

    Callers that need to know whether data is real call ``fetch`` with
    ``permit_synthetic=False`` first and retry with ``True`` on failure;
    ``fetch_preferring_real`` does exactly that.
    """

    def __init__(
        self,
        source: DataSource,
        config_provider: ConfigurationProvider,
        validator: IdentifierValidator,
        cache: ExpiringCache | None = None,
        metrics: MetricsRecorder | None = None,
        generator: SyntheticGenerator | None = None,
        quote_ttl: float = 60.0,
        fallback_ttl: float = 30.0,
        error_ttl: float = 10.0,
        timeout: float = 10.0,
        kind: DataKind = DataKind.QUOTE,
    ):
        """
        Initialize the orchestrator.

        Args:
            source: Live data source
            config_provider: Gate for credentials and demo mode
            validator: Identifier format predicate and normalizer
            cache: Shared cache, a fresh one if None
            metrics: Metrics recorder, a fresh one if None
            generator: Synthetic payload generator, a quote generator if None
            quote_ttl: Cache lifetime for live payloads, seconds
            fallback_ttl: Cache lifetime for synthetic payloads served because
                live data is not configured, seconds
            error_ttl: Cache lifetime for synthetic payloads served after a
                live failure, seconds; must be shorter than fallback_ttl
            timeout: Bound on a single live call, seconds
            kind: Data kind, used as the cache key prefix
        """
        for label, value in (
            ("quote_ttl", quote_ttl),
            ("fallback_ttl", fallback_ttl),
            ("error_ttl", error_ttl),
            ("timeout", timeout),
        ):
            if not _is_positive_seconds(value):
                raise ValueError(f"{label} must be a finite positive number, got {value!r}")
        if not error_ttl < fallback_ttl:
            raise ValueError("error_ttl must be shorter than fallback_ttl")

        self.source = source
        self.config_provider = config_provider
        self.validator = validator
        self.cache = cache if cache is not None else ExpiringCache()
        self.metrics = metrics if metrics is not None else MetricsRecorder()
        self.generator = generator if generator is not None else SyntheticQuoteGenerator()
        self.quote_ttl = quote_ttl
        self.fallback_ttl = fallback_ttl
        self.error_ttl = error_ttl
        self.timeout = timeout
        self.kind = DataKind(kind)
        self.fetch_context = f"{self.kind.value}_fetch"

    def cache_key(self, identifier: str) -> str:
        return f"{self.kind.value}:{identifier}"

    async def fetch(self, identifier: str, permit_synthetic: bool = True) -> FetchResult:
        """
        Fetch the payload for ``identifier``.

        Raises:
            InvalidIdentifierError: identifier fails validation
            ConfigurationUnavailableError: no credentials and synthetic data
                not permitted
            RemoteFailureError: live call failed and synthetic data not
                permitted
        """
        if not self.validator.is_valid(identifier):
            error = InvalidIdentifierError(
                f"Invalid {self.kind.value} identifier provided: {identifier!r}"
            )
            self.metrics.record_error(error, self.fetch_context)
            raise error

        identifier = self.validator.normalize(identifier)
        key = self.cache_key(identifier)

        cached = self.cache.get(key)
        if cached is not None:
            self.metrics.record_cache_hit(key)
            logger.debug(f"Cache hit for {key}")
            return FetchResult(
                payload=cached,
                is_synthetic=cached.is_synthetic,
                source_label=SourceLabel.CACHE,
                error_reason=cached.error_reason,
            )

        self.metrics.record_cache_miss(key)
        self.metrics.record_call(self.source.name)

        if not self.config_provider.is_available():
            return self._handle_missing_configuration(identifier, key, permit_synthetic)

        if self.config_provider.is_demo_mode():
            return self._handle_demo_mode(identifier, key)

        return await self._fetch_remote(identifier, key, permit_synthetic)

    def _handle_missing_configuration(
        self, identifier: str, key: str, permit_synthetic: bool
    ) -> FetchResult:
        error = ConfigurationUnavailableError()
        self.metrics.record_error(error, self.fetch_context)
        logger.warning(f"API configuration not loaded while fetching {key}")

        if not permit_synthetic:
            raise error

        payload = self._generate(identifier)
        self.metrics.record_synthetic_short_circuit("no_config")
        self.cache.set(key, payload, self.fallback_ttl)
        return FetchResult(
            payload=payload,
            is_synthetic=True,
            source_label=SourceLabel.SYNTHETIC_NO_CONFIG,
        )

    def _handle_demo_mode(self, identifier: str, key: str) -> FetchResult:
        start = time.perf_counter()
        payload = self._generate(identifier, source=DEMO_SOURCE)
        self.cache.set(key, payload, self.fallback_ttl)
        self.metrics.record_synthetic_short_circuit("demo_mode")
        self.metrics.record_latency(_elapsed_ms(start), endpoint=DEMO_SOURCE)
        logger.debug(f"Demo mode, serving synthetic data for {key}")
        return FetchResult(
            payload=payload,
            is_synthetic=True,
            source_label=SourceLabel.SYNTHETIC_NO_CONFIG,
        )

    async def _fetch_remote(
        self, identifier: str, key: str, permit_synthetic: bool
    ) -> FetchResult:
        start = time.perf_counter()
        try:
            payload = await asyncio.wait_for(
                self.source.fetch(identifier), timeout=self.timeout
            )
            if payload is None or not payload.is_valid:
                raise RemoteFailureError("empty_payload", SOFT_FAILURE_REASONS[self.kind])
        except Exception as e:
            reason = self._failure_reason(e)
            self.metrics.record_error(e, self.fetch_context)
            logger.error(f"Error fetching {key}: {reason}")

            if not permit_synthetic:
                if isinstance(e, RemoteFailureError):
                    raise
                raise RemoteFailureError(reason) from e

            fallback = self._generate(identifier, error_reason=reason, source=FALLBACK_SOURCE)
            self.cache.set(key, fallback, self.error_ttl)
            return FetchResult(
                payload=fallback,
                is_synthetic=True,
                source_label=SourceLabel.SYNTHETIC_FALLBACK,
                error_reason=reason,
            )

        duration_ms = _elapsed_ms(start)
        self.cache.set(key, payload, self.quote_ttl)
        self.metrics.record_latency(duration_ms, endpoint=self.source.name)
        logger.info(f"{key} loaded in {duration_ms:.2f}ms")
        return FetchResult(
            payload=payload,
            is_synthetic=False,
            source_label=SourceLabel.REMOTE,
        )

    @staticmethod
    def _failure_reason(error: BaseException) -> str:
        if isinstance(error, asyncio.TimeoutError):
            return "Request timed out"
        if isinstance(error, FetchError):
            return error.detail
        return str(error) or type(error).__name__

    def _generate(
        self,
        identifier: str,
        error_reason: str | None = None,
        source: str = MOCK_SOURCE,
    ) -> Any:
        payload = self.generator.generate(identifier, error_reason=error_reason, source=source)
        if payload is None or not payload.is_valid:
            raise SyntheticGenerationError(
                f"Synthetic generator returned no usable payload for {identifier}"
            )
        return payload

    async def fetch_preferring_real(self, identifier: str) -> FetchResult:
        """Try for real data first, then accept synthetic data."""
        try:
            return await self.fetch(identifier, permit_synthetic=False)
        except (ConfigurationUnavailableError, RemoteFailureError) as e:
            logger.info(
                f"Real data unavailable for {identifier}, retrying with synthetic fallback: {e}"
            )
            return await self.fetch(identifier, permit_synthetic=True)

    async def fetch_many(
        self, identifiers: Iterable[str], permit_synthetic: bool = True
    ) -> dict[str, FetchResult]:
        """
        Fetch several identifiers concurrently.

        Results are keyed by the identifier as requested. Identifiers that
        fail are recorded and left out of the result.
        """
        requested = list(dict.fromkeys(identifiers))
        outcomes = await asyncio.gather(
            *(self.fetch(i, permit_synthetic) for i in requested),
            return_exceptions=True,
        )

        results: dict[str, FetchResult] = {}
        for identifier, outcome in zip(requested, outcomes, strict=True):
            if isinstance(outcome, FetchResult):
                results[identifier] = outcome
            else:
                logger.warning(f"Failed to load {identifier}: {outcome}")
                self.metrics.record_error(outcome, BATCH_CONTEXT)

        if requested and len(results) < len(requested):
            logger.warning(f"Loaded {len(results)}/{len(requested)} items successfully")
        return results

    def get_status(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "source": self.source.name,
            "config_available": self.config_provider.is_available(),
            "demo_mode": self.config_provider.is_demo_mode(),
            "ttl": {
                "quote": self.quote_ttl,
                "fallback": self.fallback_ttl,
                "error": self.error_ttl,
            },
            "timeout": self.timeout,
            "cache": self.cache.get_stats(),
            "metrics": self.metrics.get_stats(),
        }

    def reset(self) -> None:
        """Drop cached data and metrics, e.g. on logout."""
        self.cache.clear()
        self.metrics.reset()
