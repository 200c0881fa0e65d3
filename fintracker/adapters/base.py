"""Collaborator interfaces consumed by the fetch orchestrator."""

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel

from fintracker.core.config import Settings, settings
from fintracker.models.fetch import DataKind
from fintracker.models.quotes import StockQuote


class SourceConfig(BaseModel):
    """Base configuration for remote data sources."""

    name: str = "remote"
    api_key: str | None = None
    base_url: str | None = None
    timeout: float = 10.0


class DataSource(ABC):
    """Abstract base class for remote sources of perishable data."""

    name: str = "remote"

    @abstractmethod
    async def fetch(self, identifier: str) -> Any | None:
        """
        Fetch the latest payload for an identifier.

        Returns None when the source answered but had no usable data
        (unknown identifier, rate limit). Raises on transport or HTTP failure.
        """
        pass


class QuoteSource(DataSource):
    """Abstract base class for remote market data sources."""

    @abstractmethod
    async def get_quote(self, symbol: str) -> StockQuote | None:
        """Fetch the latest quote for a symbol."""
        pass

    async def fetch(self, identifier: str) -> StockQuote | None:
        return await self.get_quote(identifier)


class SyntheticGenerator(ABC):
    """Produces stand-in payloads when live data cannot be used."""

    @abstractmethod
    def generate(
        self,
        identifier: str,
        error_reason: str | None = None,
        source: str = "mock_generator",
    ) -> Any:
        """Generate a synthetic payload; implementations never raise."""
        pass


class ConfigurationProvider(ABC):
    """Tells the orchestrator whether live data may be requested."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check whether credentials for the remote source are present."""
        pass

    @abstractmethod
    def is_demo_mode(self) -> bool:
        """Check whether the user chose demo data over live data."""
        pass


class IdentifierValidator(ABC):
    """Pure predicate on identifier format, plus its canonical form."""

    @abstractmethod
    def is_valid(self, identifier: str) -> bool:
        pass

    def normalize(self, identifier: str) -> str:
        return identifier.strip().upper()


class SettingsConfigurationProvider(ConfigurationProvider):
    """
    Configuration provider backed by application settings.

    Quotes and news need an API key and honour demo mode. Exchange rates come
    from a keyless endpoint and are always fetched live when one is set.
    """

    def __init__(
        self,
        app_settings: Settings | None = None,
        kind: DataKind = DataKind.QUOTE,
    ):
        self.settings = app_settings or settings
        self.kind = DataKind(kind)

    def is_available(self) -> bool:
        if self.kind is DataKind.RATES:
            return self.settings.has_exchange_rate_endpoint()
        if self.kind is DataKind.NEWS:
            return self.settings.has_news_credentials()
        return self.settings.has_quote_credentials()

    def is_demo_mode(self) -> bool:
        if self.kind is DataKind.RATES:
            return False
        return self.settings.is_demo_mode()


class StaticConfigurationProvider(ConfigurationProvider):
    """Fixed answers, for wiring without environment-driven settings."""

    def __init__(self, available: bool = True, demo_mode: bool = False):
        self.available = available
        self.demo_mode = demo_mode

    def is_available(self) -> bool:
        return self.available

    def is_demo_mode(self) -> bool:
        return self.demo_mode
