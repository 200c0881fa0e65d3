import os

from pydantic_settings import BaseSettings, SettingsConfigDict

PLACEHOLDER_KEY_PREFIX = "YOUR_"
DEMO_MODE_KEY = "DEMO_MODE"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=True, extra="ignore"
    )

    PROJECT_NAME: str = "Personal Finance Tracker"

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Alpha Vantage quote source
    ALPHA_VANTAGE_KEY: str = os.getenv("ALPHA_VANTAGE_KEY", "")
    ALPHA_VANTAGE_URL: str = "https://www.alphavantage.co/query"
    DEMO_MODE: bool = os.getenv("DEMO_MODE", "False").lower() == "true"

    # Exchange rate source, keyless
    EXCHANGE_RATE_URL: str = os.getenv(
        "EXCHANGE_RATE_URL", "https://api.exchangerate-api.com/v4/latest"
    )

    # NewsAPI source
    NEWS_API_KEY: str = os.getenv("NEWS_API_KEY", "")
    NEWS_API_URL: str = "https://newsapi.org/v2/everything"
    NEWS_PAGE_SIZE: int = 6

    # Cache lifetimes (seconds)
    CACHE_QUOTE_TTL: float = 60.0
    CACHE_FALLBACK_TTL: float = 30.0
    CACHE_ERROR_TTL: float = 10.0
    CACHE_RATES_TTL: float = 300.0
    CACHE_NEWS_TTL: float = 300.0
    CACHE_NEWS_FALLBACK_TTL: float = 150.0
    CACHE_MAX_SIZE: int = 100
    CACHE_CLEANUP_INTERVAL: float = 600.0

    # Remote calls
    API_TIMEOUT: float = 10.0

    # Validation
    MAX_SYMBOL_LENGTH: int = 10

    # Metrics
    METRICS_LATENCY_WINDOW: int = 100
    METRICS_ERROR_WINDOW: int = 10
    SLOW_CALL_THRESHOLD_MS: float = 2000.0

    @staticmethod
    def _is_real_key(key: str) -> bool:
        key = key.strip()
        return bool(key) and not key.startswith(PLACEHOLDER_KEY_PREFIX)

    def has_quote_credentials(self) -> bool:
        """True when an Alpha Vantage key is set and is not a template placeholder."""
        return self._is_real_key(self.ALPHA_VANTAGE_KEY)

    def has_news_credentials(self) -> bool:
        return self._is_real_key(self.NEWS_API_KEY)

    def has_exchange_rate_endpoint(self) -> bool:
        return bool(self.EXCHANGE_RATE_URL.strip())

    def is_demo_mode(self) -> bool:
        return self.DEMO_MODE or self.ALPHA_VANTAGE_KEY.strip() == DEMO_MODE_KEY


settings = Settings()
