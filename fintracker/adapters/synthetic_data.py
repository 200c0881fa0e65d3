"""
Synthetic generators used when live data cannot be obtained.

Quotes keep a realistic shape: known tickers start from a plausible base
price, unknown ones from a random base, and the daily change is drawn within
a volatility band around that base. Pass a seeded ``random.Random`` for
reproducible output. Exchange rates and news come from fixed tables
so their stand-ins are stable across calls.
"""

import random
from datetime import UTC, datetime, timedelta

from fintracker.adapters.base import SyntheticGenerator
from fintracker.core.logging import logger
from fintracker.models.news import NewsArticle, NewsDigest
from fintracker.models.quotes import StockQuote
from fintracker.models.rates import ExchangeRates

DEFAULT_BASE_PRICES: dict[str, float] = {
    "AAPL": 175.0,
    "GOOGL": 140.0,
    "MSFT": 350.0,
    "AMZN": 130.0,
    "TSLA": 240.0,
    "NVDA": 450.0,
    "META": 300.0,
    "NFLX": 400.0,
    "AMD": 110.0,
    "CRM": 200.0,
}

UNKNOWN_BASE_PRICE_RANGE = (50.0, 450.0)
DEFAULT_PRICE = 100.0
MOCK_SOURCE = "mock_generator"


class SyntheticQuoteGenerator(SyntheticGenerator):
    """Produces stand-in quotes for any symbol."""

    def __init__(
        self,
        rng: random.Random | None = None,
        volatility: float = 0.05,
        base_prices: dict[str, float] | None = None,
    ):
        """
        Initialize synthetic quote generator.

        Args:
            rng: Random source, a fresh unseeded one if None
            volatility: Maximum daily move as a fraction of the base price
            base_prices: Known base prices by symbol
        """
        self.rng = rng or random.Random()
        self.volatility = volatility
        self.base_prices = dict(
            DEFAULT_BASE_PRICES if base_prices is None else base_prices
        )

    def base_price(self, symbol: str) -> float:
        known = self.base_prices.get(symbol)
        if known is not None:
            return known
        low, high = UNKNOWN_BASE_PRICE_RANGE
        return self.rng.uniform(low, high)

    def generate(
        self,
        symbol: str,
        error_reason: str | None = None,
        source: str = MOCK_SOURCE,
    ) -> StockQuote:
        """Generate a synthetic quote; never raises."""
        try:
            normalized = symbol.strip().upper()
            base = self.base_price(normalized)
            change = self.rng.uniform(-1.0, 1.0) * base * self.volatility
            change_percent = (change / base) * 100

            logger.debug(f"Generating synthetic quote for {normalized}")
            return StockQuote(
                symbol=normalized,
                price=round(base, 2),
                change=round(change, 2),
                change_percent=round(change_percent, 2),
                last_updated=datetime.now(UTC),
                is_synthetic=True,
                source=source,
                error_reason=error_reason,
            )
        except Exception as e:
            logger.error(f"Synthetic quote generation failed for {symbol!r}: {e}")
            return self.default_quote(symbol, error_reason, source)

    @staticmethod
    def default_quote(
        symbol: object,
        error_reason: str | None = None,
        source: str = MOCK_SOURCE,
    ) -> StockQuote:
        """Minimal valid quote used when generation itself fails."""
        name = symbol.strip() if isinstance(symbol, str) else ""
        return StockQuote(
            symbol=name or "UNKNOWN",
            price=DEFAULT_PRICE,
            change=0.0,
            change_percent=0.0,
            is_synthetic=True,
            source=source,
            error_reason=error_reason,
        )


# Units of each currency per US dollar
DEFAULT_USD_RATES: dict[str, float] = {
    "EUR": 0.85,
    "GBP": 0.73,
    "JPY": 110.25,
    "CAD": 1.25,
    "AUD": 1.35,
    "CHF": 0.92,
    "CNY": 6.45,
}
USD = "USD"


class SyntheticRatesGenerator(SyntheticGenerator):
    """
    Stand-in exchange rates derived from a fixed dollar table.

    Bases other than USD are cross-rated through the dollar. A base missing
    from the table is treated as pegged one-to-one to the dollar.
    """

    def __init__(self, usd_rates: dict[str, float] | None = None):
        self.usd_rates = dict(DEFAULT_USD_RATES if usd_rates is None else usd_rates)

    def generate(
        self,
        base: str,
        error_reason: str | None = None,
        source: str = MOCK_SOURCE,
    ) -> ExchangeRates:
        try:
            code = base.strip().upper()
            table = {USD: 1.0, **self.usd_rates}
            base_per_usd = table.get(code, 1.0)
            rates = {
                currency: round(per_usd / base_per_usd, 6)
                for currency, per_usd in table.items()
                if currency != code
            }
        except Exception as e:
            logger.error(f"Synthetic rate generation failed for {base!r}: {e}")
            code = USD
            rates = dict(self.usd_rates) or {"EUR": DEFAULT_USD_RATES["EUR"]}

        return ExchangeRates(
            base=code or USD,
            rates=rates,
            is_synthetic=True,
            source=source,
            error_reason=error_reason,
        )


NEWS_TEMPLATES: dict[str, list[dict[str, str]]] = {
    "general": [
        {
            "title": "Stock Market Reaches New Highs Amid Economic Recovery",
            "description": "Major indices continue their upward trend as investors show confidence in economic recovery plans and strong corporate earnings reports.",
            "publisher": "Financial Times",
            "url": "https://example.com/market-highs",
        },
        {
            "title": "Tech Stocks Lead Market Rally with Strong Q4 Performance",
            "description": "Technology companies show exceptional quarterly earnings, driving overall market performance and investor sentiment.",
            "publisher": "MarketWatch",
            "url": "https://example.com/tech-rally",
        },
        {
            "title": "Federal Reserve Signals Steady Interest Rate Policy",
            "description": "Central bank officials indicate continued monetary support while monitoring inflation trends and employment data.",
            "publisher": "Reuters",
            "url": "https://example.com/fed-policy",
        },
    ],
    "business": [
        {
            "title": "Major Corporate Merger Creates Industry Giant",
            "description": "Two industry leaders announce merger plans that could reshape the business landscape and create significant market value.",
            "publisher": "Business Insider",
            "url": "https://example.com/corporate-merger",
        },
        {
            "title": "Quarterly Earnings Exceed Expectations Across Sectors",
            "description": "Companies report strong financial performance with revenue growth and improved profit margins across multiple industries.",
            "publisher": "Forbes",
            "url": "https://example.com/earnings-beat",
        },
    ],
    "technology": [
        {
            "title": "AI Revolution Transforms Financial Services Industry",
            "description": "Banks and financial institutions increasingly adopt artificial intelligence technologies to improve customer services and operational efficiency.",
            "publisher": "TechCrunch",
            "url": "https://example.com/ai-finance",
        },
        {
            "title": "Blockchain Technology Gains Mainstream Adoption",
            "description": "Major corporations implement blockchain solutions for supply chain management and financial transactions.",
            "publisher": "Wired",
            "url": "https://example.com/blockchain-adoption",
        },
    ],
    "markets": [
        {
            "title": "Commodity Prices Surge on Global Demand Growth",
            "description": "Raw material costs increase as international markets show signs of robust economic recovery and increased industrial activity.",
            "publisher": "Bloomberg",
            "url": "https://example.com/commodity-surge",
        },
        {
            "title": "Currency Markets React to Economic Policy Changes",
            "description": "Foreign exchange rates fluctuate as governments implement new fiscal policies and trade agreements.",
            "publisher": "Financial Post",
            "url": "https://example.com/currency-markets",
        },
    ],
}
DEFAULT_NEWS_CATEGORY = "general"


class SyntheticNewsGenerator(SyntheticGenerator):
    """Canned headlines per category, dated one day apart ending now."""

    def __init__(self, templates: dict[str, list[dict[str, str]]] | None = None):
        self.templates = templates or NEWS_TEMPLATES

    def generate(
        self,
        category: str,
        error_reason: str | None = None,
        source: str = MOCK_SOURCE,
    ) -> NewsDigest:
        name = category.strip().lower() if isinstance(category, str) else ""
        templates = self.templates.get(name) or self.templates[DEFAULT_NEWS_CATEGORY]
        now = datetime.now(UTC)

        articles = [
            NewsArticle(**template, published_at=now - timedelta(days=age))
            for age, template in enumerate(templates)
        ]
        return NewsDigest(
            category=name or DEFAULT_NEWS_CATEGORY,
            articles=articles,
            last_updated=now,
            is_synthetic=True,
            source=source,
            error_reason=error_reason,
        )
