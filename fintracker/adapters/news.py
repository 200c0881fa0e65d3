"""
NewsAPI adapter for financial headlines.
"""

import time
from datetime import datetime
from typing import Any

import httpx

from fintracker.adapters.base import SourceConfig
from fintracker.adapters.http_source import HttpJsonSource
from fintracker.core.logging import logger
from fintracker.models.news import NewsArticle, NewsDigest

DEFAULT_BASE_URL = "https://newsapi.org/v2/everything"

CATEGORY_QUERIES: dict[str, str] = {
    "general": "finance OR stock OR market",
    "business": "business finance",
    "technology": "fintech OR financial technology",
    "markets": "stock market OR trading",
}
NEWS_CATEGORIES = tuple(CATEGORY_QUERIES)


class NewsApiConfig(SourceConfig):
    name: str = "newsapi"
    base_url: str | None = DEFAULT_BASE_URL
    page_size: int = 6


def _parse_timestamp(value: Any) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def parse_articles(data: dict[str, Any], category: str) -> NewsDigest | None:
    """Build a digest from an ``everything`` response, or None when it has no articles."""
    raw_articles = data.get("articles")
    if not isinstance(raw_articles, list):
        return None

    articles = []
    for item in raw_articles:
        if not isinstance(item, dict) or not item.get("title"):
            continue
        publisher = item.get("source")
        articles.append(
            NewsArticle(
                title=item["title"],
                description=item.get("description") or "No description available",
                publisher=(publisher.get("name") or "") if isinstance(publisher, dict) else "",
                published_at=_parse_timestamp(item.get("publishedAt")),
                url=item.get("url"),
                image_url=item.get("urlToImage"),
            )
        )

    if not articles:
        return None
    return NewsDigest(category=category, articles=articles)


class NewsApiSource(HttpJsonSource):
    """Live headlines for a news category."""

    name = "newsapi"

    def __init__(
        self,
        config: NewsApiConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        super().__init__(config or NewsApiConfig(), client)

    async def fetch(self, identifier: str) -> NewsDigest | None:
        return await self.get_news(identifier)

    async def get_news(self, category: str) -> NewsDigest | None:
        start_time = time.time()
        params = {
            "q": CATEGORY_QUERIES.get(category, CATEGORY_QUERIES["general"]),
            "language": "en",
            "sortBy": "publishedAt",
            "pageSize": getattr(self.config, "page_size", 6),
            "apiKey": self.config.api_key or "",
        }

        data = await self._get_json(
            self.config.base_url or DEFAULT_BASE_URL, params=params, identifier=category
        )
        duration = time.time() - start_time

        if data.get("status") == "error":
            logger.warning(
                "news_request_rejected",
                extra={
                    "category": category,
                    "code": data.get("code"),
                    "message": data.get("message"),
                    "adapter": self.name,
                },
            )
            return None

        digest = parse_articles(data, category)
        logger.info(
            "news_request_completed" if digest else "news_request_no_data",
            extra={
                "category": category,
                "count": len(digest.articles) if digest else 0,
                "duration": duration,
                "adapter": self.name,
            },
        )
        return digest
