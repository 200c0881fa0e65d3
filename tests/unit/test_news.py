"""Unit tests for NewsApiSource using httpx mock transports."""

from datetime import UTC, datetime

import httpx
import pytest

from fintracker.adapters.news import (
    CATEGORY_QUERIES,
    NewsApiConfig,
    NewsApiSource,
    parse_articles,
)
from fintracker.core.exceptions import SourceError

EVERYTHING_BODY = {
    "status": "ok",
    "totalResults": 2,
    "articles": [
        {
            "source": {"id": None, "name": "Reuters"},
            "title": "Markets close higher",
            "description": "Stocks rose broadly.",
            "url": "https://news.test/markets-close",
            "urlToImage": "https://news.test/markets-close.jpg",
            "publishedAt": "2024-05-01T14:30:00Z",
        },
        {
            "source": None,
            "title": "Rates on hold",
            "description": None,
            "url": "https://news.test/rates-hold",
            "publishedAt": "not a date",
        },
        {"title": "", "description": "untitled items are dropped"},
    ],
}


def make_source(handler, page_size: int = 6) -> NewsApiSource:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    config = NewsApiConfig(
        api_key="news-key", base_url="https://news.test/v2/everything", page_size=page_size
    )
    return NewsApiSource(config=config, client=client)


class TestParseArticles:
    def test_parses_articles(self):
        digest = parse_articles(EVERYTHING_BODY, "Markets")

        assert digest.category == "markets"
        assert [a.title for a in digest.articles] == ["Markets close higher", "Rates on hold"]
        first, second = digest.articles
        assert first.publisher == "Reuters"
        assert first.published_at == datetime(2024, 5, 1, 14, 30, tzinfo=UTC)
        assert first.image_url.endswith(".jpg")
        assert second.publisher == ""
        assert second.description == "No description available"
        assert second.published_at is None

    @pytest.mark.parametrize("body", [{}, {"articles": None}, {"articles": [{"title": None}]}])
    def test_no_articles(self, body):
        assert parse_articles(body, "general") is None


class TestNewsApiSource:
    @pytest.mark.asyncio
    async def test_query_parameters(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.params)
            return httpx.Response(200, json=EVERYTHING_BODY)

        source = make_source(handler, page_size=3)
        digest = await source.fetch("technology")

        params = seen[0]
        assert params["q"] == CATEGORY_QUERIES["technology"]
        assert params["pageSize"] == "3"
        assert params["apiKey"] == "news-key"
        assert params["sortBy"] == "publishedAt"
        assert params["language"] == "en"
        assert len(digest.articles) == 2

    @pytest.mark.asyncio
    async def test_unknown_category_uses_general_query(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.params["q"])
            return httpx.Response(200, json=EVERYTHING_BODY)

        await make_source(handler).get_news("gossip")

        assert seen == [CATEGORY_QUERIES["general"]]

    @pytest.mark.asyncio
    async def test_error_status_body_returns_none(self):
        body = {"status": "error", "code": "rateLimited", "message": "Too many requests"}
        source = make_source(lambda request: httpx.Response(200, json=body))

        assert await source.get_news("general") is None

    @pytest.mark.asyncio
    async def test_empty_articles_return_none(self):
        body = {"status": "ok", "totalResults": 0, "articles": []}
        source = make_source(lambda request: httpx.Response(200, json=body))

        assert await source.get_news("business") is None

    @pytest.mark.asyncio
    async def test_unauthorized_raises(self):
        source = make_source(lambda request: httpx.Response(401, json={"status": "error"}))

        with pytest.raises(SourceError) as exc_info:
            await source.get_news("general")

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_non_json_body_raises(self):
        source = make_source(lambda request: httpx.Response(200, text="<html>busy</html>"))

        with pytest.raises(SourceError, match="non-JSON"):
            await source.get_news("general")
