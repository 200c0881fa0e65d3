"""
Shared httpx plumbing for JSON-over-HTTP data sources.
"""

from typing import Any

import httpx

from fintracker.adapters.base import DataSource, SourceConfig
from fintracker.core.exceptions import SourceError
from fintracker.core.logging import logger


class HttpJsonSource(DataSource):
    """
    Base for sources that GET a JSON object.

    Subclasses set ``error_class`` and turn the decoded body into a payload.
    A client passed in is borrowed, never closed; one created lazily here is
    owned and closed by ``aclose``.
    """

    name = "remote"
    error_class: type[SourceError] = SourceError
    user_agent = "Personal-Finance-Tracker/1.0"

    def __init__(self, config: SourceConfig, client: httpx.AsyncClient | None = None):
        self.config = config
        self._client = client
        self._owns_client = client is None

        self._request_count = 0
        self._error_count = 0

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.config.timeout,
                headers={"Accept": "application/json", "User-Agent": self.user_agent},
            )
        return self._client

    def _fail(self, message: str, status_code: int | None = None) -> SourceError:
        self._error_count += 1
        return self.error_class(message, status_code=status_code)

    async def _get_json(
        self, url: str, params: dict[str, Any] | None = None, identifier: str = ""
    ) -> dict[str, Any]:
        """GET ``url`` and return the decoded JSON object, raising ``error_class`` otherwise."""
        self._request_count += 1

        try:
            response = await self._get_client().get(url, params=params)
        except httpx.HTTPError as e:
            logger.error(
                "source_request_failed",
                extra={"identifier": identifier, "error": str(e), "adapter": self.name},
            )
            raise self._fail(f"Transport error: {e}") from e

        if response.status_code < 200 or response.status_code >= 300:
            raise self._fail(
                f"API request failed: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise self._fail("API returned a non-JSON body") from e

        if not isinstance(data, dict):
            raise self._fail("API returned an unexpected JSON shape")
        return data

    async def aclose(self) -> None:
        """Close the HTTP client if this source created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def get_performance_metrics(self) -> dict[str, Any]:
        return {
            "adapter": self.name,
            "request_count": self._request_count,
            "error_count": self._error_count,
        }
