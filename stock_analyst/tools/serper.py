"""
Serper (google.serper.dev) news and web search providers.

Usage
-----
    news = SerperNewsSearch(api_key)
    articles = await news.search("NVDA stock news")   # list[SearchResult]

A missing SERPER_API_KEY raises ``ConfigurationError``; HTTP failures raise
``ProviderError``; an empty result set returns ``[]``.
"""

from __future__ import annotations

from typing import List, Optional

import httpx

from stock_analyst.core.protocol import ConfigurationError, ProviderError
from stock_analyst.utils.logging import get_logger
from .base import NewsSearchProvider, SearchResult, WebSearchProvider

logger = get_logger(__name__)

_NEWS_URL = "https://google.serper.dev/news"
_WEB_URL = "https://google.serper.dev/search"
_TIMEOUT = 20.0

PERIOD_TO_TBS = {
    "last_hour": "qdr:h",
    "last_day": "qdr:d",
    "last_week": "qdr:w",
    "last_month": "qdr:m",
    "last_year": "qdr:y",
}


class _SerperClient:
    """Shared request plumbing for both Serper endpoints."""

    url = _NEWS_URL
    result_key = "news"

    def __init__(
        self,
        api_key: Optional[str],
        period: Optional[str] = "last_week",
        language: str = "en",
        location: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        if period is not None and period not in PERIOD_TO_TBS:
            raise ValueError(f"Unsupported search period: {period!r}")
        self.api_key = (api_key or "").strip()
        self.period = period
        self.language = language
        self.location = location
        self._client = client

    def _body(self, query: str) -> dict:
        body = {
            "q": query,
            "gl": self.language,
            "hl": self.language,
            "autocorrect": False,
        }
        if self.location:
            body["location"] = self.location
        if self.period:
            body["tbs"] = PERIOD_TO_TBS[self.period]
        return body

    async def _post(self, query: str) -> dict:
        if not self.api_key:
            raise ConfigurationError("SERPER_API_KEY is not set in the environment variables.")

        headers = {"X-API-KEY": self.api_key, "Content-Type": "application/json"}
        try:
            if self._client is not None:
                response = await self._client.post(self.url, json=self._body(query), headers=headers, timeout=_TIMEOUT)
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.post(self.url, json=self._body(query), headers=headers, timeout=_TIMEOUT)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as exc:
            logger.error("Serper request failed [query=%s]: %s", query[:60], exc)
            raise ProviderError(f"Serper search failed: {exc}") from exc
        except ValueError as exc:
            logger.error("Serper returned a non-JSON body [query=%s]: %s", query[:60], exc)
            raise ProviderError("Serper returned an unreadable response") from exc

    async def search(self, query: str) -> List[SearchResult]:
        if not query or not query.strip():
            return []
        payload = await self._post(query.strip())
        if not isinstance(payload, dict):
            raise ProviderError(f"Serper returned an unexpected payload: {str(payload)[:200]}")
        items = [item for item in payload.get(self.result_key) or [] if isinstance(item, dict)]
        if not items:
            logger.warning("Serper: no %s results for query=%s", self.result_key, query[:60])
            return []

        results = [
            SearchResult(
                title=str(item.get("title") or "").strip(),
                link=str(item.get("link") or "").strip(),
                snippet=str(item.get("snippet") or item.get("section") or "").strip(),
            )
            for item in items
            if item.get("link")
        ]
        logger.info("Serper: %d %s results for query=%s", len(results), self.result_key, query[:60])
        return results


class SerperNewsSearch(_SerperClient, NewsSearchProvider):
    name = "serper_news_search"
    url = _NEWS_URL
    result_key = "news"


class SerperWebSearch(_SerperClient, WebSearchProvider):
    name = "serper_web_search"
    url = _WEB_URL
    result_key = "organic"
