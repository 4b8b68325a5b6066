"""
Tavily Web Search Provider

Real-time web search via the Tavily API, used by the news analyst for
broader context around a ticker's headlines.

Usage
-----
    from stock_analyst.tools.web_search import TavilyWebSearch

    results = await TavilyWebSearch(api_key).search("NVDA data center demand")

The Tavily client is synchronous, so calls run in a worker thread.
"""

from __future__ import annotations

import asyncio
from typing import List, Optional

from tavily import TavilyClient

from stock_analyst.core.protocol import ConfigurationError, ProviderError
from stock_analyst.utils.logging import get_logger
from .base import SearchResult, WebSearchProvider

logger = get_logger(__name__)

# ── Configuration ──────────────────────────────────────────────────────────────
_MAX_RESULTS = 5
_SEARCH_DEPTH = "basic"      # "basic" (faster) | "advanced" (deeper, costs more)
_MAX_CONTENT_CHARS = 500     # truncate each result's content snippet


class TavilyWebSearch(WebSearchProvider):
    """WebSearchProvider backed by ``tavily.TavilyClient``."""

    name = "tavily_web_search"

    def __init__(
        self,
        api_key: Optional[str] = None,
        max_results: int = _MAX_RESULTS,
        search_depth: str = _SEARCH_DEPTH,
        client: Optional[TavilyClient] = None,
    ) -> None:
        self.max_results = max_results
        self.search_depth = search_depth
        if client is None:
            key = (api_key or "").strip()
            if not key:
                raise ConfigurationError(
                    "TAVILY_API_KEY is not set. "
                    "Add it to your .env file:  TAVILY_API_KEY=tvly-..."
                )
            client = TavilyClient(api_key=key)
        self._client = client

    async def search(self, query: str) -> List[SearchResult]:
        if not query or not query.strip():
            return []

        try:
            response = await asyncio.to_thread(
                self._client.search,
                query=query.strip(),
                search_depth=self.search_depth,
                max_results=self.max_results,
            )
        except Exception as exc:
            logger.warning("Tavily search failed [query=%s]: %s", query[:60], exc)
            raise ProviderError(f"Tavily search failed: {exc}") from exc

        results = []
        for r in response.get("results", []):
            content = (r.get("content") or "").strip()
            if len(content) > _MAX_CONTENT_CHARS:
                content = content[:_MAX_CONTENT_CHARS] + " … [truncated]"
            results.append(SearchResult(
                title=(r.get("title") or "No title").strip(),
                link=(r.get("url") or "").strip(),
                snippet=content,
            ))

        logger.info("Tavily: returned %d results for query=%s", len(results), query[:60])
        return results
