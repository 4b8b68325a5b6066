"""
News Analysis Worker — recent news and market sentiment for one ticker.

Workflow
--------
1. News search (always first): "<T> stock news", "<T> earnings report" and
   "<T> major announcements", deduplicated by link.
2. Deep dive: up to ``max_deep_dives`` articles whose snippets are too short
   to judge are scraped and summarized by the PageSummarizer.
3. Broader context: one web search, when a WebSearchProvider is configured.
4. Generation over everything gathered.

When no article is found at all the worker reports that explicitly and does
not call the model.
"""
from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional, Tuple

from stock_analyst.core.base_agent import BaseWorker
from stock_analyst.core.llm import TextGenerator
from stock_analyst.core.protocol import AnalysisRequest, StockAnalystError, WorkerResult
from stock_analyst.tools.base import (
    NewsSearchProvider,
    PageSummarizer,
    PageSummary,
    SearchResult,
    WebSearchProvider,
)
from stock_analyst.tools.formatting import format_page_summaries, format_search_results
from stock_analyst.utils.tracing import traceable
from .prompts import ANALYSIS_TEMPLATE, NO_ARCHIVED_CONTEXT, NONE_AVAILABLE, SYSTEM_PROMPT

_SHORT_SNIPPET_CHARS = 160
_MAX_ARTICLES = 15


def news_queries(ticker: str) -> List[str]:
    """The news searches issued for *ticker*, in order."""
    return [
        f"{ticker} stock news",
        f"{ticker} earnings report",
        f"{ticker} major announcements",
    ]


def no_news_report(ticker: str, as_of_date) -> str:
    """Explicit statement that the news search found nothing."""
    return (
        f"**No recent news was found** for {ticker} as of {as_of_date.isoformat()}. "
        f"No news or sentiment analysis can be provided for this period."
    )


def _dedupe(results: List[SearchResult]) -> List[SearchResult]:
    seen = set()
    unique = []
    for r in results:
        key = r.link.strip().rstrip("/")
        if not key or key in seen:
            continue
        seen.add(key)
        unique.append(r)
    return unique


class NewsAnalysisWorker(BaseWorker):
    """Searches the news, optionally digs deeper, and writes a sentiment report."""

    def __init__(
        self,
        generator: TextGenerator,
        news_search: NewsSearchProvider,
        web_search: Optional[WebSearchProvider] = None,
        page_summarizer: Optional[PageSummarizer] = None,
        max_deep_dives: int = 3,
    ):
        super().__init__(
            name="news_analyst",
            description="Finds recent news and analyses its sentiment and market impact",
            generator=generator,
        )
        self.news_search = news_search
        self.web_search = web_search
        self.page_summarizer = page_summarizer
        self.max_deep_dives = max_deep_dives

    @traceable(name="news_analyst", run_type="chain", tags=["analysis", "news"])
    async def analyze(self, request: AnalysisRequest) -> WorkerResult:
        """Run the analysis for *request*; never raises."""
        return await self.call(request=request)

    async def _query_news(self, query: str) -> Tuple[List[SearchResult], Optional[str]]:
        try:
            return await self.news_search.search(query), None
        except StockAnalystError as exc:
            self.logger.warning(f"News search failed for '{query}': {exc}")
            return [], f"{query}: {exc}"

    async def _search_news(self, ticker: str, tool_calls: List[dict], errors: List[str]) -> List[SearchResult]:
        queries = news_queries(ticker)
        outcomes = await asyncio.gather(*(self._query_news(q) for q in queries))

        articles: List[SearchResult] = []
        for query, (found, error) in zip(queries, outcomes):
            if error:
                errors.append(error)
            tool_calls.append({"tool": self.news_search.name, "query": query, "results": len(found)})
            articles.extend(found)
        return _dedupe(articles)[:_MAX_ARTICLES]

    async def _deep_dive(self, articles: List[SearchResult], tool_calls: List[dict]) -> List[PageSummary]:
        if self.page_summarizer is None:
            return []
        candidates = [a for a in articles if len(a.snippet) < _SHORT_SNIPPET_CHARS][: self.max_deep_dives]
        if not candidates:
            return []
        summaries = await asyncio.gather(
            *(self.page_summarizer.summarize(a.link, title=a.title) for a in candidates)
        )
        for summary in summaries:
            tool_calls.append({
                "tool": self.page_summarizer.name,
                "url": summary.link,
                "failed": summary.failed,
            })
        return list(summaries)

    async def _web_context(self, ticker: str, tool_calls: List[dict], errors: List[str]) -> List[SearchResult]:
        if self.web_search is None:
            return []
        query = f"{ticker} stock analyst outlook"
        try:
            results = await self.web_search.search(query)
        except StockAnalystError as exc:
            self.logger.warning(f"Web search failed for '{query}': {exc}")
            errors.append(f"{query}: {exc}")
            results = []
        tool_calls.append({"tool": self.web_search.name, "query": query, "results": len(results)})
        return results

    async def _execute(self, request: AnalysisRequest, **kwargs: Any) -> Tuple[str, Dict[str, Any]]:
        ticker = request.ticker.upper().strip()
        tool_calls: List[dict] = []
        errors: List[str] = []

        articles = await self._search_news(ticker, tool_calls, errors)
        tools_used = [self.news_search.name]
        metadata: Dict[str, Any] = {"ticker": ticker, "tool_calls": tool_calls}

        if not articles:
            self.logger.info(f"No news articles found for {ticker}")
            metadata["search_status"] = {
                "success": False,
                "tools_used": tools_used,
                "articles_found": 0,
                "errors": errors,
            }
            return no_news_report(ticker, request.as_of_date), metadata

        summaries = await self._deep_dive(articles, tool_calls)
        if summaries:
            tools_used.append(self.page_summarizer.name)
        web_results = await self._web_context(ticker, tool_calls, errors)
        if self.web_search is not None:
            tools_used.append(self.web_search.name)

        metadata["search_status"] = {
            "success": True,
            "tools_used": tools_used,
            "articles_found": len(articles),
            "errors": errors,
        }

        context = ANALYSIS_TEMPLATE.format(
            ticker=ticker,
            as_of_date=request.as_of_date.isoformat(),
            archived_context=request.archived_context or NO_ARCHIVED_CONTEXT,
            articles=format_search_results(articles, heading="News Search Results"),
            page_summaries=format_page_summaries(summaries) or NONE_AVAILABLE,
            web_results=format_search_results(web_results, heading="Web Search Results") or NONE_AVAILABLE,
        )
        analysis = await self.generator.generate(SYSTEM_PROMPT, context)
        return analysis, metadata
