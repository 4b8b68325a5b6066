"""
Capability interfaces for the external collaborators.

Workers depend only on these narrow interfaces so concrete providers
(Tiingo, yfinance, Serper, Tavily, the page summarizer) can be swapped,
and replaced by mocks in tests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field


# ── Records ─────────────────────────────────────────────────────────────────────

class PriceBar(BaseModel):
    """One daily OHLCV observation"""
    date: date
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0


class SearchResult(BaseModel):
    """One news or web search hit"""
    title: str
    link: str
    snippet: str = ""


class PageSummary(BaseModel):
    """Summary of a scraped page, or an explicit failure marker"""
    title: str = ""
    link: str
    summary: str = ""
    failed: bool = Field(default=False, description="True when the page could not be scraped or summarized")
    error: Optional[str] = None

    @classmethod
    def failure(cls, link: str, error: str, title: str = "") -> "PageSummary":
        return cls(title=title, link=link, failed=True, error=error)


# ── Interfaces ──────────────────────────────────────────────────────────────────

class MarketDataProvider(ABC):
    name = "market_data"

    @abstractmethod
    async def fetch(self, ticker: str, start_date: date, end_date: date) -> List[PriceBar]:
        """
        Return daily bars for *ticker* between the two dates (inclusive).

        An empty list means no data; transport failures raise ProviderError.
        """


class NewsSearchProvider(ABC):
    name = "news_search"

    @abstractmethod
    async def search(self, query: str) -> List[SearchResult]:
        """Return news articles matching *query*."""


class WebSearchProvider(ABC):
    name = "web_search"

    @abstractmethod
    async def search(self, query: str) -> List[SearchResult]:
        """Return web pages matching *query*."""


class PageSummarizer(ABC):
    name = "page_summarizer"

    @abstractmethod
    async def summarize(self, url: str, title: str = "") -> PageSummary:
        """Scrape *url* and summarize it; never raises, returns ``PageSummary.failure`` instead."""


def validate_window(start_date: date, end_date: date) -> None:
    """Raise ValueError when the requested window is inverted."""
    if start_date > end_date:
        raise ValueError(
            f"Start date {start_date.isoformat()} must not be after end date {end_date.isoformat()}."
        )
