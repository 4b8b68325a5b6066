"""
Tools package — external collaborators behind narrow capability interfaces.

    base          MarketDataProvider / NewsSearchProvider / WebSearchProvider / PageSummarizer
    market_data   Tiingo and yfinance daily bars
    serper        Serper news and web search
    web_search    Tavily web search
    web_scraping  httpx + BeautifulSoup scraping with LLM summarization
    formatting    prompt-ready rendering of search results
"""

from .base import (
    MarketDataProvider,
    NewsSearchProvider,
    PageSummarizer,
    PageSummary,
    PriceBar,
    SearchResult,
    WebSearchProvider,
)
from .formatting import format_page_summaries, format_search_results
from .market_data import TiingoMarketData, YFinanceMarketData, build_market_data_provider
from .serper import SerperNewsSearch, SerperWebSearch
from .web_search import TavilyWebSearch
from .web_scraping import WebPageSummarizer

__all__ = [
    "MarketDataProvider",
    "NewsSearchProvider",
    "PageSummarizer",
    "PageSummary",
    "PriceBar",
    "SearchResult",
    "WebSearchProvider",
    "format_page_summaries",
    "format_search_results",
    "TiingoMarketData",
    "YFinanceMarketData",
    "build_market_data_provider",
    "SerperNewsSearch",
    "SerperWebSearch",
    "TavilyWebSearch",
    "WebPageSummarizer",
]
