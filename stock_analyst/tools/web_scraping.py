"""
Page scraping and summarization.

Fetches a URL with httpx, strips navigation/boilerplate with BeautifulSoup,
and asks the text generator for a concise summary of what remains.  Every
failure is reported as ``PageSummary.failure(...)`` so a bad link never
aborts the news analysis.
"""

from __future__ import annotations

import re
from typing import Optional

import httpx
from bs4 import BeautifulSoup

from stock_analyst.core.llm import TextGenerator
from stock_analyst.utils.logging import get_logger
from .base import PageSummarizer, PageSummary

logger = get_logger(__name__)

_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
    )
}
_TIMEOUT = 30.0
_MAX_PAGE_CHARS = 12000

IRRELEVANT_SELECTORS = [
    "header", "footer", "nav", "aside", "script", "style", "noscript",
    "form", "iframe", ".sidebar", "#comments", ".ad", ".ads",
]

SUMMARY_INSTRUCTIONS = (
    "You are a brilliant researcher. Synthesize the following web page content "
    "into a concise summary of the key takeaways and main points. Report only "
    "what the page says."
)


def extract_main_text(html: str) -> str:
    """Return the visible body text of *html* with boilerplate removed."""
    soup = BeautifulSoup(html, "html.parser")
    for selector in IRRELEVANT_SELECTORS:
        for node in soup.select(selector):
            node.decompose()
    body = soup.body or soup
    return re.sub(r"\s+", " ", body.get_text(" ")).strip()


class WebPageSummarizer(PageSummarizer):
    """PageSummarizer that scrapes with httpx and summarizes with the LLM."""

    name = "web_scrape_and_summarize"

    def __init__(self, generator: TextGenerator, client: Optional[httpx.AsyncClient] = None) -> None:
        self.generator = generator
        self._client = client

    async def _fetch(self, url: str) -> str:
        if self._client is not None:
            response = await self._client.get(url, headers=_HEADERS, timeout=_TIMEOUT, follow_redirects=True)
        else:
            async with httpx.AsyncClient(follow_redirects=True) as client:
                response = await client.get(url, headers=_HEADERS, timeout=_TIMEOUT)
        response.raise_for_status()
        return response.text

    async def summarize(self, url: str, title: str = "") -> PageSummary:
        try:
            html = await self._fetch(url)
        except httpx.HTTPError as exc:
            logger.error("Error scraping %s: %s", url, exc)
            return PageSummary.failure(url, f"Could not scrape content: {exc}", title=title)

        text = extract_main_text(html)
        if not text:
            return PageSummary.failure(url, "Page has no readable content", title=title)

        try:
            summary = await self.generator.generate(SUMMARY_INSTRUCTIONS, text[:_MAX_PAGE_CHARS])
        except Exception as exc:
            logger.error("Failed to synthesize content for %s: %s", url, exc)
            return PageSummary.failure(url, f"Could not summarize content: {exc}", title=title)

        return PageSummary(title=title, link=url, summary=summary)
