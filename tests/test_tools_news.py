"""Unit tests for stock_analyst/tools/serper.py and formatting.py"""
from __future__ import annotations
import asyncio
import json

import httpx
import pytest


def _client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestSerperNewsSearch:

    def test_posts_query_with_period_and_key(self):
        from stock_analyst.tools.serper import SerperNewsSearch
        seen = {}

        def handler(request: httpx.Request):
            seen["url"] = str(request.url)
            seen["key"] = request.headers.get("X-API-KEY")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"news": [
                {"title": "NVDA beats", "link": "https://news.example/nvda", "snippet": "Record revenue"},
            ]})

        news = SerperNewsSearch("serper-key", period="last_day", client=_client(handler))
        results = asyncio.run(news.search("NVDA stock news"))

        assert seen["url"] == "https://google.serper.dev/news"
        assert seen["key"] == "serper-key"
        assert seen["body"]["q"] == "NVDA stock news"
        assert seen["body"]["tbs"] == "qdr:d"
        assert results[0].title == "NVDA beats"
        assert results[0].snippet == "Record revenue"

    def test_snippet_falls_back_to_section(self):
        from stock_analyst.tools.serper import SerperNewsSearch

        def handler(request):
            return httpx.Response(200, json={"news": [
                {"title": "t", "link": "https://a", "section": "Markets"},
                {"title": "no link"},
            ]})

        results = asyncio.run(SerperNewsSearch("k", client=_client(handler)).search("q"))
        assert len(results) == 1
        assert results[0].snippet == "Markets"

    def test_location_included_when_set(self):
        from stock_analyst.tools.serper import SerperNewsSearch
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={"news": []})

        asyncio.run(SerperNewsSearch("k", period=None, location="United States", client=_client(handler)).search("q"))
        assert bodies[0]["location"] == "United States"
        assert "tbs" not in bodies[0]

    def test_empty_results(self):
        from stock_analyst.tools.serper import SerperNewsSearch
        news = SerperNewsSearch("k", client=_client(lambda r: httpx.Response(200, json={})))
        assert asyncio.run(news.search("q")) == []

    def test_blank_query_skips_request(self):
        from stock_analyst.tools.serper import SerperNewsSearch

        def handler(request):
            raise AssertionError("no request expected")

        assert asyncio.run(SerperNewsSearch("k", client=_client(handler)).search("  ")) == []

    def test_http_error_raises_provider_error(self):
        from stock_analyst.core.protocol import ProviderError
        from stock_analyst.tools.serper import SerperNewsSearch
        news = SerperNewsSearch("k", client=_client(lambda r: httpx.Response(500)))
        with pytest.raises(ProviderError):
            asyncio.run(news.search("q"))

    def test_non_json_body_raises_provider_error(self):
        from stock_analyst.core.protocol import ProviderError
        from stock_analyst.tools.serper import SerperNewsSearch
        news = SerperNewsSearch("k", client=_client(lambda r: httpx.Response(200, text="<html>maintenance</html>")))
        with pytest.raises(ProviderError, match="unreadable"):
            asyncio.run(news.search("q"))

    def test_null_fields_tolerated(self):
        from stock_analyst.tools.serper import SerperNewsSearch

        def handler(request):
            return httpx.Response(200, json={"news": [
                {"title": None, "link": "https://n.example/1", "snippet": None},
                {"title": "No link", "link": None},
                "garbage",
            ]})

        results = asyncio.run(SerperNewsSearch("k", client=_client(handler)).search("q"))
        assert len(results) == 1
        assert results[0].title == ""
        assert results[0].link == "https://n.example/1"
        assert results[0].snippet == ""

    def test_non_json_body_becomes_no_news_analysis(self):
        from datetime import date
        from unittest.mock import AsyncMock, MagicMock
        from stock_analyst.agents.news_analyst_agent import NewsAnalysisWorker
        from stock_analyst.core.protocol import AnalysisRequest
        from stock_analyst.tools.serper import SerperNewsSearch
        news = SerperNewsSearch("k", client=_client(lambda r: httpx.Response(200, text="<html>maintenance</html>")))
        generator = MagicMock()
        generator.role = "news_analyst"
        generator.generate = AsyncMock(return_value="unused")
        result = asyncio.run(NewsAnalysisWorker(generator, news).analyze(
            AnalysisRequest(ticker="ACME", as_of_date=date(2026, 10, 19))
        ))
        assert result.succeeded is True
        assert "No recent news was found" in result.output
        assert len(result.metadata["search_status"]["errors"]) == 3
        generator.generate.assert_not_called()

    def test_missing_key_raises_configuration_error(self):
        from stock_analyst.core.protocol import ConfigurationError
        from stock_analyst.tools.serper import SerperNewsSearch
        with pytest.raises(ConfigurationError):
            asyncio.run(SerperNewsSearch(None).search("q"))

    def test_unsupported_period_rejected(self):
        from stock_analyst.tools.serper import SerperNewsSearch
        with pytest.raises(ValueError):
            SerperNewsSearch("k", period="last_decade")


class TestSerperWebSearch:

    def test_uses_search_endpoint_and_organic_key(self):
        from stock_analyst.tools.serper import SerperWebSearch
        urls = []

        def handler(request):
            urls.append(str(request.url))
            return httpx.Response(200, json={"organic": [
                {"title": "NVDA outlook", "link": "https://web.example/nvda", "snippet": "Analysts bullish"},
            ]})

        results = asyncio.run(SerperWebSearch("k", client=_client(handler)).search("NVDA outlook"))
        assert urls == ["https://google.serper.dev/search"]
        assert results[0].link == "https://web.example/nvda"


class TestFormatting:

    def test_format_search_results_numbers_entries(self):
        from stock_analyst.tools.base import SearchResult
        from stock_analyst.tools.formatting import format_search_results
        text = format_search_results(
            [SearchResult(title="A", link="https://a", snippet="first"),
             SearchResult(title="B", link="https://b")],
            heading="News",
        )
        assert text.startswith("News:")
        assert "Result 1:" in text and "Result 2:" in text
        assert "Snippet: first" in text

    def test_format_search_results_empty(self):
        from stock_analyst.tools.formatting import format_search_results
        assert format_search_results([]) == ""

    def test_long_snippets_truncated(self):
        from stock_analyst.tools.base import SearchResult
        from stock_analyst.tools.formatting import format_search_results
        text = format_search_results([SearchResult(title="A", link="https://a", snippet="x" * 1000)])
        assert "x" * 351 not in text

    def test_format_page_summaries_skips_failures(self):
        from stock_analyst.tools.base import PageSummary
        from stock_analyst.tools.formatting import format_page_summaries
        text = format_page_summaries([
            PageSummary(title="Good", link="https://good", summary="Revenue rose."),
            PageSummary.failure("https://bad", "403"),
        ])
        assert "Revenue rose." in text
        assert "https://bad" not in text
