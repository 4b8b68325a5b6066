"""Unit tests for stock_analyst/tools/web_search.py and web_scraping.py"""
from __future__ import annotations
import asyncio
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest


class TestTavilyWebSearch:

    def test_empty_query_returns_empty(self):
        from stock_analyst.tools.web_search import TavilyWebSearch
        client = MagicMock()
        assert asyncio.run(TavilyWebSearch(client=client).search("   ")) == []
        client.search.assert_not_called()

    def test_returns_search_results(self):
        from stock_analyst.tools.web_search import TavilyWebSearch
        client = MagicMock()
        client.search.return_value = {
            "results": [
                {"title": "AAPL outlook", "url": "https://example.com/aapl", "content": "Analysts raise targets."},
            ]
        }
        results = asyncio.run(TavilyWebSearch(client=client, max_results=3).search("AAPL outlook"))
        assert results[0].title == "AAPL outlook"
        assert results[0].link == "https://example.com/aapl"
        assert results[0].snippet == "Analysts raise targets."
        assert client.search.call_args.kwargs["max_results"] == 3

    def test_long_content_truncated(self):
        from stock_analyst.tools.web_search import TavilyWebSearch
        client = MagicMock()
        client.search.return_value = {"results": [{"title": "t", "url": "https://u", "content": "y" * 2000}]}
        results = asyncio.run(TavilyWebSearch(client=client).search("q"))
        assert results[0].snippet.endswith("[truncated]")
        assert len(results[0].snippet) < 600

    def test_no_results(self):
        from stock_analyst.tools.web_search import TavilyWebSearch
        client = MagicMock()
        client.search.return_value = {"results": []}
        assert asyncio.run(TavilyWebSearch(client=client).search("obscure query xyz")) == []

    def test_client_error_raises_provider_error(self):
        from stock_analyst.core.protocol import ProviderError
        from stock_analyst.tools.web_search import TavilyWebSearch
        client = MagicMock()
        client.search.side_effect = Exception("network timeout")
        with pytest.raises(ProviderError, match="network timeout"):
            asyncio.run(TavilyWebSearch(client=client).search("q"))

    def test_missing_key_raises(self):
        from stock_analyst.core.protocol import ConfigurationError
        from stock_analyst.tools.web_search import TavilyWebSearch
        with pytest.raises(ConfigurationError):
            TavilyWebSearch(api_key=None)


_HTML = """
<html><head><style>.x{}</style><script>var tracking = 1;</script></head>
<body>
  <header>Site header</header>
  <nav>Home | Markets</nav>
  <article><h1>Acme beats estimates</h1><p>Revenue rose   12% on strong demand.</p></article>
  <div class="ads">Buy now</div>
  <aside class="sidebar">Related</aside>
  <footer>Copyright</footer>
</body></html>
"""


def _generator(text="Acme grew revenue 12%."):
    gen = MagicMock()
    gen.generate = AsyncMock(return_value=text)
    return gen


class TestExtractMainText:

    def test_strips_boilerplate(self):
        from stock_analyst.tools.web_scraping import extract_main_text
        text = extract_main_text(_HTML)
        assert "Acme beats estimates" in text
        assert "Revenue rose 12% on strong demand." in text
        for noise in ("Site header", "Home | Markets", "Buy now", "Related", "Copyright", "tracking"):
            assert noise not in text

    def test_empty_document(self):
        from stock_analyst.tools.web_scraping import extract_main_text
        assert extract_main_text("<html><body><nav>x</nav></body></html>") == ""


class TestWebPageSummarizer:

    def _client(self, handler):
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    def test_summarizes_page(self):
        from stock_analyst.tools.web_scraping import WebPageSummarizer
        gen = _generator()
        summarizer = WebPageSummarizer(gen, client=self._client(lambda r: httpx.Response(200, text=_HTML)))
        summary = asyncio.run(summarizer.summarize("https://news.example/acme", title="Acme"))
        assert summary.failed is False
        assert summary.summary == "Acme grew revenue 12%."
        assert summary.title == "Acme"
        context = gen.generate.call_args[0][1]
        assert "Revenue rose 12%" in context
        assert "Site header" not in context

    def test_http_error_returns_failure_marker(self):
        from stock_analyst.tools.web_scraping import WebPageSummarizer
        gen = _generator()
        summarizer = WebPageSummarizer(gen, client=self._client(lambda r: httpx.Response(403)))
        summary = asyncio.run(summarizer.summarize("https://blocked.example"))
        assert summary.failed is True
        assert "Could not scrape" in summary.error
        gen.generate.assert_not_called()

    def test_empty_page_returns_failure_marker(self):
        from stock_analyst.tools.web_scraping import WebPageSummarizer
        summarizer = WebPageSummarizer(
            _generator(), client=self._client(lambda r: httpx.Response(200, text="<html><body></body></html>"))
        )
        summary = asyncio.run(summarizer.summarize("https://empty.example"))
        assert summary.failed is True

    def test_generation_error_returns_failure_marker(self):
        from stock_analyst.core.protocol import GenerationError
        from stock_analyst.tools.web_scraping import WebPageSummarizer
        gen = MagicMock()
        gen.generate = AsyncMock(side_effect=GenerationError("model down"))
        summarizer = WebPageSummarizer(gen, client=self._client(lambda r: httpx.Response(200, text=_HTML)))
        summary = asyncio.run(summarizer.summarize("https://news.example/acme"))
        assert summary.failed is True
        assert "model down" in summary.error
