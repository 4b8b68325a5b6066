"""
Main Entry Point for the Stock Analyst

Wires concrete providers into the report pipeline and exposes a small CLI:

    stock-analyst AAPL NVDA                 # run both tickers concurrently
    stock-analyst AAPL --date 2026-10-16    # analysis window ending on that date
    stock-analyst AAPL --history            # print recent archived reports instead
"""

import argparse
import asyncio
import logging
import sys
from datetime import date
from typing import Dict, List, Optional

from .agents import CriticWorker, DataAnalysisWorker, NewsAnalysisWorker, WriterWorker
from .archive import (
    LocalVectorIndex,
    OpenAIEmbeddingFunction,
    PineconeVectorIndex,
    ReportArchive,
    ReportStore,
    connect_pinecone_index,
)
from .core.llm import build_text_generator
from .core.protocol import ArchivedReport, ConfigurationError, StockAnalystError
from .notify import DiscordNotifier
from .tools import (
    SerperNewsSearch,
    SerperWebSearch,
    TavilyWebSearch,
    WebPageSummarizer,
    build_market_data_provider,
)
from .tools.base import WebSearchProvider
from .utils.config import Settings, load_settings
from .utils.logging import set_log_level
from .workflow.orchestrator import ReportOrchestrator


def setup_logging(level: int = logging.INFO) -> None:
    """
    Configure logging for the application.

    Args:
        level: Logging level (default: INFO)
    """
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    set_log_level(level)


# ── Factories ─────────────────────────────────────────────────────────────────

def build_report_archive(settings: Settings) -> ReportArchive:
    """ReportArchive over the SQLite text store and the configured vector backend."""
    store = ReportStore(settings.report_db_path)
    backend = settings.vector_backend.lower().strip()
    if backend == "local":
        index = LocalVectorIndex(store)
    elif backend == "pinecone":
        index = PineconeVectorIndex(
            connect_pinecone_index(settings.pinecone_api_key, settings.pinecone_index)
        )
    else:
        raise ConfigurationError(f"Unknown vector backend: {settings.vector_backend!r}")

    return ReportArchive(
        store=store,
        index=index,
        embedder=OpenAIEmbeddingFunction(settings.embedding_model, settings.openai_api_key),
        generator=build_text_generator(settings, "archivist"),
        top_k=settings.archive_top_k,
    )


def _build_web_search(settings: Settings) -> WebSearchProvider:
    if settings.tavily_api_key:
        return TavilyWebSearch(settings.tavily_api_key)
    return SerperWebSearch(settings.serper_api_key, period="last_month")


def build_orchestrator(settings: Settings) -> ReportOrchestrator:
    """Assemble every collaborator named by *settings*."""
    return ReportOrchestrator(
        archive=build_report_archive(settings),
        data_worker=DataAnalysisWorker(
            build_text_generator(settings, "data_analyst"),
            build_market_data_provider(settings.market_data_provider, settings.tiingo_api_key),
            lookback_days=settings.lookback_days,
        ),
        news_worker=NewsAnalysisWorker(
            build_text_generator(settings, "news_analyst"),
            SerperNewsSearch(settings.serper_api_key),
            web_search=_build_web_search(settings),
            page_summarizer=WebPageSummarizer(build_text_generator(settings, "page_summarizer")),
        ),
        writer=WriterWorker(build_text_generator(settings, "writer")),
        critic=CriticWorker(build_text_generator(settings, "critic")),
        notifier=DiscordNotifier(settings.discord_webhook_url, max_length=settings.discord_max_length),
        max_iterations=settings.max_iterations,
    )


class StockReportDesk:
    """
    Main interface for the Stock Analyst.
    Simplifies interaction with the report pipeline.
    """

    def __init__(self, settings: Optional[Settings] = None, orchestrator: Optional[ReportOrchestrator] = None):
        """
        Initialize the report desk.

        Args:
            settings: Runtime settings (loaded from config.yaml / .env when omitted)
            orchestrator: Pre-built orchestrator, mainly for tests
        """
        self.settings = settings or load_settings()
        self.logger = logging.getLogger("stock_report_desk")
        self.orchestrator = orchestrator or build_orchestrator(self.settings)
        self.logger.info("Stock Analyst initialized successfully")

    def run(self, tickers: List[str], as_of: Optional[date] = None) -> Dict[str, str]:
        """
        Produce a report for every ticker.

        Returns:
            Mapping of ticker to report text (or failure message)
        """
        return asyncio.run(self.orchestrator.run_for_tickers(tickers, as_of))

    def history(self, ticker: str, limit: int = 5) -> List[ArchivedReport]:
        """Most recent archived reports for *ticker*."""
        return asyncio.run(self.orchestrator.archive.recent_reports(ticker, limit))

    def status(self):
        """Names and limits of every pipeline collaborator."""
        return self.orchestrator.status()


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid date {value!r}; use YYYY-MM-DD") from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stock-analyst",
        description="Produce vetted stock analysis reports and deliver them to Discord.",
    )
    parser.add_argument("tickers", nargs="+", help="One or more stock symbols, e.g. AAPL NVDA")
    parser.add_argument("--date", type=_parse_date, default=None, help="Last day of the analysis window (YYYY-MM-DD)")
    parser.add_argument("--history", action="store_true", help="Print recent archived reports instead of running")
    parser.add_argument("--limit", type=int, default=5, help="Number of archived reports shown with --history")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    try:
        desk = StockReportDesk()
    except StockAnalystError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    if args.history:
        for ticker in args.tickers:
            reports = desk.history(ticker, args.limit)
            print("=" * 60)
            print(f"{ticker.upper()}: {len(reports)} archived report(s)")
            print("=" * 60)
            for report in reports:
                print(f"\n[{report.created_at.isoformat()}] {report.id}")
                print("-" * 60)
                print(report.content)
        return 0

    results = desk.run(args.tickers, args.date)
    for ticker, text in results.items():
        print("=" * 60)
        print(ticker)
        print("=" * 60)
        print(text)
        print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
