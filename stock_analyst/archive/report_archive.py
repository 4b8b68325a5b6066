"""
Report Archive

Durable memory for the pipeline: every finished report is written to the
SQLite text store and then embedded into the vector index; new runs retrieve
the most similar past reports and receive an archivist "informed opinion".

Write ordering
--------------
1. text row (primary record)      — failure aborts the save, nothing indexed
2. embedding into the vector index — failure is logged; the row exists but is
                                     not retrievable by similarity (degraded)

Reads never raise: any failure degrades to "no prior context".
"""

from __future__ import annotations

import asyncio
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from stock_analyst.core.llm import TextGenerator
from stock_analyst.core.protocol import ArchivedReport, ArchiveWriteResult
from stock_analyst.utils.logging import get_logger
from stock_analyst.utils.tracing import traceable
from .embeddings import EmbeddingFunction
from .prompts import ARCHIVIST_PROMPT
from .report_store import ReportStore
from .vector_store import VectorIndex

logger = get_logger(__name__)

DEFAULT_TOP_K = 5
_MAX_REPORT_CHARS = 4000   # per report, inside the archivist prompt


def ticker_query(ticker: str) -> str:
    """Natural-language retrieval query derived from a ticker symbol."""
    return f"{ticker.upper()} stock analysis report: price trend, news sentiment and outlook"


def _format_reports(reports: List[ArchivedReport]) -> str:
    blocks = []
    for i, report in enumerate(reports, start=1):
        content = report.content.strip()
        if len(content) > _MAX_REPORT_CHARS:
            content = content[:_MAX_REPORT_CHARS] + " … [truncated]"
        blocks.append(
            f"--- Report {i} | {report.ticker} | {report.created_at.date().isoformat()} ---\n{content}"
        )
    return "\n\n".join(blocks)


class ReportArchive:
    """Semantic retrieval plus dual-store persistence of past reports."""

    def __init__(
        self,
        store: ReportStore,
        index: VectorIndex,
        embedder: EmbeddingFunction,
        generator: TextGenerator,
        top_k: int = DEFAULT_TOP_K,
    ) -> None:
        self.store = store
        self.index = index
        self.embedder = embedder
        self.generator = generator
        self.top_k = top_k

    # ── read path ─────────────────────────────────────────────────────────────

    async def search(self, query: str, ticker: Optional[str] = None, top_k: Optional[int] = None) -> List[ArchivedReport]:
        """
        Return up to *top_k* archived reports most similar to *query*.

        The query is embedded with the same function used at write time.
        Results come back in similarity order, most recent first on ties.
        Any failure is logged and yields ``[]``.
        """
        if not query or not query.strip():
            return []
        k = top_k or self.top_k
        try:
            vector = await self.embedder.embed(query)
            matches = await self.index.query(vector, k, ticker=ticker)
            reports = await asyncio.to_thread(self.store.get_many, [m.report_id for m in matches])
        except Exception as exc:
            logger.warning("Archive search failed [query=%s]: %s", query[:60], exc)
            return []

        logger.info("Archive: %d match(es) for query=%s", len(reports), query[:60])
        return reports

    @traceable(name="archivist", run_type="retriever", tags=["archive"])
    async def get_informed_opinion(self, ticker: str, query: Optional[str] = None) -> Optional[str]:
        """
        Synthesize a one-paragraph opinion from the reports most similar to
        *query* (default: a query derived from *ticker*).

        Returns
        -------
        str | None
            ``None`` when nothing is archived yet or synthesis fails — callers
            treat that as "no prior context", not as an error.
        """
        symbol = ticker.upper().strip()
        reports = await self.search(query or ticker_query(symbol), ticker=symbol)
        if not reports:
            logger.info("No historical reports found for ticker: %s", symbol)
            return None

        context = (
            f"Please provide an informed opinion on the past performance of ticker {symbol} "
            f"based on these {len(reports)} historical report(s):\n\n{_format_reports(reports)}"
        )
        try:
            opinion = await self.generator.generate(ARCHIVIST_PROMPT, context)
        except Exception as exc:
            logger.error("Failed to generate informed opinion for %s: %s", symbol, exc)
            return None

        logger.info("Informed opinion for ticker %s generated from %d report(s)", symbol, len(reports))
        return opinion

    async def recent_reports(self, ticker: str, limit: int = 5) -> List[ArchivedReport]:
        """Newest reports for *ticker* straight from the text store."""
        return await asyncio.to_thread(self.store.recent, ticker.upper().strip(), limit)

    # ── write path ────────────────────────────────────────────────────────────

    async def save_report(self, ticker: str, content: str) -> ArchiveWriteResult:
        """
        Persist *content* for *ticker*, then index its embedding.

        Never raises; the returned ``ArchiveWriteResult`` says which half
        succeeded.
        """
        report = ArchivedReport(
            id=uuid.uuid4().hex,
            ticker=ticker.upper().strip(),
            content=content,
            created_at=datetime.now(timezone.utc),
        )

        try:
            await asyncio.to_thread(self.store.insert, report)
        except Exception as exc:
            logger.error("Failed to save report for %s: %s", report.ticker, exc)
            return ArchiveWriteResult(error=f"text store write failed: {exc}")

        try:
            vector = await self.embedder.embed(content)
            await self.index.upsert(report.id, report.ticker, report.created_at, vector)
        except Exception as exc:
            logger.warning(
                "Report %s for %s saved but not indexed (%s index): %s",
                report.id, report.ticker, self.index.name, exc,
            )
            return ArchiveWriteResult(
                report_id=report.id,
                text_saved=True,
                embedding_saved=False,
                error=f"vector index write failed: {exc}",
            )

        logger.info("Report %s for ticker %s archived and indexed.", report.id, report.ticker)
        return ArchiveWriteResult(report_id=report.id, text_saved=True, embedding_saved=True)
