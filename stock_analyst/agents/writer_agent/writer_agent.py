"""
Writer Worker — pure synthesis, no tools.

Combines the data analysis, the news analysis and the archivist context into
one report. On revision rounds the previous draft and the critic's feedback
are appended so the model rewrites rather than starts over.
"""
from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Tuple

from stock_analyst.core.base_agent import BaseWorker
from stock_analyst.core.llm import TextGenerator
from stock_analyst.core.protocol import WorkerResult
from stock_analyst.utils.tracing import traceable
from .prompts import NO_ARCHIVED_CONTEXT, REPORT_TEMPLATE, REVISION_TEMPLATE, SYSTEM_PROMPT


class WriterWorker(BaseWorker):
    """Turns analyst output into a report with fixed sections."""

    def __init__(self, generator: TextGenerator):
        super().__init__(
            name="writer",
            description="Synthesizes data and news analysis into a structured report",
            generator=generator,
        )

    @traceable(name="writer", run_type="chain", tags=["editorial"])
    async def write_report(
        self,
        ticker: str,
        as_of_date: date,
        data_report: str,
        news_report: str,
        archived_context: Optional[str] = None,
        feedback: Optional[str] = None,
        previous_draft: Optional[str] = None,
    ) -> WorkerResult:
        """Write (or revise, when *feedback* is given) the report; never raises."""
        return await self.call(
            ticker=ticker,
            as_of_date=as_of_date,
            data_report=data_report,
            news_report=news_report,
            archived_context=archived_context,
            feedback=feedback,
            previous_draft=previous_draft,
        )

    async def _execute(
        self,
        ticker: str,
        as_of_date: date,
        data_report: str,
        news_report: str,
        archived_context: Optional[str] = None,
        feedback: Optional[str] = None,
        previous_draft: Optional[str] = None,
        **kwargs: Any,
    ) -> Tuple[str, Dict[str, Any]]:
        context = REPORT_TEMPLATE.format(
            ticker=ticker,
            as_of_date=as_of_date.isoformat(),
            data_report=data_report,
            news_report=news_report,
            archived_context=archived_context or NO_ARCHIVED_CONTEXT,
        )
        revision = feedback is not None
        if revision:
            context += REVISION_TEMPLATE.format(
                previous_draft=previous_draft or "(not available)",
                feedback=feedback,
            )
            self.logger.info(f"Revising report for {ticker} with editor feedback")

        report = await self.generator.generate(SYSTEM_PROMPT, context)
        return report, {"ticker": ticker, "revision": revision}
