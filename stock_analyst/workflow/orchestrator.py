"""
Report Orchestrator

Runs the full per-ticker pipeline:

    archive read ─▶ DataAnalysis ┐
                    NewsAnalysis ┴▶ WRITING ⇄ CRITIQUING ─▶ DONE ─▶ archive write ─▶ notify

The revision loop is an explicit three-state machine driven by
``PipelineState.loop_state``; every stage returns a patch folded into a fresh
``PipelineState`` with ``apply`` so no state object is ever mutated.

Transition table
----------------
    WRITING     writer ok                              → CRITIQUING
    WRITING     writer failed                          → DONE  (failed_stage="writer")
    CRITIQUING  PASS                                   → DONE
    CRITIQUING  FAIL and iteration_count < max         → WRITING (with feedback)
    CRITIQUING  FAIL and iteration_count == max        → DONE  (exhausted, last draft kept)

``run_for_ticker`` never raises: every failure becomes a failure message that
is notified and returned.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, Optional

from ..agents.critic_agent.critic_agent import CriticWorker
from ..agents.data_analyst_agent.data_agent import DataAnalysisWorker
from ..agents.news_analyst_agent.news_agent import NewsAnalysisWorker
from ..agents.writer_agent.writer_agent import WriterWorker
from ..archive.report_archive import ReportArchive
from ..core.protocol import (
    MAX_ITERATIONS,
    AgentStatus,
    AnalysisRequest,
    LoopState,
    PipelineState,
)
from ..notify.discord import Notifier
from ..utils.tracing import log_run, traceable


def format_failure_message(ticker: str, stage: Optional[str], error: Optional[str]) -> str:
    """User-visible text for a run that produced no report."""
    return (
        f"❌ **Stock report failed for {ticker}**\n\n"
        f"Stage: {stage or 'unknown'}\n"
        f"Error: {error or 'unknown error'}"
    )


class ReportOrchestrator:
    """
    Coordinates the archive, the four workers and the notifier for one or
    more tickers.

    The orchestrator:
    1. Retrieves the archivist's informed opinion
    2. Fans out to the data and news workers and joins both (fail-fast)
    3. Drives the writer/critic revision loop
    4. Archives the final draft exactly once and notifies
    """

    def __init__(
        self,
        archive: ReportArchive,
        data_worker: DataAnalysisWorker,
        news_worker: NewsAnalysisWorker,
        writer: WriterWorker,
        critic: CriticWorker,
        notifier: Notifier,
        max_iterations: int = MAX_ITERATIONS,
    ):
        """
        Initialize the orchestrator.

        Args:
            archive: Report archive for context retrieval and persistence
            data_worker: Market data analysis worker
            news_worker: News analysis worker
            writer: Report writer
            critic: Report critic
            notifier: Delivery channel for finished reports and failures
            max_iterations: Upper bound on writer/critic rounds per run
        """
        if max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        self.archive = archive
        self.data_worker = data_worker
        self.news_worker = news_worker
        self.writer = writer
        self.critic = critic
        self.notifier = notifier
        self.max_iterations = max_iterations
        self.logger = self._setup_logger()

    def _setup_logger(self) -> logging.Logger:
        """Set up logger for the orchestrator"""
        logger = logging.getLogger("orchestrator")
        if not logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - ORCHESTRATOR - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            logger.addHandler(handler)
            logger.setLevel(logging.INFO)
        return logger

    # ── Stages ────────────────────────────────────────────────────────────────

    async def _retrieve_context(self, state: PipelineState) -> PipelineState:
        opinion = await self.archive.get_informed_opinion(state.ticker)
        if opinion is None:
            self.logger.info(f"No archived context for {state.ticker}")
        return state.apply(archived_context=opinion)

    async def _analyze(self, state: PipelineState) -> PipelineState:
        """Fan out to both analysts and join; either failure aborts the run."""
        request = AnalysisRequest(
            ticker=state.ticker,
            as_of_date=state.as_of_date,
            archived_context=state.archived_context,
        )
        data_result, news_result = await asyncio.gather(
            self.data_worker.analyze(request),
            self.news_worker.analyze(request),
        )
        stage_metadata = dict(state.stage_metadata)
        stage_metadata["data_analysis"] = data_result.metadata
        stage_metadata["news_analysis"] = news_result.metadata

        for stage, result in (("data_analysis", data_result), ("news_analysis", news_result)):
            if not result.succeeded:
                self.logger.error(f"{stage} failed for {state.ticker}: {result.error_message}")
                return state.apply(
                    status=AgentStatus.FAILED,
                    failed_stage=stage,
                    error=result.error_message,
                    stage_metadata=stage_metadata,
                )

        retrieval = data_result.metadata.get("data_retrieval_status", {})
        if retrieval and not retrieval.get("success", True):
            self.logger.warning(f"Proceeding for {state.ticker} with market data unavailable")

        return state.apply(
            data_report=data_result.output,
            news_report=news_result.output,
            stage_metadata=stage_metadata,
        )

    async def _write(self, state: PipelineState) -> PipelineState:
        iteration = state.iteration_count + 1
        self.logger.info(f"[{state.ticker}] WRITING (iteration {iteration}/{state.max_iterations})")
        result = await self.writer.write_report(
            ticker=state.ticker,
            as_of_date=state.as_of_date,
            data_report=state.data_report,
            news_report=state.news_report,
            archived_context=state.archived_context,
            feedback=state.feedback,
            previous_draft=state.draft_report,
        )
        if not result.succeeded:
            self.logger.error(f"[{state.ticker}] writer failed: {result.error_message}")
            return state.apply(
                loop_state=LoopState.DONE,
                iteration_count=iteration,
                failed_stage="writer",
                error=result.error_message,
            )
        return state.apply(
            draft_report=result.output,
            verdict=None,
            loop_state=LoopState.CRITIQUING,
            iteration_count=iteration,
        )

    async def _critique(self, state: PipelineState) -> PipelineState:
        verdict = await self.critic.critique(
            ticker=state.ticker,
            draft=state.draft_report,
            data_report=state.data_report,
            news_report=state.news_report,
            archived_context=state.archived_context,
        )
        self.logger.info(f"[{state.ticker}] CRITIQUING → {verdict.kind}")
        if verdict.passed:
            return state.apply(verdict=verdict, feedback=None, loop_state=LoopState.DONE)
        if state.iteration_count < state.max_iterations:
            return state.apply(verdict=verdict, feedback=verdict.feedback, loop_state=LoopState.WRITING)
        self.logger.warning(f"[{state.ticker}] revision budget exhausted; keeping the last draft")
        return state.apply(verdict=verdict, loop_state=LoopState.DONE)

    async def _revision_loop(self, state: PipelineState) -> PipelineState:
        state = state.apply(loop_state=LoopState.WRITING, iteration_count=0, feedback=None, verdict=None)
        while state.loop_state != LoopState.DONE:
            if state.loop_state == LoopState.WRITING:
                state = await self._write(state)
            else:
                state = await self._critique(state)
        return state

    async def _archive(self, state: PipelineState) -> PipelineState:
        if state.draft_report is None:
            self.logger.info(f"No draft produced for {state.ticker}; nothing archived")
            return state.apply(status=AgentStatus.FAILED)
        result = await self.archive.save_report(state.ticker, state.draft_report)
        if not result.success:
            self.logger.error(f"Archive write failed for {state.ticker}: {result.error}")
        elif result.degraded:
            self.logger.warning(f"Report for {state.ticker} archived without embedding: {result.error}")
        # a draft kept after a writer failure is archived under a FAILED run
        status = AgentStatus.FAILED if state.failed_stage else AgentStatus.SUCCESS
        return state.apply(status=status, archive_result=result)

    # ── Pipeline ──────────────────────────────────────────────────────────────

    async def run_pipeline(self, ticker: str, as_of: Optional[date] = None) -> PipelineState:
        """
        Run every stage for *ticker* and return the final state.

        Stage failures are recorded on the state; unexpected exceptions
        propagate to ``run_for_ticker``.
        """
        symbol = (ticker or "").upper().strip()
        if not symbol:
            raise ValueError("Ticker must be a non-empty string.")

        state = PipelineState(
            ticker=symbol,
            as_of_date=as_of or date.today(),
            max_iterations=self.max_iterations,
            status=AgentStatus.RUNNING,
        )
        self.logger.info(f"Starting report run for {symbol} as of {state.as_of_date.isoformat()}")

        state = await self._retrieve_context(state)
        state = await self._analyze(state)
        if state.status == AgentStatus.FAILED:
            return state

        state = await self._revision_loop(state)
        return await self._archive(state)

    async def _notify(self, text: str) -> None:
        try:
            await self.notifier.send(text)
        except Exception as e:
            self.logger.error(f"Notification failed: {e}", exc_info=True)

    @traceable(name="run_for_ticker", run_type="chain", tags=["pipeline"])
    async def run_for_ticker(self, ticker: str, as_of: Optional[date] = None) -> str:
        """
        Produce, archive and notify the report for *ticker*.

        Returns:
            The final report text, or a failure message. Never raises.
        """
        symbol = (ticker or "").upper().strip() or "UNKNOWN"
        started = datetime.now(timezone.utc)
        state: Optional[PipelineState] = None
        try:
            state = await self.run_pipeline(ticker, as_of)
        except Exception as e:
            self.logger.error(f"Pipeline error for {symbol}: {e}", exc_info=True)
            text = format_failure_message(symbol, "pipeline", str(e))
            error = str(e)
        else:
            if state.draft_report is None:
                text = format_failure_message(symbol, state.failed_stage, state.error)
                error = state.error
            else:
                text = state.draft_report
                error = None
                if not state.accepted:
                    self.logger.warning(
                        f"Report for {symbol} delivered without critic approval "
                        f"after {state.iteration_count} iteration(s)"
                    )

        await self._notify(text)
        log_run(
            name="stock_report_run",
            inputs={"ticker": symbol, "as_of": (as_of or date.today()).isoformat()},
            outputs=self._run_summary(state),
            tags=["pipeline"],
            error=error,
            start_time=started,
        )
        return text

    @staticmethod
    def _run_summary(state: Optional[PipelineState]) -> Dict[str, Any]:
        if state is None:
            return {"status": AgentStatus.FAILED.value}
        return {
            "status": state.status.value,
            "iterations": state.iteration_count,
            "accepted": state.accepted,
            "failed_stage": state.failed_stage,
            "archived": bool(state.archive_result and state.archive_result.success),
            "indexed": bool(state.archive_result and state.archive_result.embedding_saved),
        }

    async def run_for_tickers(self, tickers: Iterable[str], as_of: Optional[date] = None) -> Dict[str, str]:
        """Run independent pipelines concurrently; returns ``{ticker: text}``."""
        symbols = list(dict.fromkeys(t.upper().strip() for t in tickers if t and t.strip()))
        texts = await asyncio.gather(*(self.run_for_ticker(s, as_of) for s in symbols))
        return dict(zip(symbols, texts))

    def status(self) -> Dict[str, Any]:
        """Collaborators and limits of this orchestrator."""
        return {
            "workers": [
                w.describe() for w in (self.data_worker, self.news_worker, self.writer, self.critic)
            ],
            "archive_index": getattr(self.archive.index, "name", "unknown"),
            "notifier": getattr(self.notifier, "name", "unknown"),
            "max_iterations": self.max_iterations,
        }
