"""
Worker Communication Protocol

Defines the data structures exchanged between the orchestrator, the analysis
workers and the report archive, plus the exception hierarchy they share.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator

MAX_ITERATIONS = 5
NO_FEEDBACK_PROVIDED = "No specific feedback provided."


# ── Errors ──────────────────────────────────────────────────────────────────────

class StockAnalystError(Exception):
    """Base class for every error raised inside stock_analyst."""


class ProviderError(StockAnalystError):
    """An external collaborator (market data, search, scraping) failed."""


class GenerationError(StockAnalystError):
    """The text-generation capability failed or returned nothing."""


class ArchiveError(StockAnalystError):
    """The report text store or vector index failed."""


class ConfigurationError(StockAnalystError):
    """A required key or setting is missing or invalid."""


# ── Enums ───────────────────────────────────────────────────────────────────────

class AgentStatus(str, Enum):
    """Status of a worker call or of a whole pipeline run"""
    IDLE = "idle"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"


class LoopState(str, Enum):
    """States of the writer/critic revision loop"""
    WRITING = "writing"
    CRITIQUING = "critiquing"
    DONE = "done"


# ── Worker contract ─────────────────────────────────────────────────────────────

class AnalysisRequest(BaseModel):
    """
    Immutable input to a DataAnalysis or NewsAnalysis worker call
    """
    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "ticker": "AAPL",
                "as_of_date": "2026-10-19",
                "archived_context": "Momentum has slowed since the last earnings call...",
            }
        }

    ticker: str = Field(description="Stock symbol under analysis")
    as_of_date: date = Field(description="Last day of the analysis window")
    archived_context: Optional[str] = Field(None, description="Informed opinion from the report archive")


class WorkerResult(BaseModel):
    """
    Uniform return contract for every worker invocation
    """
    class Config:
        json_schema_extra = {
            "example": {
                "worker_name": "data_analyst",
                "succeeded": True,
                "output": "**Summary:** AAPL closed the month 4.2% higher...",
                "metadata": {"tool_calls": [{"tool": "market_data", "data_points": 21}]},
            }
        }

    worker_name: str = Field(default="unknown", description="Worker that produced this result")
    succeeded: bool = Field(description="Whether the worker produced usable output")
    output: Optional[str] = Field(None, description="Generated text when succeeded")
    error_message: Optional[str] = Field(None, description="Error description when failed")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Observability data")
    timestamp: datetime = Field(default_factory=datetime.now)

    @model_validator(mode="after")
    def _failed_results_carry_no_output(self) -> "WorkerResult":
        if not self.succeeded and self.output is not None:
            raise ValueError("a failed WorkerResult must not carry output")
        return self

    @property
    def status(self) -> AgentStatus:
        return AgentStatus.SUCCESS if self.succeeded else AgentStatus.FAILED

    @classmethod
    def ok(cls, output: str, worker_name: str = "unknown", **metadata: Any) -> "WorkerResult":
        return cls(worker_name=worker_name, succeeded=True, output=output, metadata=metadata)

    @classmethod
    def fail(cls, error_message: str, worker_name: str = "unknown", **metadata: Any) -> "WorkerResult":
        return cls(
            worker_name=worker_name,
            succeeded=False,
            output=None,
            error_message=error_message,
            metadata=metadata,
        )


class PassVerdict(BaseModel):
    """The critic accepted the draft."""
    class Config:
        frozen = True

    kind: Literal["PASS"] = "PASS"

    @property
    def passed(self) -> bool:
        return True


class FailVerdict(BaseModel):
    """The critic rejected the draft; feedback says what to fix."""
    class Config:
        frozen = True

    kind: Literal["FAIL"] = "FAIL"
    feedback: str = Field(default=NO_FEEDBACK_PROVIDED, description="Actionable revision notes")

    @property
    def passed(self) -> bool:
        return False


Verdict = Union[PassVerdict, FailVerdict]


# ── Pipeline state ──────────────────────────────────────────────────────────────

class ArchiveWriteResult(BaseModel):
    """
    Outcome of ReportArchive.save_report; the two halves can diverge
    """
    report_id: Optional[str] = Field(None, description="Primary record identifier")
    text_saved: bool = Field(default=False, description="Report text persisted in the text store")
    embedding_saved: bool = Field(default=False, description="Embedding persisted in the vector index")
    error: Optional[str] = Field(None, description="First error encountered, if any")

    @property
    def success(self) -> bool:
        return self.text_saved

    @property
    def degraded(self) -> bool:
        return self.text_saved and not self.embedding_saved


class PipelineState(BaseModel):
    """
    Record threaded through one ticker run. Each stage returns a patch that
    ``apply`` folds into a fresh copy; instances are never shared across runs.
    """
    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "ticker": "ACME",
                "as_of_date": "2026-10-19",
                "loop_state": "critiquing",
                "iteration_count": 2,
            }
        }

    ticker: str
    as_of_date: date
    archived_context: Optional[str] = None

    data_report: Optional[str] = None
    news_report: Optional[str] = None
    draft_report: Optional[str] = None
    verdict: Optional[Verdict] = Field(None, discriminator="kind")
    feedback: Optional[str] = Field(None, description="Feedback handed to the next WRITING round")

    loop_state: LoopState = LoopState.WRITING
    iteration_count: int = Field(default=0, ge=0)
    max_iterations: int = Field(default=MAX_ITERATIONS, ge=1)

    status: AgentStatus = AgentStatus.IDLE
    error: Optional[str] = None
    failed_stage: Optional[str] = None
    stage_metadata: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    archive_result: Optional[ArchiveWriteResult] = None

    @model_validator(mode="after")
    def _verdict_requires_draft(self) -> "PipelineState":
        if self.verdict is not None and self.draft_report is None:
            raise ValueError("a verdict cannot be recorded without the draft it evaluated")
        if self.iteration_count > self.max_iterations:
            raise ValueError("iteration_count exceeded max_iterations")
        return self

    def apply(self, **patch: Any) -> "PipelineState":
        """Return a validated copy of this state with *patch* merged in."""
        data = self.model_dump()
        data.update(patch)
        return PipelineState.model_validate(data)

    @property
    def accepted(self) -> bool:
        return self.verdict is not None and self.verdict.passed


# ── Archive ─────────────────────────────────────────────────────────────────────

class ArchivedReport(BaseModel):
    """
    One persisted report. Created once per run, never mutated afterwards
    """
    class Config:
        frozen = True

    id: str = Field(description="Primary key shared by the text store and the vector index")
    ticker: str
    content: str
    created_at: datetime
    embedding: Optional[List[float]] = Field(None, description="Embedding of content, when indexed")
