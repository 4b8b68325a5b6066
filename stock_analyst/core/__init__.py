"""Core components: data model, worker base class, text generation."""

from .protocol import (
    MAX_ITERATIONS,
    NO_FEEDBACK_PROVIDED,
    AgentStatus,
    AnalysisRequest,
    ArchivedReport,
    ArchiveError,
    ArchiveWriteResult,
    ConfigurationError,
    FailVerdict,
    GenerationError,
    LoopState,
    PassVerdict,
    PipelineState,
    ProviderError,
    StockAnalystError,
    Verdict,
    WorkerResult,
)
from .llm import TextGenerator, build_text_generator
from .base_agent import BaseWorker

__all__ = [
    "MAX_ITERATIONS",
    "NO_FEEDBACK_PROVIDED",
    "AgentStatus",
    "AnalysisRequest",
    "ArchivedReport",
    "ArchiveError",
    "ArchiveWriteResult",
    "ConfigurationError",
    "FailVerdict",
    "GenerationError",
    "LoopState",
    "PassVerdict",
    "PipelineState",
    "ProviderError",
    "StockAnalystError",
    "Verdict",
    "WorkerResult",
    "TextGenerator",
    "build_text_generator",
    "BaseWorker",
]
