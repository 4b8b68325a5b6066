"""Pipeline orchestration for the report crew."""

from .orchestrator import ReportOrchestrator, format_failure_message

__all__ = ["ReportOrchestrator", "format_failure_message"]
