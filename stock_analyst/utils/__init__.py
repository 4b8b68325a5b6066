"""Shared helpers: logging, LangSmith tracing and configuration."""

from .logging import get_logger
from .tracing import traceable, log_run
from .config import Settings, load_settings

__all__ = ["get_logger", "traceable", "log_run", "Settings", "load_settings"]
