"""
LangSmith tracing for report runs.

``@traceable`` marks worker and archive calls as spans nested under the
ticker run; ``log_run`` records one finished ``stock_report_run`` per ticker
with its outcome summary.  Every span carries the ``stock-analyst`` tag so
runs of this desk can be filtered out of a shared project.

Tracing is on only when both are set (see .env.example):
    LANGCHAIN_TRACING_V2=true
    LANGCHAIN_API_KEY=ls__...
    LANGCHAIN_PROJECT=stock-analyst   (optional)

Otherwise ``traceable`` hands the function back untouched and ``log_run``
returns immediately.  ``.env`` is loaded when this module is imported,
so the switches it sets are seen before any function is decorated.
"""

from __future__ import annotations

import os
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, TypeVar

from dotenv import load_dotenv

from stock_analyst.utils.logging import get_logger

load_dotenv()

logger = get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

DEFAULT_PROJECT = "stock-analyst"
BASE_TAG = "stock-analyst"

_client = None


def tracing_enabled() -> bool:
    flag = os.getenv("LANGCHAIN_TRACING_V2", "").strip().lower()
    return flag in ("true", "1", "yes") and bool(os.getenv("LANGCHAIN_API_KEY", "").strip())


def tracing_project() -> str:
    return os.getenv("LANGCHAIN_PROJECT", "").strip() or DEFAULT_PROJECT


def _tags(tags: Optional[List[str]]) -> List[str]:
    return [BASE_TAG, *(t for t in (tags or []) if t != BASE_TAG)]


def get_langsmith_client():
    """Cached LangSmith ``Client``; None while tracing is off or the client cannot start."""
    global _client
    if _client is not None or not tracing_enabled():
        return _client

    from langsmith import Client  # noqa: PLC0415

    try:
        _client = Client(api_key=os.getenv("LANGCHAIN_API_KEY"))
    except Exception as exc:
        logger.warning("LangSmith client init failed: %s", exc)
        return None
    logger.info("LangSmith tracing enabled for project %s", tracing_project())
    return _client


def traceable(
    name: Optional[str] = None,
    run_type: str = "chain",
    tags: Optional[List[str]] = None,
) -> Callable[[F], F]:
    """
    Trace a sync or async callable as a LangSmith span.

    Parameters
    ----------
    name : str | None
        Span name (defaults to the function name).
    run_type : str
        "chain", "llm", "tool" or "retriever".
    tags : list[str] | None
        Extra tags; ``stock-analyst`` is always added.
    """
    def decorator(func: F) -> F:
        if not tracing_enabled():
            return func

        from langsmith import traceable as ls_traceable  # noqa: PLC0415

        return ls_traceable(
            run_type=run_type,
            name=name or func.__name__,
            tags=_tags(tags),
            project_name=tracing_project(),
        )(func)  # type: ignore[return-value]

    return decorator


def log_run(
    name: str,
    inputs: Dict[str, Any],
    outputs: Dict[str, Any],
    run_type: str = "chain",
    tags: Optional[List[str]] = None,
    error: Optional[str] = None,
    start_time: Optional[datetime] = None,
) -> None:
    """
    Record one finished run.

    *start_time* is when the run began (defaults to now); the run is closed
    at call time.  LangSmith failures are logged at debug level only, a
    report run never fails because tracing did.
    """
    client = get_langsmith_client()
    if client is None:
        return

    finished = datetime.now(timezone.utc)
    try:
        client.create_run(
            id=uuid.uuid4(),
            name=name,
            run_type=run_type,
            inputs=inputs,
            outputs=outputs,
            error=error,
            start_time=start_time or finished,
            end_time=finished,
            project_name=tracing_project(),
            tags=_tags(tags),
        )
        logger.debug("LangSmith: logged run '%s'", name)
    except Exception as exc:
        logger.debug("LangSmith log_run failed: %s", exc)
