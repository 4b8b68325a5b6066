"""Format provider records as prompt-ready text blocks."""

from __future__ import annotations

from typing import Iterable, List

from .base import PageSummary, SearchResult

_MAX_SNIPPET_CHARS = 350


def format_search_results(results: Iterable[SearchResult], heading: str = "Top Search Results") -> str:
    """
    Number each result with its title, link and snippet.

    Returns "" for an empty iterable so callers can skip the section.
    """
    lines: List[str] = []
    for i, result in enumerate(results, start=1):
        snippet = result.snippet
        if len(snippet) > _MAX_SNIPPET_CHARS:
            snippet = snippet[:_MAX_SNIPPET_CHARS] + "…"
        lines.append(f"Result {i}:")
        lines.append(f"  Title: {result.title}")
        lines.append(f"  Link: {result.link}")
        if snippet:
            lines.append(f"  Snippet: {snippet}")
        lines.append("")
    if not lines:
        return ""
    return f"{heading}:\n\n" + "\n".join(lines).rstrip()


def format_page_summaries(summaries: Iterable[PageSummary]) -> str:
    """Format successful page summaries; failed ones are skipped."""
    blocks = []
    for s in summaries:
        if s.failed or not s.summary:
            continue
        header = s.title or s.link
        blocks.append(f"--- {header} ({s.link}) ---\n{s.summary}")
    return "\n\n".join(blocks)
