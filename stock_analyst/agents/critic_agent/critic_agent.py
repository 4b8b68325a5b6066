"""
Critic Worker — a stateless single evaluation of one draft.

The raw model output is parsed fail-closed:

* an explicit ``Verdict: PASS`` / ``Verdict: FAIL`` (or ``REVISE``) line wins;
* explicit lines that disagree with each other are a FAIL;
* otherwise the draft passes only when the whole reply is a bare ``PASS``
  (markdown emphasis and punctuation aside), so prose such as
  "does NOT PASS" never counts;
* anything else, including a failed evaluation, is a FAIL.

Feedback is taken from a ``Feedback:`` section when present.
"""
from __future__ import annotations

import re
from typing import Any, Dict, Optional, Tuple

from stock_analyst.core.base_agent import BaseWorker
from stock_analyst.core.llm import TextGenerator
from stock_analyst.core.protocol import NO_FEEDBACK_PROVIDED, FailVerdict, PassVerdict, Verdict
from stock_analyst.utils.tracing import traceable
from .prompts import NO_ARCHIVED_CONTEXT, REVIEW_TEMPLATE, SYSTEM_PROMPT

_VERDICT_LINE = re.compile(r"^[\s*#_>-]*verdict[\s*_]*[:\-]\s*[*_\"']*\s*(PASS|FAIL|REVISE)\b", re.IGNORECASE | re.MULTILINE)
_BARE_PASS = re.compile(r"[\s*_#>\"'`]*PASS[\s*_\"'`.!]*", re.IGNORECASE)
_FEEDBACK = re.compile(r"feedback[\s*_]*:\s*(.*)", re.IGNORECASE | re.DOTALL)


def _extract_feedback(text: str) -> str:
    match = _FEEDBACK.search(text)
    if match:
        feedback = match.group(1).strip().strip("*_").strip()
        if feedback:
            return feedback
    return NO_FEEDBACK_PROVIDED


def parse_verdict(text: Optional[str]) -> Verdict:
    """Map raw critic output to a Verdict, defaulting to FAIL when ambiguous."""
    if not text or not text.strip():
        return FailVerdict()

    explicit = {v.upper() for v in _VERDICT_LINE.findall(text)}
    if explicit:
        if explicit == {"PASS"}:
            return PassVerdict()
        return FailVerdict(feedback=_extract_feedback(text))

    if _BARE_PASS.fullmatch(text):
        return PassVerdict()
    return FailVerdict(feedback=_extract_feedback(text))


class CriticWorker(BaseWorker):
    """Evaluates a draft against its sources."""

    def __init__(self, generator: TextGenerator):
        super().__init__(
            name="critic",
            description="Evaluates draft reports for accuracy, objectivity and formatting",
            generator=generator,
        )

    @traceable(name="critic", run_type="chain", tags=["editorial"])
    async def critique(
        self,
        ticker: str,
        draft: str,
        data_report: str,
        news_report: str,
        archived_context: Optional[str] = None,
    ) -> Verdict:
        """
        Evaluate *draft*; never raises.

        A failed evaluation counts as a FAIL whose feedback names the error.
        """
        result = await self.call(
            ticker=ticker,
            draft=draft,
            data_report=data_report,
            news_report=news_report,
            archived_context=archived_context,
        )
        if not result.succeeded:
            return FailVerdict(feedback=f"The review could not be completed ({result.error_message}). "
                                        f"Re-check the report against the sources before resubmitting.")

        verdict = parse_verdict(result.output)
        self.logger.info(f"Verdict for {ticker}: {verdict.kind}")
        return verdict

    async def _execute(
        self,
        ticker: str,
        draft: str,
        data_report: str,
        news_report: str,
        archived_context: Optional[str] = None,
        **kwargs: Any,
    ) -> Tuple[str, Dict[str, Any]]:
        context = REVIEW_TEMPLATE.format(
            ticker=ticker,
            draft=draft,
            data_report=data_report,
            news_report=news_report,
            archived_context=archived_context or NO_ARCHIVED_CONTEXT,
        )
        review = await self.generator.generate(SYSTEM_PROMPT, context)
        return review, {"ticker": ticker}
