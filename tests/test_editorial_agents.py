"""Unit tests for stock_analyst/agents/writer_agent and critic_agent"""
from __future__ import annotations
import asyncio
from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest


def _generator(text="report", role="writer"):
    gen = MagicMock()
    gen.role = role
    gen.generate = AsyncMock(return_value=text)
    return gen


class TestWriterWorker:

    def test_first_draft_uses_all_sources(self):
        from stock_analyst.agents.writer_agent import WriterWorker
        gen = _generator("**Executive Summary:** ...")
        result = asyncio.run(WriterWorker(gen).write_report(
            ticker="ACME",
            as_of_date=date(2026, 10, 19),
            data_report="DATA-SECTION",
            news_report="NEWS-SECTION",
            archived_context="ARCHIVE-SECTION",
        ))
        assert result.succeeded is True
        assert result.output == "**Executive Summary:** ..."
        assert result.metadata["revision"] is False
        context = gen.generate.call_args[0][1]
        for part in ("ACME", "2026-10-19", "DATA-SECTION", "NEWS-SECTION", "ARCHIVE-SECTION"):
            assert part in context
        assert "Editor Feedback" not in context

    def test_revision_includes_feedback_and_previous_draft(self):
        from stock_analyst.agents.writer_agent import WriterWorker
        gen = _generator()
        result = asyncio.run(WriterWorker(gen).write_report(
            ticker="ACME",
            as_of_date=date(2026, 10, 19),
            data_report="d",
            news_report="n",
            feedback="Cite the closing price.",
            previous_draft="DRAFT-ONE",
        ))
        assert result.metadata["revision"] is True
        context = gen.generate.call_args[0][1]
        assert "Cite the closing price." in context
        assert "DRAFT-ONE" in context

    def test_missing_archive_context_is_stated(self):
        from stock_analyst.agents.writer_agent import WriterWorker
        gen = _generator()
        asyncio.run(WriterWorker(gen).write_report("ACME", date(2026, 10, 19), "d", "n"))
        assert "No previous analysis is available" in gen.generate.call_args[0][1]

    def test_generation_failure(self):
        from stock_analyst.agents.writer_agent import WriterWorker
        from stock_analyst.core.protocol import GenerationError
        gen = _generator()
        gen.generate.side_effect = GenerationError("timeout")
        result = asyncio.run(WriterWorker(gen).write_report("ACME", date(2026, 10, 19), "d", "n"))
        assert result.succeeded is False
        assert "timeout" in result.error_message


class TestParseVerdict:

    @pytest.mark.parametrize("text", [
        "Verdict: PASS",
        "**Verdict:** PASS\nFeedback: none needed",
        "verdict - pass",
        "The report is accurate.\n\nVerdict: PASS",
        "PASS",
        "**PASS**",
        "PASS.",
    ])
    def test_pass(self, text):
        from stock_analyst.agents.critic_agent import parse_verdict
        assert parse_verdict(text).passed is True

    @pytest.mark.parametrize("text", [
        "Verdict: FAIL\nFeedback: Fix the volume figures.",
        "Verdict: REVISE\nFeedback: Fix the volume figures.",
        "**Verdict:** FAIL\n**Feedback:** Fix the volume figures.",
    ])
    def test_fail_with_feedback(self, text):
        from stock_analyst.agents.critic_agent import parse_verdict
        verdict = parse_verdict(text)
        assert verdict.passed is False
        assert verdict.feedback == "Fix the volume figures."

    def test_explicit_fail_line_wins_over_pass_mentions(self):
        from stock_analyst.agents.critic_agent import parse_verdict
        text = "This would PASS if the numbers matched.\nVerdict: FAIL\nFeedback: numbers differ."
        assert parse_verdict(text).passed is False

    @pytest.mark.parametrize("text", [
        "Parts PASS, parts FAIL.",
        "This report does NOT PASS review: the volume figure is not in the sources.",
        "It would PASS once the closing price is cited.",
        "PASS is not warranted here.",
        "Verdict: NOT PASS",
    ])
    def test_ambiguous_tokens_fail_closed(self, text):
        from stock_analyst.agents.critic_agent import parse_verdict
        assert parse_verdict(text).passed is False

    def test_contradictory_verdict_lines_fail(self):
        from stock_analyst.agents.critic_agent import parse_verdict
        text = "Verdict: PASS\n\nOn reflection:\nVerdict: FAIL\nFeedback: Sources disagree."
        verdict = parse_verdict(text)
        assert verdict.passed is False
        assert verdict.feedback == "Sources disagree."

    @pytest.mark.parametrize("text", ["", "   ", None, "Looks mostly fine to me.", "It passes muster."])
    def test_unparseable_fails_closed(self, text):
        from stock_analyst.agents.critic_agent import parse_verdict
        from stock_analyst.core.protocol import NO_FEEDBACK_PROVIDED
        verdict = parse_verdict(text)
        assert verdict.passed is False
        assert verdict.feedback == NO_FEEDBACK_PROVIDED

    def test_fail_without_feedback_label(self):
        from stock_analyst.agents.critic_agent import parse_verdict
        from stock_analyst.core.protocol import NO_FEEDBACK_PROVIDED
        assert parse_verdict("Verdict: FAIL").feedback == NO_FEEDBACK_PROVIDED


class TestCriticWorker:

    def _critique(self, gen):
        from stock_analyst.agents.critic_agent import CriticWorker
        return asyncio.run(CriticWorker(gen).critique(
            ticker="ACME",
            draft="DRAFT",
            data_report="DATA",
            news_report="NEWS",
            archived_context=None,
        ))

    def test_pass(self):
        verdict = self._critique(_generator("Verdict: PASS", role="critic"))
        assert verdict.kind == "PASS"

    def test_fail_carries_feedback(self):
        verdict = self._critique(_generator("Verdict: FAIL\nFeedback: Add a conclusion.", role="critic"))
        assert verdict.kind == "FAIL"
        assert verdict.feedback == "Add a conclusion."

    def test_review_context_contains_draft_and_sources(self):
        gen = _generator("Verdict: PASS", role="critic")
        self._critique(gen)
        context = gen.generate.call_args[0][1]
        for part in ("DRAFT", "DATA", "NEWS", "No previous analysis is available"):
            assert part in context

    def test_generation_failure_is_fail_verdict(self):
        from stock_analyst.core.protocol import GenerationError
        gen = _generator(role="critic")
        gen.generate.side_effect = GenerationError("model unavailable")
        verdict = self._critique(gen)
        assert verdict.passed is False
        assert "model unavailable" in verdict.feedback

    def test_single_evaluation_per_call(self):
        gen = _generator("unclear", role="critic")
        self._critique(gen)
        assert gen.generate.await_count == 1
