"""Agents package — the four workers of the report crew.

  DataAnalysisWorker   data_analyst_agent   One-month market data + technical analysis
  NewsAnalysisWorker   news_analyst_agent   News search, deep dives, sentiment analysis
  WriterWorker         writer_agent         Synthesizes analyst output into a report
  CriticWorker         critic_agent         PASS/FAIL review of each draft
"""

from .data_analyst_agent.data_agent import DataAnalysisWorker
from .news_analyst_agent.news_agent import NewsAnalysisWorker
from .writer_agent.writer_agent import WriterWorker
from .critic_agent.critic_agent import CriticWorker, parse_verdict

__all__ = [
    "DataAnalysisWorker",
    "NewsAnalysisWorker",
    "WriterWorker",
    "CriticWorker",
    "parse_verdict",
]
