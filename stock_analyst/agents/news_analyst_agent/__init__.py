"""News Analysis Worker — news search, article deep dives and sentiment analysis."""
from .news_agent import NewsAnalysisWorker, news_queries, no_news_report

__all__ = ["NewsAnalysisWorker", "news_queries", "no_news_report"]
