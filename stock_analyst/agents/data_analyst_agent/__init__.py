"""Data Analysis Worker — one-month market data retrieval and technical analysis."""
from .data_agent import DataAnalysisWorker, compute_price_statistics, unavailable_report

__all__ = ["DataAnalysisWorker", "compute_price_statistics", "unavailable_report"]
