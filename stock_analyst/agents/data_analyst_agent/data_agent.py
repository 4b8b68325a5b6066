"""
Data Analysis Worker — technical analysis over a one-month price window.

The worker always retrieves market data before making any numeric claim:
bars for ``[as_of_date - lookback_days, as_of_date]`` are fetched from the
configured ``MarketDataProvider``, summarised with pandas, and only then handed
to the text generator together with the computed statistics.

When the provider returns nothing (or fails) the worker does NOT call the
model; it returns an explicit "data unavailable" statement so the writer and
critic can see the gap instead of invented figures.

Usage
-----
    worker = DataAnalysisWorker(generator, YFinanceMarketData())
    result = await worker.analyze(AnalysisRequest(ticker="AAPL", as_of_date=date.today()))
"""
from __future__ import annotations

from datetime import timedelta
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from stock_analyst.core.base_agent import BaseWorker
from stock_analyst.core.llm import TextGenerator
from stock_analyst.core.protocol import AnalysisRequest, StockAnalystError, WorkerResult
from stock_analyst.tools.base import MarketDataProvider, PriceBar
from stock_analyst.utils.tracing import traceable
from .prompts import ANALYSIS_TEMPLATE, NO_ARCHIVED_CONTEXT, SYSTEM_PROMPT

DEFAULT_LOOKBACK_DAYS = 30


def compute_price_statistics(bars: List[PriceBar]) -> Dict[str, Any]:
    """
    Summary statistics for a window of daily bars.

    Returns an empty dict for an empty window.
    """
    if not bars:
        return {}

    df = pd.DataFrame([b.model_dump() for b in bars]).sort_values("date").reset_index(drop=True)

    first_close = float(df["close"].iloc[0])
    last_close = float(df["close"].iloc[-1])
    change = last_close - first_close
    change_pct = (change / first_close * 100) if first_close else 0.0

    half = len(df) // 2
    if half:
        first_half_vol = float(df["volume"].iloc[:half].mean())
        second_half_vol = float(df["volume"].iloc[half:].mean())
        if second_half_vol > first_half_vol * 1.1:
            volume_trend = "increasing"
        elif second_half_vol < first_half_vol * 0.9:
            volume_trend = "decreasing"
        else:
            volume_trend = "stable"
    else:
        volume_trend = "insufficient data"

    return {
        "first_date":       df["date"].iloc[0].isoformat(),
        "last_date":        df["date"].iloc[-1].isoformat(),
        "open":             round(float(df["open"].iloc[0]), 4),
        "first_close":      round(first_close, 4),
        "last_close":       round(last_close, 4),
        "change":           round(change, 4),
        "change_pct":       round(change_pct, 2),
        "high":             round(float(df["high"].max()), 4),
        "low":              round(float(df["low"].min()), 4),
        "avg_volume":       round(float(df["volume"].mean())),
        "volume_trend":     volume_trend,
        "trading_days":     len(df),
    }


def _format_statistics(stats: Dict[str, Any]) -> str:
    return "\n".join(f"- {key}: {value}" for key, value in stats.items())


def _format_bars(bars: List[PriceBar]) -> str:
    lines = ["date | open | high | low | close | volume"]
    for b in sorted(bars, key=lambda x: x.date):
        lines.append(
            f"{b.date.isoformat()} | {b.open:.2f} | {b.high:.2f} | {b.low:.2f} | {b.close:.2f} | {int(b.volume)}"
        )
    return "\n".join(lines)


def unavailable_report(ticker: str, start_date, end_date, reason: Optional[str] = None) -> str:
    """Explicit statement that no market data could be retrieved for the window."""
    text = (
        f"**Data unavailable:** market data for {ticker} could not be retrieved for the period "
        f"{start_date.isoformat()} to {end_date.isoformat()}. No technical analysis can be provided "
        f"and no price figures should be reported for this period."
    )
    if reason:
        text += f"\nReason: {reason}"
    return text


class DataAnalysisWorker(BaseWorker):
    """Fetches a month of bars and turns them into a technical analysis."""

    def __init__(
        self,
        generator: TextGenerator,
        market_data: MarketDataProvider,
        lookback_days: int = DEFAULT_LOOKBACK_DAYS,
    ):
        super().__init__(
            name="data_analyst",
            description="Retrieves one month of market data and performs technical analysis",
            generator=generator,
        )
        self.market_data = market_data
        self.lookback_days = lookback_days

    @traceable(name="data_analyst", run_type="chain", tags=["analysis", "market-data"])
    async def analyze(self, request: AnalysisRequest) -> WorkerResult:
        """Run the analysis for *request*; never raises."""
        return await self.call(request=request)

    async def _execute(self, request: AnalysisRequest, **kwargs: Any) -> Tuple[str, Dict[str, Any]]:
        ticker = request.ticker.upper().strip()
        end_date = request.as_of_date
        start_date = end_date - timedelta(days=self.lookback_days)

        tool_call: Dict[str, Any] = {
            "tool": self.market_data.name,
            "ticker": ticker,
            "start_date": start_date.isoformat(),
            "end_date": end_date.isoformat(),
        }
        errors: List[str] = []
        bars: List[PriceBar] = []
        try:
            bars = await self.market_data.fetch(ticker, start_date, end_date)
        except StockAnalystError as exc:
            self.logger.warning(f"Market data retrieval failed for {ticker}: {exc}")
            errors.append(str(exc))
        tool_call["data_points"] = len(bars)

        retrieval_status = {
            "success": bool(bars),
            "tools_used": [self.market_data.name],
            "errors": errors,
            "data_points": len(bars),
        }
        metadata: Dict[str, Any] = {
            "ticker": ticker,
            "tool_calls": [tool_call],
            "data_retrieval_status": retrieval_status,
        }

        if not bars:
            reason = errors[0] if errors else "the provider returned no data"
            self.logger.info(f"No market data for {ticker}; reporting data as unavailable")
            return unavailable_report(ticker, start_date, end_date, reason), metadata

        stats = compute_price_statistics(bars)
        metadata["statistics"] = stats

        context = ANALYSIS_TEMPLATE.format(
            ticker=ticker,
            start_date=start_date.isoformat(),
            end_date=end_date.isoformat(),
            statistics=_format_statistics(stats),
            bars=_format_bars(bars),
            archived_context=request.archived_context or NO_ARCHIVED_CONTEXT,
        )
        analysis = await self.generator.generate(SYSTEM_PROMPT, context)
        return analysis, metadata
