"""
Market data providers.

    TiingoMarketData    Tiingo daily prices REST API (TIINGO_API_KEY)
    YFinanceMarketData  Yahoo Finance via yfinance, no API key required

Both return ``PriceBar`` lists, preferring split/dividend-adjusted prices when
the source exposes them.  An empty list means "no data for the window";
transport failures raise ``ProviderError``.
"""

from __future__ import annotations

import asyncio
from datetime import date, datetime, timedelta
from typing import List, Optional

import httpx
import yfinance as yf

from stock_analyst.core.protocol import ConfigurationError, ProviderError
from stock_analyst.utils.logging import get_logger
from .base import MarketDataProvider, PriceBar, validate_window

logger = get_logger(__name__)

_TIINGO_URL = "https://api.tiingo.com/tiingo/daily"
_TIMEOUT = 30.0


def _safe_float(val) -> Optional[float]:
    """Coerce *val* to float, returning ``None`` for any non-numeric input."""
    try:
        return float(val)
    except (TypeError, ValueError):
        return None


def _pick(point: dict, adjusted: str, raw: str) -> Optional[float]:
    value = _safe_float(point.get(adjusted))
    return value if value is not None else _safe_float(point.get(raw))


class TiingoMarketData(MarketDataProvider):
    """Daily bars from the Tiingo REST API."""

    name = "tiingo"

    def __init__(self, api_key: Optional[str], client: Optional[httpx.AsyncClient] = None) -> None:
        self.api_key = (api_key or "").strip()
        self._client = client

    async def fetch(self, ticker: str, start_date: date, end_date: date) -> List[PriceBar]:
        validate_window(start_date, end_date)
        if not self.api_key:
            raise ConfigurationError("TIINGO_API_KEY is not set in the environment variables.")

        symbol = ticker.upper().strip()
        url = f"{_TIINGO_URL}/{symbol}/prices"
        params = {
            "startDate": start_date.isoformat(),
            "endDate": end_date.isoformat(),
            "token": self.api_key,
        }

        try:
            if self._client is not None:
                response = await self._client.get(url, params=params, timeout=_TIMEOUT)
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.get(url, params=params, timeout=_TIMEOUT)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            logger.error("Failed to fetch market data from Tiingo for %s: %s", symbol, exc)
            raise ProviderError(f"Tiingo request failed for {symbol}: {exc}") from exc
        except ValueError as exc:
            logger.error("Tiingo returned a non-JSON body for %s: %s", symbol, exc)
            raise ProviderError(f"Tiingo returned an unreadable response for {symbol}") from exc

        if payload is not None and not isinstance(payload, list):
            raise ProviderError(f"Tiingo returned an unexpected payload for {symbol}: {str(payload)[:200]}")

        bars = [bar for bar in (self._to_bar(p) for p in payload or []) if bar is not None]
        logger.info("Tiingo: %d bars for %s (%s → %s)", len(bars), symbol, start_date, end_date)
        return bars

    @staticmethod
    def _to_bar(point) -> Optional[PriceBar]:
        if not isinstance(point, dict):
            return None
        raw_date = point.get("date")
        close = _pick(point, "adjClose", "close")
        if not raw_date or close is None:
            return None
        try:
            bar_date = datetime.fromisoformat(str(raw_date).replace("Z", "+00:00")).date()
        except ValueError:
            logger.warning("Tiingo: skipping bar with unreadable date %r", raw_date)
            return None
        return PriceBar(
            date=bar_date,
            open=_pick(point, "adjOpen", "open") or close,
            high=_pick(point, "adjHigh", "high") or close,
            low=_pick(point, "adjLow", "low") or close,
            close=close,
            volume=_pick(point, "adjVolume", "volume") or 0.0,
        )


class YFinanceMarketData(MarketDataProvider):
    """Daily bars from Yahoo Finance.  yfinance is synchronous, so it runs in a thread."""

    name = "yfinance"

    async def fetch(self, ticker: str, start_date: date, end_date: date) -> List[PriceBar]:
        validate_window(start_date, end_date)
        symbol = ticker.upper().strip()

        def _sync_fetch():
            tk = yf.Ticker(symbol)
            # yfinance treats ``end`` as exclusive
            return tk.history(start=start_date.isoformat(), end=(end_date + timedelta(days=1)).isoformat())

        try:
            hist = await asyncio.to_thread(_sync_fetch)
        except Exception as exc:
            logger.error("yfinance history failed for %s: %s", symbol, exc)
            raise ProviderError(f"yfinance request failed for {symbol}: {exc}") from exc

        if hist is None or hist.empty:
            logger.info("yfinance: no bars for %s (%s → %s)", symbol, start_date, end_date)
            return []

        bars: List[PriceBar] = []
        for idx, row in hist.iterrows():
            close = _safe_float(row.get("Close"))
            if close is None:
                continue
            bars.append(PriceBar(
                date=idx.date(),
                open=_safe_float(row.get("Open")) or close,
                high=_safe_float(row.get("High")) or close,
                low=_safe_float(row.get("Low")) or close,
                close=close,
                volume=_safe_float(row.get("Volume")) or 0.0,
            ))
        logger.info("yfinance: %d bars for %s (%s → %s)", len(bars), symbol, start_date, end_date)
        return bars


def build_market_data_provider(provider: str, tiingo_api_key: Optional[str] = None) -> MarketDataProvider:
    """Return the provider named by *provider* ('tiingo' or 'yfinance')."""
    key = provider.lower().strip()
    if key == "tiingo":
        return TiingoMarketData(tiingo_api_key)
    if key == "yfinance":
        return YFinanceMarketData()
    raise ConfigurationError(f"Unknown market data provider: {provider!r}")
