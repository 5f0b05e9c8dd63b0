"""Binance public market-data client.

Two read-only calls, both keyed by market pair (e.g. BTCUSDT):
- 24h ticker snapshot   GET /api/v3/ticker/24hr?symbol=...
- daily candles         GET /api/v3/klines?symbol=...&interval=1d&startTime=...&endTime=...

Failures surface as MarketFetchError / HistoryFetchError.
"""

import asyncio
import time
from typing import Any, Callable, List, Optional

import aiohttp

from jarvis.market import (
    MarketSnapshot,
    PricePoint,
    history_error,
    parse_klines,
    snapshot_error,
)
from jarvis.utils import jarvis_log

DAY_MS = 24 * 60 * 60 * 1000


class BinanceClient:
    """Async client for the Binance REST market endpoints."""

    def __init__(
        self,
        base_url: str = "https://api.binance.com",
        timeout: float = 10.0,
        history_days: int = 7,
        interval: str = "1d",
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Args:
            base_url: API root, without trailing slash
            timeout: Total per-request timeout in seconds
            history_days: Trailing window for the candle series
            interval: Candle interval
            clock: Seconds-since-epoch source (tests pin it)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.history_days = history_days
        self.interval = interval
        self._clock = clock or time.time
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "BinanceClient":
        await self.start()
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    async def start(self):
        """Create the HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={"Accept": "application/json"},
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )

    async def close(self):
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def _get_json(self, path: str, params: dict) -> Any:
        """GET and decode JSON. Returns (status, payload); on non-2xx the payload is the body text."""
        await self.start()
        async with self._session.get(f"{self.base_url}{path}", params=params) as resp:
            if resp.status < 200 or resp.status >= 300:
                body = await resp.text()
                return resp.status, body[:200]
            return resp.status, await resp.json(content_type=None)

    # ------------------------------------------------------------------
    # Ticker snapshot
    # ------------------------------------------------------------------

    async def fetch_ticker(self, symbol: str) -> MarketSnapshot:
        try:
            status, payload = await self._get_json("/api/v3/ticker/24hr", {"symbol": symbol})
        except asyncio.TimeoutError as e:
            jarvis_log("MARKET", f"Ticker {symbol} timed out", level="ERROR")
            raise snapshot_error(symbol) from e
        except (aiohttp.ClientError, ValueError) as e:
            jarvis_log("MARKET", f"Ticker {symbol} transport error: {e}", level="ERROR")
            raise snapshot_error(symbol) from e

        if status < 200 or status >= 300:
            jarvis_log("MARKET", f"Ticker {symbol} HTTP {status}: {payload}", level="ERROR")
            raise snapshot_error(symbol, status=status)

        if not isinstance(payload, dict):
            jarvis_log("MARKET", f"Ticker {symbol} unexpected payload: {payload!r:.200}", level="ERROR")
            raise snapshot_error(symbol, status=status)
        try:
            snapshot = MarketSnapshot.from_ticker(symbol, payload)
        except ValueError as e:
            jarvis_log("MARKET", str(e), level="ERROR")
            raise snapshot_error(symbol, status=status) from e

        jarvis_log("MARKET", f"{symbol} last={snapshot.last_price} change={snapshot.price_change_percent}%")
        return snapshot

    # ------------------------------------------------------------------
    # Historical candles
    # ------------------------------------------------------------------

    def history_window(self) -> tuple:
        """(startTime, endTime) in ms for the trailing window."""
        end_time = int(self._clock() * 1000)
        return end_time - self.history_days * DAY_MS, end_time

    async def fetch_history(self, symbol: str) -> List[PricePoint]:
        start_time, end_time = self.history_window()
        params = {
            "symbol": symbol,
            "interval": self.interval,
            "startTime": str(start_time),
            "endTime": str(end_time),
        }
        try:
            status, payload = await self._get_json("/api/v3/klines", params)
        except (asyncio.TimeoutError, aiohttp.ClientError, ValueError) as e:
            jarvis_log("MARKET", f"History {symbol} failed: {e!r}", level="WARNING")
            raise history_error(symbol) from e

        if status < 200 or status >= 300 or not isinstance(payload, list):
            jarvis_log("MARKET", f"History {symbol} HTTP {status}", level="WARNING")
            raise history_error(symbol, status=status)
        try:
            points = parse_klines(payload)
        except ValueError as e:
            jarvis_log("MARKET", str(e), level="WARNING")
            raise history_error(symbol, status=status) from e

        jarvis_log("MARKET", f"{symbol} history: {len(points)} points", level="DEBUG")
        return points
