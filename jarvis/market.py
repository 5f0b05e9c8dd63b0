#!/usr/bin/env python3
"""Market data types and the gateway interface the orchestrator talks to."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional, Protocol

from jarvis.i18n import t


class MarketFetchError(Exception):
    """Snapshot fetch failed (transport error, non-2xx or malformed payload)."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class HistoryFetchError(Exception):
    """Historical series fetch failed; callers recover with an empty chart."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


def _decimal(data: Dict[str, Any], key: str) -> Decimal:
    value = data[key]
    if value is None:
        raise ValueError(f"missing {key}")
    return Decimal(str(value))


@dataclass(frozen=True)
class MarketSnapshot:
    """24h market summary for one symbol, values kept verbatim as decimals."""
    symbol: str
    last_price: Decimal
    price_change: Decimal
    price_change_percent: Decimal
    high_price: Decimal
    low_price: Decimal
    volume: Decimal

    @classmethod
    def from_ticker(cls, symbol: str, data: Dict[str, Any]) -> "MarketSnapshot":
        """Build from a 24hr ticker payload.

        Raises:
            ValueError: a field is missing or not a number.
        """
        try:
            return cls(
                symbol=symbol,
                last_price=_decimal(data, "lastPrice"),
                price_change=_decimal(data, "priceChange"),
                price_change_percent=_decimal(data, "priceChangePercent"),
                high_price=_decimal(data, "highPrice"),
                low_price=_decimal(data, "lowPrice"),
                volume=_decimal(data, "volume"),
            )
        except (KeyError, TypeError, ArithmeticError) as e:
            raise ValueError(f"Malformed ticker payload for {symbol}: {e!r}") from e


@dataclass(frozen=True)
class PricePoint:
    """One daily close: open time (ms since epoch) and closing price."""
    time: int
    price: Decimal


def parse_klines(rows: List[List[Any]]) -> List[PricePoint]:
    """[openTime, open, high, low, close, ...] rows -> points ascending by time."""
    points = []
    for row in rows:
        try:
            points.append(PricePoint(time=int(row[0]), price=Decimal(str(row[4]))))
        except (IndexError, TypeError, ValueError, ArithmeticError) as e:
            raise ValueError(f"Malformed kline row {row!r}: {e!r}") from e
    points.sort(key=lambda p: p.time)
    return points


class MarketGateway(Protocol):
    """Read-only market data source, keyed by market-pair symbol."""

    async def fetch_ticker(self, symbol: str) -> MarketSnapshot:
        """Raises MarketFetchError."""
        ...

    async def fetch_history(self, symbol: str) -> List[PricePoint]:
        """Trailing daily closes. Raises HistoryFetchError."""
        ...


def snapshot_error(symbol: str, status: Optional[int] = None) -> MarketFetchError:
    return MarketFetchError(t("errors.market_fetch", symbol=symbol), status=status)


def history_error(symbol: str, status: Optional[int] = None) -> HistoryFetchError:
    return HistoryFetchError(t("errors.history_fetch", symbol=symbol), status=status)
