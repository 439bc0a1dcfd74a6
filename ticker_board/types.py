"""
Data types for Ticker Board.

Performance notes:
- Using NamedTuple for immutable, memory-efficient records
- A record is replaced wholesale on update, never mutated in place
"""

from __future__ import annotations

from enum import Enum
from typing import NamedTuple


class TickerRecord(NamedTuple):
    """One instrument's latest 24h rolling statistics from the feed."""
    symbol: str
    last_price: float
    previous_price: float      # last_price before the most recent merge
    price_change: float
    price_change_percent: float
    weighted_avg_price: float
    last_qty: float
    open_price: float
    high_price: float
    low_price: float
    base_volume: str           # display text, never parsed
    quote_volume: str
    stats_open_time: int
    stats_close_time: int
    first_trade_id: int
    last_trade_id: int
    trade_count: int


class Candle(NamedTuple):
    """Single OHLCV kline from the REST endpoint."""
    open_time: int
    open: float
    high: float
    low: float
    close: float
    volume: float


class SortColumn(Enum):
    SYMBOL = "Symbol"
    LAST = "Last"
    PERCENT_CHANGE = "Percent Change"
    OPEN = "Open"
    HIGH = "High"
    LOW = "Low"
    VOLUME = "Volume"

    def next(self) -> SortColumn:
        """Advance through the fixed column cycle, wrapping at the end."""
        members = list(SortColumn)
        return members[(members.index(self) + 1) % len(members)]


class SortOrder(Enum):
    ASCENDING = "asc"
    DESCENDING = "desc"

    def toggled(self) -> SortOrder:
        if self is SortOrder.ASCENDING:
            return SortOrder.DESCENDING
        return SortOrder.ASCENDING


class Mode(Enum):
    TABLE = "table"
    CHART = "chart"
    QUIT = "quit"


class Direction(Enum):
    """Last price movement relative to the previous merge."""
    UP = "up"
    DOWN = "down"
    NEUTRAL = "neutral"


class TickerRow(NamedTuple):
    """
    Render-ready row produced by the view session.

    This is what the UI consumes. Contains everything needed to paint one line.
    """
    symbol: str
    last: str
    percent_change: str
    open: str
    high: str
    low: str
    volume: str
    direction: Direction
