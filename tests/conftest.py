from __future__ import annotations

import sys
from pathlib import Path

import pytest


ROOT = Path(__file__).resolve().parents[1]
ROOT_STR = str(ROOT)
if ROOT_STR not in sys.path:
    sys.path.insert(0, ROOT_STR)

from ticker_board.types import TickerRecord  # noqa: E402


@pytest.fixture
def make_record():
    def _make(
        symbol: str = "BTCUSDT",
        last: float = 100.0,
        previous: float | None = None,
        pct: float = 0.0,
        open_: float = 100.0,
        high: float = 100.0,
        low: float = 100.0,
        volume: str = "0",
    ) -> TickerRecord:
        return TickerRecord(
            symbol=symbol,
            last_price=last,
            previous_price=last if previous is None else previous,
            price_change=last - open_,
            price_change_percent=pct,
            weighted_avg_price=last,
            last_qty=1.0,
            open_price=open_,
            high_price=high,
            low_price=low,
            base_volume=volume,
            quote_volume=volume,
            stats_open_time=0,
            stats_close_time=86_400_000,
            first_trade_id=1,
            last_trade_id=2,
            trade_count=2,
        )

    return _make
