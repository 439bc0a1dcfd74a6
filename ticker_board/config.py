"""Runtime configuration: environment defaults, overridden by CLI flags."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_FEED_URL = "wss://fstream.binance.com/ws/!ticker@arr"
DEFAULT_KLINES_URL = "https://api.binance.com/api/v1/klines"
DEFAULT_CHART_SYMBOL = "CHZUSDT"
DEFAULT_CHART_INTERVAL = "1h"
DEFAULT_CHART_TIMEOUT_SEC = 10.0
DEFAULT_FRAME_INTERVAL_SEC = 0.05
DEFAULT_LOG_FILE = "ticker_board.log"
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class DashboardConfig:
    feed_url: str = DEFAULT_FEED_URL
    klines_url: str = DEFAULT_KLINES_URL
    chart_symbol: str = DEFAULT_CHART_SYMBOL
    chart_interval: str = DEFAULT_CHART_INTERVAL
    chart_timeout_sec: float = DEFAULT_CHART_TIMEOUT_SEC
    frame_interval_sec: float = DEFAULT_FRAME_INTERVAL_SEC
    queue_maxsize: int = 0  # 0 = unbounded
    log_file: str = DEFAULT_LOG_FILE
    log_level: str = DEFAULT_LOG_LEVEL


def load_config(env: dict[str, str] | None = None) -> DashboardConfig:
    """Load config from environment with defaults for the public Binance endpoints."""
    env = os.environ if env is None else env
    return DashboardConfig(
        feed_url=env.get("TICKER_BOARD_FEED_URL", DEFAULT_FEED_URL),
        klines_url=env.get("TICKER_BOARD_KLINES_URL", DEFAULT_KLINES_URL),
        chart_symbol=env.get("TICKER_BOARD_CHART_SYMBOL", DEFAULT_CHART_SYMBOL).upper(),
        chart_interval=env.get("TICKER_BOARD_CHART_INTERVAL", DEFAULT_CHART_INTERVAL),
        chart_timeout_sec=float(
            env.get("TICKER_BOARD_CHART_TIMEOUT_SEC", DEFAULT_CHART_TIMEOUT_SEC)
        ),
        frame_interval_sec=float(
            env.get("TICKER_BOARD_FRAME_INTERVAL_SEC", DEFAULT_FRAME_INTERVAL_SEC)
        ),
        queue_maxsize=int(env.get("TICKER_BOARD_QUEUE_MAXSIZE", "0")),
        log_file=env.get("TICKER_BOARD_LOG_FILE", DEFAULT_LOG_FILE),
        log_level=env.get("TICKER_BOARD_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
    )
