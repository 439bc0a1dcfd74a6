#!/usr/bin/env python3
"""
Ticker Board - Live all-market ticker table for Binance Futures.

Usage:
    python -m ticker_board.main
    python -m ticker_board.main --chart-symbol BTCUSDT --chart-interval 15m

Controls:
    q/Esc       - Quit
    j/k, ↓/↑    - Move selection
    l/h, →/←    - Cycle color palette
    Tab         - Next sort column
    r           - Toggle sort order
    Enter       - Open candle chart (any key closes it)
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from dataclasses import replace
from logging.handlers import RotatingFileHandler

from .config import DashboardConfig, load_config

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(log_file: str, level: str) -> None:
    """Log to a rotating file; the terminal belongs to the TUI."""
    handler = RotatingFileHandler(log_file, maxBytes=5 * 1024 * 1024, backupCount=3)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)


async def main(config: DashboardConfig) -> int:
    """Main entry point - runs feed, ingestion and UI concurrently. Returns the exit code."""

    # Import here to avoid slow startup for --help
    from .datafeed.ticker_feed import TickerFeed
    from .datafeed.ticker_store import TickerStore
    from .engine.ingest import IngestionLoop
    from .ui.ticker_view import TickerApp

    store = TickerStore()
    feed = TickerFeed(config.feed_url, queue_maxsize=config.queue_maxsize)
    ingestion = IngestionLoop(feed.batch_queue, store)
    app = TickerApp(store, config=config, feed=feed)

    feed_error: list[BaseException] = []

    def on_feed_done(task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            feed_error.append(exc)
            app.fail(exc)

    # Create tasks
    feed_task = asyncio.create_task(feed.run())
    feed_task.add_done_callback(on_feed_done)
    ingest_task = asyncio.create_task(ingestion.run())

    try:
        # Run UI (blocks until quit); Textual restores the terminal on exit
        await app.run_async()
    finally:
        # Abandon background flows, do not wait on the network
        feed.stop()
        feed_task.cancel()
        ingest_task.cancel()
        await asyncio.gather(feed_task, ingest_task, return_exceptions=True)

    if feed_error:
        print(f"Feed error: {feed_error[0]}", file=sys.stderr)
        return 1
    return app.return_code or 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Ticker Board - Live all-market ticker table for Binance Futures",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m ticker_board.main
    python -m ticker_board.main --chart-symbol BTCUSDT --chart-interval 4h
    python -m ticker_board.main --queue-maxsize 100 --log-level DEBUG
        """
    )

    parser.add_argument(
        "--chart-symbol",
        help="Symbol for the candle chart (default: CHZUSDT)"
    )

    parser.add_argument(
        "--chart-interval",
        help="Kline interval for the candle chart (default: 1h)"
    )

    parser.add_argument(
        "--frame-interval",
        type=float,
        help="Seconds between frames (default: 0.05)"
    )

    parser.add_argument(
        "--queue-maxsize",
        type=int,
        help="Bound the feed queue, dropping the oldest batch when full (default: 0 = unbounded)"
    )

    parser.add_argument(
        "--log-file",
        help="Log file path (default: ticker_board.log)"
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: INFO)"
    )

    return parser


def apply_args(config: DashboardConfig, args: argparse.Namespace) -> DashboardConfig:
    """Overlay CLI flags that were given onto the environment config."""
    overrides = {
        "chart_symbol": args.chart_symbol.upper() if args.chart_symbol else None,
        "chart_interval": args.chart_interval,
        "frame_interval_sec": args.frame_interval,
        "queue_maxsize": args.queue_maxsize,
        "log_file": args.log_file,
        "log_level": args.log_level,
    }
    return replace(config, **{k: v for k, v in overrides.items() if v is not None})


def cli() -> None:
    """CLI entry point."""
    args = build_parser().parse_args()
    config = apply_args(load_config(), args)
    setup_logging(config.log_file, config.log_level)
    logger.info("Starting Ticker Board: %s", config)

    # Run
    try:
        code = asyncio.run(main(config))
    except KeyboardInterrupt:
        print("\nShutdown requested.")
        sys.exit(0)
    sys.exit(code)


if __name__ == "__main__":
    cli()
