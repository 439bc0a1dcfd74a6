#!/usr/bin/env python3
"""
Micro-benchmark for Ticker Board performance.

Tests:
1. Feed message decode throughput
2. Ticker store upsert throughput
3. Per-frame snapshot + derive cost for every sort column

Usage:
    python -m ticker_board.benchmark
"""

from __future__ import annotations

import random
import time
from statistics import mean, stdev

import orjson

from .datafeed.ticker_feed import decode_message
from .datafeed.ticker_store import TickerStore
from .engine.session import ViewSession
from .types import SortColumn


def generate_mock_message(symbols: int = 300) -> bytes:
    """Generate a mock !ticker@arr message covering `symbols` instruments."""
    now_ms = int(time.time() * 1000)
    items = []

    for i in range(symbols):
        last = random.uniform(0.0001, 60000)
        open_ = last * random.uniform(0.9, 1.1)
        items.append({
            'e': '24hrTicker',
            'E': now_ms,
            's': f"SYM{i:04d}USDT",
            'p': str(last - open_),
            'P': str((last - open_) / open_ * 100),
            'w': str(last),
            'c': str(last),
            'Q': str(random.uniform(0.1, 100)),
            'o': str(open_),
            'h': str(max(last, open_) * 1.01),
            'l': str(min(last, open_) * 0.99),
            'v': f"{random.uniform(1, 1e7):.3f}",
            'q': f"{random.uniform(1, 1e9):.2f}",
            'O': now_ms - 86_400_000,
            'C': now_ms,
            'F': i * 1000,
            'L': i * 1000 + 999,
            'n': 1000,
        })

    return orjson.dumps(items)


def benchmark_decode(iterations: int = 200) -> None:
    """Benchmark feed message decoding."""
    print("\n=== Feed Decode Benchmark ===")

    messages = [generate_mock_message() for _ in range(iterations)]

    start = time.perf_counter()
    for m in messages:
        decode_message(m)
    elapsed = time.perf_counter() - start

    rate = iterations / elapsed
    print(f"  Messages decoded: {iterations:,} (300 tickers each)")
    print(f"  Time: {elapsed*1000:.1f}ms")
    print(f"  Rate: {rate:,.0f} messages/sec")
    print(f"  Per message: {elapsed/iterations*1_000_000:.1f}µs")


def benchmark_store_upsert(iterations: int = 200) -> None:
    """Benchmark store upsert throughput."""
    print("\n=== Ticker Store Upsert Benchmark ===")

    store = TickerStore()
    batches = [decode_message(generate_mock_message()) for _ in range(iterations)]

    start = time.perf_counter()
    for b in batches:
        store.upsert(b)
    elapsed = time.perf_counter() - start

    records = store.update_count
    print(f"  Records applied: {records:,}")
    print(f"  Time: {elapsed*1000:.1f}ms")
    print(f"  Rate: {records / elapsed:,.0f} records/sec")


def benchmark_frame(iterations: int = 500) -> None:
    """Benchmark snapshot + derive (what each frame needs)."""
    print("\n=== Frame Derive Benchmark ===")

    store = TickerStore()
    store.upsert(decode_message(generate_mock_message()))
    store.upsert(decode_message(generate_mock_message()))
    session = ViewSession()

    for column in SortColumn:
        session.sort_column = column
        times = []
        for _ in range(iterations):
            start = time.perf_counter()
            session.derive(store.snapshot())
            times.append(time.perf_counter() - start)

        avg_time = mean(times) * 1000
        std_time = stdev(times) * 1000
        print(f"  {column.value:<15} avg {avg_time:.3f}ms  std {std_time:.3f}ms  "
              f"max FPS {1000/avg_time:,.0f}")


def main() -> None:
    """Run all benchmarks."""
    print("=" * 60)
    print("Ticker Board Performance Benchmark")
    print("=" * 60)

    benchmark_decode()
    benchmark_store_upsert()
    benchmark_frame()

    print("\n" + "=" * 60)
    print("Benchmark complete.")
    print("=" * 60)


if __name__ == "__main__":
    main()
