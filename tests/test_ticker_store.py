from __future__ import annotations

import threading

from ticker_board.datafeed.ticker_store import TickerStore, merge
from ticker_board.engine.session import price_direction
from ticker_board.types import Direction


def test_merge_unknown_symbol_keeps_record(make_record) -> None:
    new = make_record(last=10.0)

    assert merge(None, new) is new


def test_merge_replaces_fields_and_carries_previous_price(make_record) -> None:
    old = make_record(last=100.0, pct=1.0, volume="5")
    new = make_record(last=101.0, pct=2.0, volume="7")

    merged = merge(old, new)

    assert merged.last_price == 101.0
    assert merged.price_change_percent == 2.0
    assert merged.base_volume == "7"
    assert merged.previous_price == 100.0


def test_two_batches_for_same_symbol(make_record) -> None:
    store = TickerStore()

    store.upsert([make_record("BTCUSDT", last=50000.0)])
    store.upsert([make_record("BTCUSDT", last=50500.0)])

    [record] = store.snapshot()
    assert record.last_price == 50500.0
    assert record.previous_price == 50000.0
    assert price_direction(record) is Direction.UP


def test_applying_same_record_twice_only_moves_previous_price(make_record) -> None:
    store = TickerStore()
    store.upsert([make_record("BTCUSDT", last=90.0)])
    update = make_record("BTCUSDT", last=100.0)

    store.upsert([update])
    once = store.get("BTCUSDT")
    store.upsert([update])
    twice = store.get("BTCUSDT")

    assert once.previous_price == 90.0
    assert twice.previous_price == 100.0
    assert twice._replace(previous_price=once.previous_price) == once


def test_store_never_holds_duplicate_symbols(make_record) -> None:
    store = TickerStore()
    symbols = ["BTCUSDT", "ETHUSDT", "BTCUSDT", "SOLUSDT", "ETHUSDT", "BTCUSDT"]

    for i, symbol in enumerate(symbols):
        store.upsert([make_record(symbol, last=float(i))])
    store.upsert([make_record("BTCUSDT", last=99.0), make_record("BTCUSDT", last=98.0)])

    snapshot = store.snapshot()
    assert len(snapshot) == len(store) == 3
    assert sorted(r.symbol for r in snapshot) == ["BTCUSDT", "ETHUSDT", "SOLUSDT"]
    btc = store.get("BTCUSDT")
    assert btc.last_price == 98.0
    assert btc.previous_price == 99.0
    assert store.update_count == len(symbols) + 2


def test_snapshot_is_a_copy(make_record) -> None:
    store = TickerStore()
    store.upsert([make_record("BTCUSDT")])

    snapshot = store.snapshot()
    store.upsert([make_record("ETHUSDT")])

    assert len(snapshot) == 1
    assert store.get("DOGEUSDT") is None


def test_reader_thread_sees_only_whole_records(make_record) -> None:
    store = TickerStore()
    batches = [
        [make_record(f"S{i}USDT", last=float(n), open_=float(n), high=float(n)) for i in range(20)]
        for n in range(200)
    ]
    torn: list = []

    def reader() -> None:
        for _ in range(500):
            for record in store.snapshot():
                if not (record.last_price == record.open_price == record.high_price):
                    torn.append(record)

    thread = threading.Thread(target=reader)
    thread.start()
    for batch in batches:
        store.upsert(batch)
    thread.join()

    assert torn == []
    assert len(store) == 20
