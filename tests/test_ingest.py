from __future__ import annotations

import asyncio

import orjson

from ticker_board.datafeed.ticker_feed import TickerFeed
from ticker_board.datafeed.ticker_store import TickerStore
from ticker_board.engine.ingest import IngestionLoop


def test_batches_applied_in_arrival_order(make_record) -> None:
    async def scenario() -> TickerStore:
        queue: asyncio.Queue = asyncio.Queue()
        store = TickerStore()
        loop = IngestionLoop(queue, store)
        task = asyncio.create_task(loop.run())

        queue.put_nowait([make_record("BTCUSDT", last=1.0), make_record("ETHUSDT", last=10.0)])
        queue.put_nowait([make_record("BTCUSDT", last=2.0)])
        queue.put_nowait([make_record("BTCUSDT", last=3.0), make_record("BTCUSDT", last=4.0)])
        await queue.join()

        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        assert loop.batches_applied == 3
        return store

    store = asyncio.run(scenario())

    btc = store.get("BTCUSDT")
    assert btc.last_price == 4.0
    assert btc.previous_price == 3.0
    assert store.get("ETHUSDT").last_price == 10.0


def test_feed_to_store_pipeline() -> None:
    def message(symbol: str, last: str) -> bytes:
        return orjson.dumps([{
            "e": "24hrTicker", "E": 1, "s": symbol, "p": "0", "P": "0", "w": last,
            "c": last, "Q": "1", "o": last, "h": last, "l": last, "v": "10", "q": "20",
            "O": 0, "C": 1, "F": 1, "L": 2, "n": 2,
        }])

    async def scenario() -> TickerStore:
        feed = TickerFeed()
        store = TickerStore()
        task = asyncio.create_task(IngestionLoop(feed.batch_queue, store).run())

        feed._handle_ws_message(message("BTCUSDT", "50000"))
        feed._handle_ws_message(b"[{]")
        feed._handle_ws_message(message("BTCUSDT", "50500"))
        await feed.batch_queue.join()

        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        return store

    store = asyncio.run(scenario())

    [record] = store.snapshot()
    assert record.last_price == 50500.0
    assert record.previous_price == 50000.0
