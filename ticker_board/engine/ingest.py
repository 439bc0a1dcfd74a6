"""
Ingestion loop: the single writer of the ticker store.

Drains the feed's batch queue in arrival order and applies each batch to the
store. Records inside a batch are applied in the order they were received.
"""

from __future__ import annotations

import asyncio

from ..datafeed.ticker_store import TickerStore
from ..types import TickerRecord


class IngestionLoop:
    """
    Moves batches from the feed queue into the store.

    Thread-safety: must run on the event loop that owns the queue.
    """

    __slots__ = ('queue', 'store', 'batches_applied')

    def __init__(self, queue: asyncio.Queue[list[TickerRecord]], store: TickerStore) -> None:
        self.queue = queue
        self.store = store
        self.batches_applied: int = 0

    def apply(self, batch: list[TickerRecord]) -> None:
        self.store.upsert(batch)
        self.batches_applied += 1

    async def run(self) -> None:
        """Apply batches forever. Exits only by cancellation."""
        while True:
            batch = await self.queue.get()
            try:
                self.apply(batch)
            finally:
                self.queue.task_done()
