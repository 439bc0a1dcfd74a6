"""
Latest-state ticker store keyed by symbol.

HOT PATH: upsert() is called for every feed message, each carrying the full
universe of active instruments (~300 records for Binance Futures).

Concurrency strategy:
1. Exactly one writer (the ingestion loop) and one reader (the render loop)
2. A single lock, held only for the dict assignment or the dict copy
3. Records are immutable NamedTuples, so a reader can never see half a record
4. Merging happens outside the lock; only the publish step is guarded
"""

from __future__ import annotations

import threading
from typing import Iterable

from ..types import TickerRecord


def merge(old: TickerRecord | None, new: TickerRecord) -> TickerRecord:
    """
    Replace a record wholesale, carrying the pre-update last price forward.

    An unknown symbol keeps whatever previous_price the decoder gave it
    (equal to its last price, so it renders neutral).
    """
    if old is None:
        return new
    return new._replace(previous_price=old.last_price)


class TickerStore:
    """
    Mapping of symbol -> latest TickerRecord.

    Thread-safety: safe for one writer and any number of readers, whether
    they share an event loop or run on separate threads.
    """

    __slots__ = ('_records', '_lock', 'update_count')

    def __init__(self) -> None:
        self._records: dict[str, TickerRecord] = {}
        self._lock = threading.Lock()
        self.update_count: int = 0

    def upsert(self, records: Iterable[TickerRecord]) -> None:
        """
        Apply the merge rule for each record, in order.

        Each record is published atomically; a concurrent snapshot may see
        some but not all records of the batch.
        """
        for record in records:
            merged = merge(self._records.get(record.symbol), record)
            with self._lock:
                self._records[record.symbol] = merged
            self.update_count += 1

    def snapshot(self) -> list[TickerRecord]:
        """Point-in-time copy of every record. Order is unspecified."""
        with self._lock:
            return list(self._records.values())

    def get(self, symbol: str) -> TickerRecord | None:
        with self._lock:
            return self._records.get(symbol)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
