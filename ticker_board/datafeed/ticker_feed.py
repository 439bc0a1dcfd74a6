"""
Binance Futures all-market ticker stream client.

Handles:
1. One long-lived WebSocket subscription to the !ticker@arr stream
2. Decoding each message (a JSON array of 24h ticker objects) into records
3. Forwarding each decoded batch onto the ingestion queue

Performance notes:
- Uses orjson for fast JSON parsing
- Minimal logging in hot path (decode failures only)
- All I/O is non-blocking (pure asyncio)
"""

from __future__ import annotations

import asyncio
import logging

import aiohttp
import orjson

from ..config import DEFAULT_FEED_URL
from ..errors import FeedConnectionError, FeedDecodeError
from ..types import TickerRecord

logger = logging.getLogger(__name__)

Batch = list[TickerRecord]


def _parse_record(item: dict) -> TickerRecord:
    last_price = float(item['c'])
    return TickerRecord(
        symbol=str(item['s']),
        last_price=last_price,
        previous_price=last_price,
        price_change=float(item['p']),
        price_change_percent=float(item['P']),
        weighted_avg_price=float(item['w']),
        last_qty=float(item['Q']),
        open_price=float(item['o']),
        high_price=float(item['h']),
        low_price=float(item['l']),
        base_volume=str(item['v']),
        quote_volume=str(item['q']),
        stats_open_time=int(item['O']),
        stats_close_time=int(item['C']),
        first_trade_id=int(item['F']),
        last_trade_id=int(item['L']),
        trade_count=int(item['n']),
    )


def decode_message(raw: bytes | str) -> Batch:
    """
    Decode one ticker array message.

    HOT PATH - called for every message (~1 per second, ~300 objects each).

    Expected format: [{e, E, s, p, P, w, c, Q, o, h, l, v, q, O, C, F, L, n}, ...]
    Numeric strings become floats, ids and times become ints. Any bad element
    rejects the whole message.
    """
    try:
        data = orjson.loads(raw)
    except orjson.JSONDecodeError as exc:
        raise FeedDecodeError(f"invalid JSON: {exc}") from exc

    if not isinstance(data, list):
        raise FeedDecodeError(f"expected array, got {type(data).__name__}")

    try:
        return [_parse_record(item) for item in data]
    except (KeyError, TypeError, ValueError) as exc:
        raise FeedDecodeError(f"bad ticker object: {exc!r}") from exc


class TickerFeed:
    """
    Async client for the all-market ticker stream.

    Usage:
        feed = TickerFeed()
        asyncio.create_task(feed.run())
        batch = await feed.batch_queue.get()
    """

    def __init__(self, url: str = DEFAULT_FEED_URL, queue_maxsize: int = 0) -> None:
        self.url = url

        # State
        self._running = False

        # Counters
        self.messages_received: int = 0
        self.records_decoded: int = 0
        self.decode_errors: int = 0
        self.dropped_batches: int = 0

        # Output queue for ingestion; maxsize 0 means unbounded
        self.batch_queue: asyncio.Queue[Batch] = asyncio.Queue(maxsize=queue_maxsize)

    def _enqueue(self, batch: Batch) -> None:
        """Non-blocking put. When bounded and full, drop the oldest batch."""
        try:
            self.batch_queue.put_nowait(batch)
        except asyncio.QueueFull:
            self.batch_queue.get_nowait()
            self.batch_queue.put_nowait(batch)
            self.dropped_batches += 1
            logger.debug("Ingestion queue full, dropped oldest batch (%d total)", self.dropped_batches)

    def _handle_ws_message(self, raw: bytes | str) -> None:
        """
        Handle incoming WebSocket message.

        A malformed message is logged and dropped; the stream keeps going.
        """
        self.messages_received += 1
        try:
            batch = decode_message(raw)
        except FeedDecodeError as exc:
            self.decode_errors += 1
            logger.warning("Dropping feed message #%d: %s", self.messages_received, exc)
            return

        self.records_decoded += len(batch)
        self._enqueue(batch)

    async def run(self, session: aiohttp.ClientSession | None = None) -> None:
        """
        Main run loop. Connects and forwards batches until stopped.

        Raises FeedConnectionError if the subscription fails or is lost while
        still running. No reconnect is attempted.
        """
        self._running = True

        if session is None:
            async with aiohttp.ClientSession() as own_session:
                await self._consume(own_session)
        else:
            await self._consume(session)

    async def _consume(self, session: aiohttp.ClientSession) -> None:
        try:
            async with session.ws_connect(self.url) as ws:
                logger.info("Subscribed to %s", self.url)

                async for msg in ws:
                    if not self._running:
                        return

                    if msg.type == aiohttp.WSMsgType.TEXT:
                        self._handle_ws_message(msg.data)
                    elif msg.type == aiohttp.WSMsgType.ERROR:
                        raise FeedConnectionError(f"WebSocket error: {ws.exception()}")
        except aiohttp.ClientError as exc:
            logger.error("Feed connection failed: %s", exc)
            raise FeedConnectionError(str(exc)) from exc

        if self._running:
            logger.error("Feed closed by remote end")
            raise FeedConnectionError("feed closed by remote end")

    def stop(self) -> None:
        """Signal the client to stop."""
        self._running = False
