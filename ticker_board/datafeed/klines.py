"""
Binance spot klines (candles) over REST.

One best-effort request per chart modal; the result feeds the candlestick
renderer in ui/chart_view.py.
"""

from __future__ import annotations

import asyncio
import logging

import aiohttp
import orjson

from ..config import DEFAULT_KLINES_URL
from ..errors import ChartFetchError
from ..types import Candle

logger = logging.getLogger(__name__)


def parse_klines(data: bytes | str) -> list[Candle]:
    """
    Parse a klines response body.

    Expected format: [[open_time, open, high, low, close, volume, close_time,
    quote_volume, trades, taker_base, taker_quote, ignore], ...]
    """
    try:
        rows = orjson.loads(data)
    except orjson.JSONDecodeError as exc:
        raise ChartFetchError(f"invalid JSON: {exc}") from exc

    if not isinstance(rows, list):
        raise ChartFetchError(f"expected array, got {type(rows).__name__}")

    try:
        return [
            Candle(
                open_time=int(row[0]),
                open=float(row[1]),
                high=float(row[2]),
                low=float(row[3]),
                close=float(row[4]),
                volume=float(row[5]),
            )
            for row in rows
        ]
    except (IndexError, TypeError, ValueError) as exc:
        raise ChartFetchError(f"bad kline row: {exc!r}") from exc


async def fetch_candles(
    symbol: str,
    interval: str,
    url: str = DEFAULT_KLINES_URL,
    timeout_sec: float = 10.0,
    session: aiohttp.ClientSession | None = None,
) -> list[Candle]:
    """Fetch recent candles. Any network, HTTP or parse failure raises ChartFetchError."""
    params = {"symbol": symbol.upper(), "interval": interval}
    timeout = aiohttp.ClientTimeout(total=timeout_sec)

    async def _get(s: aiohttp.ClientSession) -> bytes:
        async with s.get(url, params=params, timeout=timeout) as resp:
            resp.raise_for_status()
            return await resp.read()

    try:
        if session is None:
            async with aiohttp.ClientSession() as own_session:
                body = await _get(own_session)
        else:
            body = await _get(session)
    except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
        logger.warning("Candle request for %s %s failed: %r", symbol, interval, exc)
        raise ChartFetchError(f"request failed: {exc!r}") from exc

    candles = parse_klines(body)
    logger.info("Fetched %d candles for %s %s", len(candles), symbol, interval)
    return candles
