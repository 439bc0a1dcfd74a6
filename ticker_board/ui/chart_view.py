"""
Candlestick chart modal.

Renders candles as a text chart: one column per candle, a price pane of
body (┃) and wick (│) glyphs, and a volume pane of block bars underneath.
Scaling to terminal rows is vectorized with numpy.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

import numpy as np
from rich.console import RenderableType
from rich.style import Style
from rich.text import Text

from textual.app import ComposeResult
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

if TYPE_CHECKING:
    from ..types import Candle

BULL_COLOR = "rgb(1,205,254)"
BEAR_COLOR = "rgb(255,107,153)"
AXIS_COLOR = "#94a3b8"
VOLUME_PANE_HEIGHT = 4
AXIS_WIDTH = 12

QUOTE_ASSETS = ("USDT", "USDC", "BUSD", "FDUSD", "BTC", "ETH", "BNB")


def pair_name(symbol: str) -> str:
    """CHZUSDT -> CHZ/USDT. Unknown quote assets are returned unchanged."""
    symbol = symbol.upper()
    for quote in QUOTE_ASSETS:
        if symbol.endswith(quote) and len(symbol) > len(quote):
            return f"{symbol[:-len(quote)]}/{quote}"
    return symbol


def _scale(values: np.ndarray, lo: float, hi: float, rows: int) -> np.ndarray:
    """Map values onto integer rows 0..rows-1 (0 = bottom)."""
    if rows <= 1 or hi <= lo:
        return np.full(values.shape, max(rows - 1, 0) // 2, dtype=int)
    scaled = (values - lo) / (hi - lo) * (rows - 1)
    return np.clip(np.rint(scaled), 0, rows - 1).astype(int)


def render_candles(
    candles: Sequence[Candle],
    title: str,
    width: int = 80,
    height: int = 24,
    volume_height: int = VOLUME_PANE_HEIGHT,
) -> Text:
    """
    Build the chart as Rich Text.

    Args:
        candles: Oldest first; only the newest that fit are drawn
        title: Chart name shown on the first line
        width: Total columns, axis included
        height: Total rows, title and volume pane included
    """
    result = Text()
    result.append(f" {title} ", style="bold white on #1e40af")

    columns = max(width - AXIS_WIDTH, 1)
    shown = list(candles)[-columns:]
    if not shown:
        result.append("\n\nNo candles", style="dim")
        return result

    opens = np.array([c.open for c in shown], dtype=float)
    highs = np.array([c.high for c in shown], dtype=float)
    lows = np.array([c.low for c in shown], dtype=float)
    closes = np.array([c.close for c in shown], dtype=float)
    volumes = np.array([c.volume for c in shown], dtype=float)

    lo, hi = float(lows.min()), float(highs.max())
    last = closes[-1]
    change = (last - opens[0]) / opens[0] * 100 if opens[0] else 0.0
    result.append(f"  last {last:g}  ", style=AXIS_COLOR)
    result.append(
        f"{change:+.2f}%",
        style=BULL_COLOR if change >= 0 else BEAR_COLOR,
    )
    result.append("\n")

    price_rows = max(height - volume_height - 1, 1)
    wick_lo = _scale(lows, lo, hi, price_rows)
    wick_hi = _scale(highs, lo, hi, price_rows)
    body_lo = _scale(np.minimum(opens, closes), lo, hi, price_rows)
    body_hi = _scale(np.maximum(opens, closes), lo, hi, price_rows)
    styles = [
        Style(color=BULL_COLOR if c >= o else BEAR_COLOR)
        for o, c in zip(opens, closes)
    ]

    labels = {price_rows - 1: hi, (price_rows - 1) // 2: (hi + lo) / 2, 0: lo}
    for row in range(price_rows - 1, -1, -1):
        label = f"{labels[row]:>{AXIS_WIDTH - 2}g} ┤" if row in labels else " " * (AXIS_WIDTH - 1) + "│"
        result.append(label, style=AXIS_COLOR)
        for i, style in enumerate(styles):
            if body_lo[i] <= row <= body_hi[i]:
                result.append("┃", style=style)
            elif wick_lo[i] <= row <= wick_hi[i]:
                result.append("│", style=style)
            else:
                result.append(" ")
        result.append("\n")

    if volume_height > 0:
        vol_max = float(volumes.max())
        vol_rows = _scale(volumes, 0.0, vol_max, volume_height + 1)
        for row in range(volume_height, 0, -1):
            label = f"{vol_max:>{AXIS_WIDTH - 2}.4g} ┤" if row == volume_height else " " * (AXIS_WIDTH - 1) + "│"
            result.append(label, style=AXIS_COLOR)
            for i, style in enumerate(styles):
                result.append("█" if vol_rows[i] >= row else " ", style=style)
            result.append("\n")

    result.rstrip()
    return result


class ChartPane(Static):
    """Shows loading, error, or the rendered candles."""

    DEFAULT_CSS = """
    ChartPane {
        width: 100%;
        height: 100%;
        padding: 1 2;
        background: #020617;
    }
    """

    def __init__(self, title: str) -> None:
        super().__init__()
        self.title_text = title
        self._candles: list[Candle] | None = None
        self._error: str | None = None

    def show_candles(self, candles: list[Candle]) -> None:
        self._candles = candles
        self._error = None
        self.refresh()

    def show_error(self, error: str) -> None:
        self._error = error
        self.refresh()

    def render(self) -> RenderableType:
        if self._error is not None:
            return Text(f"{self.title_text}: chart unavailable ({self._error})\n\nPress any key to close", style="#ef4444")
        if self._candles is None:
            return Text(f"Loading {self.title_text} candles...  (any key closes)", style="dim")
        size = self.content_size
        return render_candles(
            self._candles,
            self.title_text,
            width=max(size.width, AXIS_WIDTH + 1),
            height=max(size.height, VOLUME_PANE_HEIGHT + 3),
        )


class ChartScreen(ModalScreen[None]):
    """Full-takeover chart view. Any key dismisses it."""

    def __init__(self, title: str) -> None:
        super().__init__()
        self.pane = ChartPane(title)
        self._dismissing = False

    def compose(self) -> ComposeResult:
        yield self.pane

    def close(self) -> None:
        if self._dismissing:
            return
        self._dismissing = True
        self.dismiss()

    def on_key(self, event: Key) -> None:
        event.stop()
        event.prevent_default()
        self.close()
