"""
View session: presentation state and row derivation.

Holds everything the table view needs that is not market data: sort column
and order, selection, scroll offset, palette, and the chart modal. On every
frame the render loop hands it a store snapshot and gets back sorted,
formatted, direction-tagged rows.

Sorting policy:
- Symbol and Volume sort lexicographically on their text. Volume stays text,
  so "9.5" sorts after "10.0".
- Numeric columns sort with NaN greater than every number.
- Descending is the ascending result reversed as a whole, not a reversed
  comparator, so tied rows come out in the reverse of their ascending order.
"""

from __future__ import annotations

import math
from typing import Any, Callable, Iterable, NamedTuple, Protocol

from ..types import (
    Direction,
    Mode,
    SortColumn,
    SortOrder,
    TickerRecord,
    TickerRow,
)


class TableColors(NamedTuple):
    buffer_bg: str
    header_bg: str
    header_fg: str
    row_fg: str
    selected_fg: str
    normal_row_bg: str
    alt_row_bg: str
    footer_border: str


# Tailwind slate
SLATE_950 = "#020617"
SLATE_900 = "#0f172a"
SLATE_200 = "#e2e8f0"


def _table_colors(c900: str, c400: str) -> TableColors:
    return TableColors(
        buffer_bg=SLATE_950,
        header_bg=c900,
        header_fg=SLATE_200,
        row_fg=SLATE_200,
        selected_fg=c400,
        normal_row_bg=SLATE_950,
        alt_row_bg=SLATE_900,
        footer_border=c400,
    )


# Blue, emerald, indigo, red
PALETTES: tuple[TableColors, ...] = (
    _table_colors("#1e3a8a", "#60a5fa"),
    _table_colors("#064e3b", "#34d399"),
    _table_colors("#312e81", "#818cf8"),
    _table_colors("#7f1d1d", "#f87171"),
)

DEFAULT_VIEWPORT_HEIGHT = 20


class FutureLike(Protocol):
    """Anything with the result-polling half of the Future API."""

    def done(self) -> bool: ...
    def cancelled(self) -> bool: ...
    def result(self) -> Any: ...
    def exception(self) -> BaseException | None: ...


def format_price(value: float) -> str:
    """Plain decimal without exponent or trailing zeros (e.g. 0.00001234, 50500)."""
    if math.isnan(value):
        return "NaN"
    text = f"{value:.8f}".rstrip('0').rstrip('.')
    return "0" if text in ("", "-0") else text


def format_percent(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    return f"{value:.2f}"


def _nan_greatest(value: float) -> tuple[bool, float]:
    if math.isnan(value):
        return (True, 0.0)
    return (False, value)


_SORT_KEYS: dict[SortColumn, Callable[[TickerRecord], Any]] = {
    SortColumn.SYMBOL: lambda r: r.symbol,
    SortColumn.LAST: lambda r: _nan_greatest(r.last_price),
    SortColumn.PERCENT_CHANGE: lambda r: _nan_greatest(r.price_change_percent),
    SortColumn.OPEN: lambda r: _nan_greatest(r.open_price),
    SortColumn.HIGH: lambda r: _nan_greatest(r.high_price),
    SortColumn.LOW: lambda r: _nan_greatest(r.low_price),
    SortColumn.VOLUME: lambda r: r.base_volume,
}


def sort_records(
    records: Iterable[TickerRecord],
    column: SortColumn,
    order: SortOrder,
) -> list[TickerRecord]:
    ordered = sorted(records, key=_SORT_KEYS[column])
    if order is SortOrder.DESCENDING:
        ordered.reverse()
    return ordered


def price_direction(record: TickerRecord) -> Direction:
    if record.last_price > record.previous_price:
        return Direction.UP
    if record.last_price < record.previous_price:
        return Direction.DOWN
    return Direction.NEUTRAL


def to_row(record: TickerRecord) -> TickerRow:
    return TickerRow(
        symbol=record.symbol,
        last=format_price(record.last_price),
        percent_change=format_percent(record.price_change_percent),
        open=format_price(record.open_price),
        high=format_price(record.high_price),
        low=format_price(record.low_price),
        volume=record.base_volume,
        direction=price_direction(record),
    )


class ViewSession:
    """
    Interactive state for the ticker table.

    Mutated only by input handling and by the render loop's per-frame calls
    (derive, set_viewport, poll_chart). Never touches the store.
    """

    def __init__(self, palette_count: int = len(PALETTES)) -> None:
        self.sort_column = SortColumn.SYMBOL
        self.sort_order = SortOrder.ASCENDING
        self.selected_index: int | None = None
        self.scroll_offset: int = 0
        self.palette_index: int = 0
        self.palette_count = palette_count
        self.mode = Mode.TABLE

        self.row_count: int = 0
        self.viewport_height: int = DEFAULT_VIEWPORT_HEIGHT

        # Chart modal
        self.chart_fetch: FutureLike | None = None
        self.chart_payload: Any = None
        self.chart_error: str | None = None

    # --- derivation -------------------------------------------------------

    def derive(self, records: Iterable[TickerRecord]) -> list[TickerRow]:
        """Sort and format a snapshot; also refreshes the row count."""
        ordered = sort_records(records, self.sort_column, self.sort_order)
        self.set_row_count(len(ordered))
        return [to_row(record) for record in ordered]

    def visible(self, rows: list[TickerRow]) -> list[TickerRow]:
        return rows[self.scroll_offset:self.scroll_offset + self.viewport_height]

    def header_labels(self) -> list[str]:
        arrow = "▲" if self.sort_order is SortOrder.ASCENDING else "▼"
        return [
            f"{column.value} {arrow}" if column is self.sort_column else column.value
            for column in SortColumn
        ]

    @property
    def colors(self) -> TableColors:
        return PALETTES[self.palette_index % len(PALETTES)]

    # --- scroll bookkeeping -----------------------------------------------

    def set_row_count(self, count: int) -> None:
        self.row_count = max(0, count)
        if self.row_count == 0:
            self.selected_index = None
        elif self.selected_index is not None and self.selected_index >= self.row_count:
            self.selected_index = self.row_count - 1
        self._follow_selection()

    def set_viewport(self, height: int) -> None:
        self.viewport_height = max(1, height)
        self._follow_selection()

    def _follow_selection(self) -> None:
        """Keep the selected row inside the viewport, then clamp the offset."""
        selected = self.selected_index
        if selected is not None:
            if selected < self.scroll_offset:
                self.scroll_offset = selected
            elif selected >= self.scroll_offset + self.viewport_height:
                self.scroll_offset = selected - self.viewport_height + 1

        max_offset = max(0, self.row_count - self.viewport_height)
        self.scroll_offset = min(max(0, self.scroll_offset), max_offset)

    # --- input transitions ------------------------------------------------

    def next(self) -> None:
        if self.row_count == 0:
            self.selected_index = None
            return
        if self.selected_index is None:
            self.selected_index = 0
        else:
            self.selected_index = (self.selected_index + 1) % self.row_count
        self._follow_selection()

    def previous(self) -> None:
        if self.row_count == 0:
            self.selected_index = None
            return
        if self.selected_index is None:
            self.selected_index = 0
        else:
            self.selected_index = (self.selected_index - 1) % self.row_count
        self._follow_selection()

    def next_color(self) -> None:
        self.palette_index = (self.palette_index + 1) % self.palette_count

    def previous_color(self) -> None:
        count = self.palette_count
        self.palette_index = (self.palette_index + count - 1) % count

    def next_sort_column(self) -> None:
        self.sort_column = self.sort_column.next()

    def toggle_sort_order(self) -> None:
        self.sort_order = self.sort_order.toggled()

    def quit(self) -> None:
        self.mode = Mode.QUIT

    @property
    def is_running(self) -> bool:
        return self.mode is not Mode.QUIT

    # --- chart modal --------------------------------------------------------

    def open_chart(self, start_fetch: Callable[[], FutureLike]) -> bool:
        """
        Enter the chart modal and start one fetch.

        Returns False (and starts nothing) unless currently in table mode.
        """
        if self.mode is not Mode.TABLE:
            return False
        fetch = start_fetch()
        self.mode = Mode.CHART
        self.chart_payload = None
        self.chart_error = None
        self.chart_fetch = fetch
        return True

    def close_chart(self) -> bool:
        """Leave the modal, abandoning any in-flight or finished fetch."""
        if self.mode is not Mode.CHART:
            return False
        self.mode = Mode.TABLE
        self.chart_fetch = None
        self.chart_payload = None
        self.chart_error = None
        return True

    @property
    def chart_pending(self) -> bool:
        return self.mode is Mode.CHART and self.chart_fetch is not None

    def poll_chart(self) -> bool:
        """
        Consume the fetch outcome if it has arrived. Called once per frame.

        Returns True when a payload or error was taken up this call.
        """
        fetch = self.chart_fetch
        if self.mode is not Mode.CHART or fetch is None or not fetch.done():
            return False

        self.chart_fetch = None
        if fetch.cancelled():
            self.chart_error = "chart request cancelled"
            return True
        exc = fetch.exception()
        if exc is not None:
            self.chart_error = str(exc) or type(exc).__name__
        else:
            self.chart_payload = fetch.result()
        return True
