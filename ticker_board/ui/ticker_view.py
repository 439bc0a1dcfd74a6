"""
Ticker table TUI using Textual.

Displays:
- Top: Sortable ticker table with up/down last-price coloring and a scroll thumb
- Bottom: Key help and feed statistics
- Modal: Candlestick chart for the configured symbol

Performance notes:
- One frame per timer tick (default 50ms); input is handled between ticks
- Only the visible slice of rows is turned into Rich renderables
- The store is read once per frame via snapshot(); the feed is never awaited here
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from rich.console import RenderableType
from rich.style import Style
from rich.table import Table
from rich.text import Text

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Static

from ..config import DashboardConfig
from ..datafeed.klines import fetch_candles
from ..engine.session import TableColors, ViewSession
from ..types import Direction, Mode
from .chart_view import ChartScreen, pair_name

if TYPE_CHECKING:
    from ..datafeed.ticker_feed import TickerFeed
    from ..datafeed.ticker_store import TickerStore
    from ..types import TickerRow

logger = logging.getLogger(__name__)

UP_COLOR = "#22c55e"       # Green
DOWN_COLOR = "#ef4444"     # Red

INFO_TEXT = (
    "(q/Esc) quit | (↑/k) up | (↓/j) down | (←/h →/l) color | "
    "(Tab) sort column | (r) sort order | (Enter) chart"
)

COLUMN_WIDTHS = (12, 14, 14, 14, 14, 14, 16)


def scroll_thumb(offset: int, viewport: int, total: int) -> range:
    """Rows (relative to the viewport) covered by the scrollbar thumb."""
    if total <= viewport or viewport <= 0:
        return range(0)
    size = max(1, viewport * viewport // total)
    max_offset = total - viewport
    start = (viewport - size) * offset // max_offset
    return range(start, start + size)


class TickerTable(Static):
    """Main ticker table widget."""

    DEFAULT_CSS = """
    TickerTable {
        width: 100%;
        height: 1fr;
        border: round #334155;
    }
    """

    def __init__(self) -> None:
        super().__init__()
        self.border_title = "Crypto Tickers"
        self._rows: list[TickerRow] = []
        self._headers: list[str] = []
        self._colors: TableColors | None = None
        self._offset = 0
        self._selected: int | None = None
        self._total = 0

    @property
    def viewport_rows(self) -> int:
        """Data rows that fit under the header."""
        return max(self.content_size.height - 1, 1)

    def update_rows(
        self,
        rows: list[TickerRow],
        headers: list[str],
        colors: TableColors,
        offset: int,
        selected: int | None,
        total: int,
    ) -> None:
        self._rows = rows
        self._headers = headers
        self._colors = colors
        self._offset = offset
        self._selected = selected
        self._total = total
        self.refresh()

    def render(self) -> RenderableType:
        colors = self._colors
        if colors is None or not self._rows:
            return Text("Waiting for tickers...", style="dim")

        table = Table(
            show_header=True,
            header_style=Style(color=colors.header_fg, bgcolor=colors.header_bg, bold=True),
            box=None,
            padding=(0, 1),
            collapse_padding=True,
            expand=True,
        )
        for header, width in zip(self._headers, COLUMN_WIDTHS):
            table.add_column(header, width=width, no_wrap=True)
        table.add_column("", width=1, no_wrap=True)

        thumb = scroll_thumb(self._offset, self.viewport_rows, self._total)
        selected_style = Style(color=colors.selected_fg, reverse=True)

        for i, row in enumerate(self._rows):
            index = self._offset + i
            bg = colors.normal_row_bg if index % 2 == 0 else colors.alt_row_bg

            if row.direction is Direction.UP:
                last_style = UP_COLOR
            elif row.direction is Direction.DOWN:
                last_style = DOWN_COLOR
            else:
                last_style = colors.row_fg

            table.add_row(
                row.symbol,
                Text(row.last, style=last_style),
                row.percent_change,
                row.open,
                row.high,
                row.low,
                row.volume,
                Text("┃" if i in thumb else " ", style=colors.selected_fg),
                style=selected_style if index == self._selected else Style(color=colors.row_fg, bgcolor=bg),
            )

        return table


class StatusBar(Static):
    """Key help plus feed and view statistics."""

    DEFAULT_CSS = """
    StatusBar {
        dock: bottom;
        height: 4;
        padding: 0 1;
        border: double #60a5fa;
    }
    """

    def __init__(self) -> None:
        super().__init__()
        self._stats = Text()
        self._colors: TableColors | None = None

    def update_stats(self, stats: Text, colors: TableColors) -> None:
        self._stats = stats
        if colors != self._colors:
            self._apply_colors(colors)
        self.refresh()

    def _apply_colors(self, colors: TableColors) -> None:
        self._colors = colors
        self.styles.border = ("double", colors.footer_border)
        self.styles.background = colors.buffer_bg
        self.styles.color = colors.row_fg

    def render(self) -> RenderableType:
        result = Text(INFO_TEXT)
        result.append("\n")
        result.append(self._stats)
        return result


class TickerApp(App):
    """Main Ticker Board application (the render loop)."""

    CSS = """
    Screen {
        background: #020617;
    }
    """

    # Priority so Tab/Enter/arrows reach the session even inside the chart modal,
    # where every key closes the chart.
    BINDINGS = [
        Binding("q,escape", "quit_board", "Quit", priority=True),
        Binding("j,down", "next_row", "Down", priority=True),
        Binding("k,up", "previous_row", "Up", priority=True),
        Binding("l,right", "next_color", "Next color", priority=True),
        Binding("h,left", "previous_color", "Previous color", priority=True),
        Binding("tab", "next_sort_column", "Sort column", priority=True),
        Binding("r", "toggle_sort_order", "Sort order", priority=True),
        Binding("enter", "open_chart", "Chart", priority=True),
    ]

    def __init__(
        self,
        store: TickerStore,
        config: DashboardConfig | None = None,
        feed: TickerFeed | None = None,
        session: ViewSession | None = None,
    ) -> None:
        super().__init__()
        self.store = store
        self.config = config or DashboardConfig()
        self.feed = feed
        self.session = session or ViewSession()
        self._table: TickerTable | None = None
        self._status_bar: StatusBar | None = None
        self._chart_screen: ChartScreen | None = None

    def compose(self) -> ComposeResult:
        self._table = TickerTable()
        self._status_bar = StatusBar()

        yield self._table
        yield self._status_bar

    def on_mount(self) -> None:
        """Start the frame timer."""
        self.set_interval(self.config.frame_interval_sec, self.render_frame)

    def render_frame(self) -> None:
        """Snapshot, derive, paint. Input is handled by the bindings between frames."""
        if self._check_quit():
            return

        session = self.session
        snapshot = self.store.snapshot()
        rows = session.derive(snapshot)

        if self._table is not None:
            session.set_viewport(self._table.viewport_rows)
            self._table.update_rows(
                session.visible(rows),
                session.header_labels(),
                session.colors,
                session.scroll_offset,
                session.selected_index,
                session.row_count,
            )

        if self._status_bar is not None:
            self._status_bar.update_stats(self._stats_text(), session.colors)

        if session.poll_chart() and self._chart_screen is not None:
            if session.chart_error is not None:
                self._chart_screen.pane.show_error(session.chart_error)
            else:
                self._chart_screen.pane.show_candles(session.chart_payload)

    def _stats_text(self) -> Text:
        session = self.session
        stats = Text()
        stats.append(f"{session.row_count} instruments", style="bold")
        stats.append(f"  │  sort {session.sort_column.value} {session.sort_order.value}")
        if session.selected_index is not None:
            stats.append(f"  │  row {session.selected_index + 1}/{session.row_count}")
        if self.feed is not None:
            stats.append(f"  │  msgs {self.feed.messages_received}")
            if self.feed.decode_errors:
                stats.append(f"  dropped {self.feed.decode_errors}", style=DOWN_COLOR)
        return stats

    def _check_quit(self) -> bool:
        if self.session.is_running:
            return False
        self.exit()
        return True

    def fail(self, exc: BaseException) -> None:
        """Tear down after a fatal feed error; the entry point maps it to a non-zero exit."""
        logger.error("Fatal feed error: %r", exc)
        self.session.quit()
        # Before mount the first frame sees Quit instead
        if self.is_running:
            self.exit(return_code=1)

    # --- input -------------------------------------------------------------

    def _close_chart_if_open(self) -> bool:
        """In the chart modal any key closes it and does nothing else."""
        if self.session.mode is not Mode.CHART:
            return False
        if self._chart_screen is not None:
            self._chart_screen.close()
        return True

    def action_quit_board(self) -> None:
        if self._close_chart_if_open():
            return
        self.session.quit()
        self._check_quit()

    def action_next_row(self) -> None:
        if not self._close_chart_if_open():
            self.session.next()

    def action_previous_row(self) -> None:
        if not self._close_chart_if_open():
            self.session.previous()

    def action_next_color(self) -> None:
        if not self._close_chart_if_open():
            self.session.next_color()

    def action_previous_color(self) -> None:
        if not self._close_chart_if_open():
            self.session.previous_color()

    def action_next_sort_column(self) -> None:
        if not self._close_chart_if_open():
            self.session.next_sort_column()

    def action_toggle_sort_order(self) -> None:
        if not self._close_chart_if_open():
            self.session.toggle_sort_order()

    def action_open_chart(self) -> None:
        if self._close_chart_if_open():
            return
        if not self.session.open_chart(self._start_chart_fetch):
            return

        self._chart_screen = ChartScreen(pair_name(self.config.chart_symbol))
        self.push_screen(self._chart_screen, callback=self._on_chart_closed)

    def _start_chart_fetch(self) -> asyncio.Task:
        cfg = self.config
        task = asyncio.create_task(
            fetch_candles(
                cfg.chart_symbol,
                cfg.chart_interval,
                url=cfg.klines_url,
                timeout_sec=cfg.chart_timeout_sec,
            )
        )
        task.add_done_callback(_retrieve_abandoned)
        return task

    def _on_chart_closed(self, _result: None = None) -> None:
        self.session.close_chart()
        self._chart_screen = None


def _retrieve_abandoned(task: asyncio.Task) -> None:
    """Mark the outcome as retrieved so a discarded failure is not reported by asyncio."""
    if not task.cancelled():
        task.exception()
