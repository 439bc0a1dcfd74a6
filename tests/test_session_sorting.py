from __future__ import annotations

import math

from ticker_board.engine.session import (
    ViewSession,
    format_percent,
    format_price,
    price_direction,
    sort_records,
)
from ticker_board.types import Direction, SortColumn, SortOrder


def test_default_session_sorts_by_symbol_ascending(make_record) -> None:
    session = ViewSession()
    records = [make_record("ETHUSDT"), make_record("ADAUSDT"), make_record("BTCUSDT")]

    rows = session.derive(records)

    assert [r.symbol for r in rows] == ["ADAUSDT", "BTCUSDT", "ETHUSDT"]
    assert session.row_count == 3


def test_volume_sorts_on_display_text_not_magnitude(make_record) -> None:
    session = ViewSession()
    records = [
        make_record("AUSDT", volume="9.5"),
        make_record("BUSDT", volume="100.0"),
        make_record("CUSDT", volume="20.25"),
    ]

    assert [r.symbol for r in session.derive(records)] == ["AUSDT", "BUSDT", "CUSDT"]

    for _ in range(6):
        session.next_sort_column()
    assert session.sort_column is SortColumn.VOLUME

    rows = session.derive(records)
    assert [r.volume for r in rows] == ["100.0", "20.25", "9.5"]


def test_numeric_columns_use_matching_field(make_record) -> None:
    records = [
        make_record("AUSDT", last=3.0, pct=-1.0, open_=2.0, high=9.0, low=0.5),
        make_record("BUSDT", last=1.0, pct=5.0, open_=3.0, high=4.0, low=0.1),
        make_record("CUSDT", last=2.0, pct=0.0, open_=1.0, high=6.0, low=0.9),
    ]

    def order(column: SortColumn) -> list[str]:
        return [r.symbol for r in sort_records(records, column, SortOrder.ASCENDING)]

    assert order(SortColumn.LAST) == ["BUSDT", "CUSDT", "AUSDT"]
    assert order(SortColumn.PERCENT_CHANGE) == ["AUSDT", "CUSDT", "BUSDT"]
    assert order(SortColumn.OPEN) == ["CUSDT", "AUSDT", "BUSDT"]
    assert order(SortColumn.HIGH) == ["BUSDT", "CUSDT", "AUSDT"]
    assert order(SortColumn.LOW) == ["BUSDT", "AUSDT", "CUSDT"]


def test_nan_sorts_greater_than_every_number(make_record) -> None:
    records = [
        make_record("AUSDT", last=math.nan),
        make_record("BUSDT", last=math.inf),
        make_record("CUSDT", last=-5.0),
    ]

    ascending = sort_records(records, SortColumn.LAST, SortOrder.ASCENDING)
    descending = sort_records(records, SortColumn.LAST, SortOrder.DESCENDING)

    assert [r.symbol for r in ascending] == ["CUSDT", "BUSDT", "AUSDT"]
    assert [r.symbol for r in descending] == ["AUSDT", "BUSDT", "CUSDT"]


def test_descending_is_ascending_reversed_for_ties(make_record) -> None:
    records = [
        make_record("T1USDT", last=5.0),
        make_record("LOWUSDT", last=1.0),
        make_record("T2USDT", last=5.0),
        make_record("NANUSDT", last=math.nan),
        make_record("T3USDT", last=5.0),
    ]
    reference = sorted(
        records,
        key=lambda r: (math.isnan(r.last_price), 0.0 if math.isnan(r.last_price) else r.last_price),
    )
    reference.reverse()

    descending = sort_records(records, SortColumn.LAST, SortOrder.DESCENDING)

    assert [r.symbol for r in descending] == [r.symbol for r in reference]
    assert [r.symbol for r in descending] == ["NANUSDT", "T3USDT", "T2USDT", "T1USDT", "LOWUSDT"]


def test_sort_column_cycle_wraps() -> None:
    session = ViewSession()
    seen = []
    for _ in range(8):
        seen.append(session.sort_column)
        session.next_sort_column()

    assert seen == [
        SortColumn.SYMBOL,
        SortColumn.LAST,
        SortColumn.PERCENT_CHANGE,
        SortColumn.OPEN,
        SortColumn.HIGH,
        SortColumn.LOW,
        SortColumn.VOLUME,
        SortColumn.SYMBOL,
    ]


def test_toggle_sort_order_reverses_rows_and_header_arrow(make_record) -> None:
    session = ViewSession()
    records = [make_record("AUSDT"), make_record("BUSDT")]

    assert session.header_labels()[0] == "Symbol ▲"
    session.toggle_sort_order()

    assert session.sort_order is SortOrder.DESCENDING
    assert session.header_labels()[0] == "Symbol ▼"
    assert session.header_labels()[1] == "Last"
    assert [r.symbol for r in session.derive(records)] == ["BUSDT", "AUSDT"]

    session.toggle_sort_order()
    assert session.sort_order is SortOrder.ASCENDING


def test_price_direction(make_record) -> None:
    assert price_direction(make_record(last=101.0, previous=100.0)) is Direction.UP
    assert price_direction(make_record(last=99.0, previous=100.0)) is Direction.DOWN
    assert price_direction(make_record(last=100.0, previous=100.0)) is Direction.NEUTRAL


def test_rows_carry_formatted_cells_and_direction(make_record) -> None:
    session = ViewSession()

    [row] = session.derive([make_record("BTCUSDT", last=50500.0, previous=50000.0, pct=1.0, volume="12.5")])

    assert row.last == "50500"
    assert row.percent_change == "1.00"
    assert row.volume == "12.5"
    assert row.direction is Direction.UP


def test_price_formatting() -> None:
    assert format_price(0.00001234) == "0.00001234"
    assert format_price(1.5) == "1.5"
    assert format_price(0.0) == "0"
    assert format_price(math.nan) == "NaN"
    assert format_percent(-2.5) == "-2.50"
    assert format_percent(math.nan) == "NaN"
