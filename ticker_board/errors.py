"""Exceptions for Ticker Board.

Decode errors are recovered by the feed, connection errors are fatal to it,
chart fetch errors are shown in the chart modal.
"""


class TickerBoardError(Exception):
    """Base exception for Ticker Board errors"""

    pass


class FeedError(TickerBoardError):
    """Base exception for push feed errors"""

    pass


class FeedDecodeError(FeedError):
    """Raised when a feed message does not have the ticker array shape"""

    pass


class FeedConnectionError(FeedError):
    """Raised when the feed subscription is lost"""

    pass


class ChartFetchError(TickerBoardError):
    """Raised when the candle request fails or returns bad data"""

    pass
