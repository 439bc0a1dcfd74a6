"""
Ticker Board - Live all-market ticker table for Binance Futures.

Architecture:
- datafeed/: WebSocket ticker stream, latest-state store, candle REST client
- engine/: Ingestion loop and view session (sorting, selection, modal state)
- ui/: Ticker table and candle chart (Textual TUI)
"""

__version__ = "0.1.0"
