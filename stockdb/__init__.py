"""
stockdb: Stock Price Query Server

A single-client TCP server answering price queries against daily
stock-price series loaded from CSV files, built with Python asyncio.
"""

__version__ = "1.0.0"
