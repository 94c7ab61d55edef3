"""
Stock Portfolio Tracker

Per-user holdings, watchlist and closed-position records.
"""
__version__ = "1.0.0"
