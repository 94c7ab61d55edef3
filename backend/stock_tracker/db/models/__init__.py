"""
Stock Portfolio Tracker - Database Models
"""
from stock_tracker.db.models.user import User
from stock_tracker.db.models.position import Position
from stock_tracker.db.models.watchlist import WatchlistEntry
from stock_tracker.db.models.closed_position import ClosedPosition

__all__ = [
    "User",
    "Position",
    "WatchlistEntry",
    "ClosedPosition",
]
