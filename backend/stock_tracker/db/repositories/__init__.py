"""
Stock Portfolio Tracker - Repositories
"""
from stock_tracker.db.repositories.collections import (
    CLOSED_POSITIONS,
    POSITIONS,
    WATCHLIST,
    CollectionDescriptor,
    ReplaceAllStore,
    ReplaceResult,
    get_closed_position_store,
    get_position_store,
    get_watchlist_store,
)
from stock_tracker.db.repositories.user import UserRepository

__all__ = [
    "CLOSED_POSITIONS",
    "POSITIONS",
    "WATCHLIST",
    "CollectionDescriptor",
    "ReplaceAllStore",
    "ReplaceResult",
    "get_closed_position_store",
    "get_position_store",
    "get_watchlist_store",
    "UserRepository",
]
