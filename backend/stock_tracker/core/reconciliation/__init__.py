"""
Stock Portfolio Tracker - Record Reconciliation

Alias resolution, computed defaults and derived-field consistency for
positions, watchlist entries and closed positions.
"""
from stock_tracker.core.reconciliation.records import (
    ResolvedClosedPosition,
    ResolvedPosition,
    ResolvedWatchlistEntry,
)
from stock_tracker.core.reconciliation.reconciler import (
    reconcile_closed_position,
    reconcile_position,
    reconcile_watchlist_entry,
    rederive_closed_position,
    resolve_identity,
)
from stock_tracker.core.reconciliation.summary import (
    ClosedPositionSummary,
    summarize_closed_positions,
)
from stock_tracker.core.reconciliation.values import HoldingPeriod

__all__ = [
    "ResolvedPosition",
    "ResolvedWatchlistEntry",
    "ResolvedClosedPosition",
    "reconcile_position",
    "reconcile_watchlist_entry",
    "reconcile_closed_position",
    "rederive_closed_position",
    "resolve_identity",
    "ClosedPositionSummary",
    "summarize_closed_positions",
    "HoldingPeriod",
]
