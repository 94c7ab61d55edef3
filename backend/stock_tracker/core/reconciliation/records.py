"""
Fully resolved portfolio records.

These are what the reconciler produces and what the stores hand back from
listing. ``to_dict`` gives the camelCase JSON shape the web client reads,
which is itself a valid raw input for the reconciler.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from stock_tracker.core.reconciliation.values import HoldingPeriod


def _num(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


def _iso(value: Optional[Any]) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass
class ResolvedPosition:
    """Open holding."""
    symbol: str
    name: str
    buy_price: Decimal
    current_price: Decimal
    quantity: int
    invested: Decimal
    current_value: Decimal
    pl: Decimal
    pl_percent: Decimal
    purchase_date: date
    last_updated: datetime
    day_change: Decimal = Decimal("0")
    day_change_percent: Decimal = Decimal("0")
    sector: Optional[str] = None
    target_price: Optional[Decimal] = None
    stop_loss: Optional[Decimal] = None
    position_size: str = "Medium"
    id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "symbol": self.symbol,
            "ticker": self.symbol,
            "name": self.name,
            "sector": self.sector,
            "buyPrice": _num(self.buy_price),
            "currentPrice": _num(self.current_price),
            "quantity": self.quantity,
            "invested": _num(self.invested),
            "currentValue": _num(self.current_value),
            "pl": _num(self.pl),
            "plPercent": _num(self.pl_percent),
            "purchaseDate": _iso(self.purchase_date),
            "lastUpdated": _iso(self.last_updated),
            "dayChange": _num(self.day_change),
            "dayChangePercent": _num(self.day_change_percent),
            "targetPrice": _num(self.target_price),
            "stopLoss": _num(self.stop_loss),
            "position": self.position_size,
        }


@dataclass
class ResolvedWatchlistEntry:
    """Symbol being watched."""
    symbol: str
    name: str
    added_date: date
    last_updated: datetime
    sector: str = "Unknown"
    current_price: Optional[Decimal] = None
    day_change: Optional[Decimal] = None
    day_change_percent: Optional[Decimal] = None
    target_price: Optional[Decimal] = None
    stop_loss: Optional[Decimal] = None
    notes: Optional[str] = None
    id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "symbol": self.symbol,
            "ticker": self.symbol,
            "name": self.name,
            "sector": self.sector,
            "currentPrice": _num(self.current_price),
            "dayChange": _num(self.day_change),
            "dayChangePercent": _num(self.day_change_percent),
            "targetPrice": _num(self.target_price),
            "stopLoss": _num(self.stop_loss),
            "notes": self.notes,
            "addedDate": _iso(self.added_date),
            "lastUpdated": _iso(self.last_updated),
        }


@dataclass
class ResolvedClosedPosition:
    """Realised trade: a full or partial sell of a position."""
    symbol: str
    name: str
    buy_price: Decimal
    sell_price: Decimal
    quantity: int
    invested: Decimal
    realized: Decimal
    pl: Decimal
    pl_percent: Decimal
    buy_date: date
    sell_date: date
    holding_period: HoldingPeriod = field(default_factory=HoldingPeriod.unavailable)
    sector: Optional[str] = None
    notes: Optional[str] = None
    id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "symbol": self.symbol,
            "ticker": self.symbol,
            "name": self.name,
            "sector": self.sector,
            "buyPrice": _num(self.buy_price),
            "sellPrice": _num(self.sell_price),
            "closePrice": _num(self.sell_price),
            "quantity": self.quantity,
            "invested": _num(self.invested),
            "realized": _num(self.realized),
            "closeValue": _num(self.realized),
            "pl": _num(self.pl),
            "plPercent": _num(self.pl_percent),
            "finalPL": _num(self.pl),
            "finalPLPercent": _num(self.pl_percent),
            "buyDate": _iso(self.buy_date),
            "purchaseDate": _iso(self.buy_date),
            "sellDate": _iso(self.sell_date),
            "closedDate": _iso(self.sell_date),
            "holdingPeriod": self.holding_period.to_json(),
            "notes": self.notes,
        }
