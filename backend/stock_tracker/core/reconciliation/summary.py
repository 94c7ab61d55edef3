"""
Closed Positions Summary

Read-time totals over a user's closed positions. Each position is re-derived
from its prices, quantity and dates before it is counted.
"""
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from stock_tracker.core.reconciliation.reconciler import rederive_closed_position
from stock_tracker.core.reconciliation.records import ResolvedClosedPosition
from stock_tracker.core.reconciliation.values import ZERO, percent_of


@dataclass
class ClosedPositionSummary:
    """Totals shown above the closed positions table."""
    position_count: int = 0
    total_invested: Decimal = ZERO
    total_realized: Decimal = ZERO
    total_pl: Decimal = ZERO
    average_return: Decimal = ZERO
    winning_positions: int = 0
    losing_positions: int = 0
    positions: List[ResolvedClosedPosition] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "positionCount": self.position_count,
            "totalInvested": float(self.total_invested),
            "totalRealized": float(self.total_realized),
            "totalPL": float(self.total_pl),
            "averageReturn": float(self.average_return),
            "winningPositions": self.winning_positions,
            "losingPositions": self.losing_positions,
            "positions": [position.to_dict() for position in self.positions],
        }


def summarize_closed_positions(
    records: Iterable[Union[Mapping[str, Any], ResolvedClosedPosition]],
    today: Optional[date] = None,
) -> ClosedPositionSummary:
    """
    Summarise closed positions.

    Args:
        records: Raw mappings or previously resolved positions
        today: Date used for missing buy/sell dates

    Returns:
        ClosedPositionSummary; average return is total P&L over total
        invested, 0 when nothing was invested
    """
    positions: List[ResolvedClosedPosition] = []
    for record in records:
        raw = record.to_dict() if isinstance(record, ResolvedClosedPosition) else record
        position = rederive_closed_position(raw, today=today)
        if position is None:
            continue
        if isinstance(record, ResolvedClosedPosition):
            position.id = record.id
        positions.append(position)

    total_invested = sum((p.invested for p in positions), ZERO)
    total_realized = sum((p.realized for p in positions), ZERO)
    total_pl = sum((p.pl for p in positions), ZERO)

    return ClosedPositionSummary(
        position_count=len(positions),
        total_invested=total_invested,
        total_realized=total_realized,
        total_pl=total_pl,
        average_return=percent_of(total_pl, total_invested),
        winning_positions=sum(1 for p in positions if p.pl > 0),
        losing_positions=sum(1 for p in positions if p.pl < 0),
        positions=positions,
    )
