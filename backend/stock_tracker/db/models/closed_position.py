"""
Stock Portfolio Tracker - Closed Position Model

holding_period stores the day count as text, or "N/A".
"""
from datetime import datetime
from decimal import Decimal
from sqlalchemy import (
    CheckConstraint, Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text
)
from sqlalchemy.orm import relationship

from stock_tracker.db.database import Base


class ClosedPosition(Base):
    """Realised sale of (part of) a position."""

    __tablename__ = "closed_positions"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_closed_positions_quantity_non_negative"),
        CheckConstraint("buy_price >= 0", name="ck_closed_positions_buy_price_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Symbol info
    symbol = Column(String(50), nullable=False)
    name = Column(String(255), nullable=False)
    sector = Column(String(100), nullable=True)

    # Trade details
    buy_price = Column(Numeric(15, 4), nullable=False, default=Decimal("0"))
    sell_price = Column(Numeric(15, 4), nullable=False, default=Decimal("0"))
    quantity = Column(Integer, nullable=False, default=0)

    # Derived amounts
    invested = Column(Numeric(15, 2), nullable=False)
    realized = Column(Numeric(15, 2), nullable=False)
    pl = Column(Numeric(15, 2), nullable=False)
    pl_percent = Column(Numeric(10, 2), nullable=False)

    # Dates
    buy_date = Column(Date, nullable=False)
    sell_date = Column(Date, nullable=False)
    holding_period = Column(String(50), nullable=True)

    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="closed_positions")

    def __repr__(self):
        return f"<ClosedPosition {self.symbol} qty={self.quantity}>"
