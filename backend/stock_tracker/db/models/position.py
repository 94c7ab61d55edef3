"""
Stock Portfolio Tracker - Position Model

One row per open holding. Several rows may share a symbol (separate buys).
Money columns hold 2 decimals, prices 4.
"""
from datetime import datetime
from decimal import Decimal
from sqlalchemy import (
    CheckConstraint, Column, Date, DateTime, ForeignKey, Integer, Numeric, String
)
from sqlalchemy.orm import relationship

from stock_tracker.db.database import Base


class Position(Base):
    """Open stock position."""

    __tablename__ = "portfolio"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_portfolio_quantity_non_negative"),
        CheckConstraint("buy_price >= 0", name="ck_portfolio_buy_price_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Symbol info
    symbol = Column(String(50), nullable=False)
    name = Column(String(255), nullable=False)
    sector = Column(String(100), nullable=True)

    # Position details
    buy_price = Column(Numeric(15, 4), nullable=False, default=Decimal("0"))
    current_price = Column(Numeric(15, 4), nullable=True)
    quantity = Column(Integer, nullable=False, default=0)

    # Derived amounts
    invested = Column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    current_value = Column(Numeric(15, 2), nullable=True)
    pl = Column(Numeric(15, 2), nullable=True)
    pl_percent = Column(Numeric(10, 2), nullable=True)

    # Market data
    day_change = Column(Numeric(15, 4), default=Decimal("0"))
    day_change_percent = Column(Numeric(10, 2), default=Decimal("0"))
    target_price = Column(Numeric(15, 4), nullable=True)
    stop_loss = Column(Numeric(15, 4), nullable=True)
    position_size = Column(String(20), default="Medium")

    # Dates
    purchase_date = Column(Date, nullable=False)
    last_updated = Column(DateTime, default=datetime.utcnow)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="positions")

    def __repr__(self):
        return f"<Position {self.symbol} qty={self.quantity}>"
