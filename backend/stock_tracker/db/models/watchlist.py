"""
Stock Portfolio Tracker - Watchlist Model
"""
from datetime import datetime
from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from stock_tracker.db.database import Base


class WatchlistEntry(Base):
    """Symbol on a user's watchlist."""

    __tablename__ = "watchlist"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Symbol info
    symbol = Column(String(50), nullable=False)
    name = Column(String(255), nullable=False)
    sector = Column(String(100), default="Unknown")

    # Market data (refreshed by the client)
    current_price = Column(Numeric(15, 4), nullable=True)
    day_change = Column(Numeric(15, 4), nullable=True)
    day_change_percent = Column(Numeric(10, 2), nullable=True)
    target_price = Column(Numeric(15, 4), nullable=True)
    stop_loss = Column(Numeric(15, 4), nullable=True)
    notes = Column(Text, nullable=True)

    # Dates
    added_date = Column(Date, nullable=False)
    last_updated = Column(DateTime, default=datetime.utcnow)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="watchlist_entries")

    def __repr__(self):
        return f"<WatchlistEntry {self.symbol}>"
