"""
Stock Portfolio Tracker - Portfolio Operations
"""
from stock_tracker.core.portfolio.lifecycle import PortfolioLifecycleService, SellOutcome

__all__ = ["PortfolioLifecycleService", "SellOutcome"]
