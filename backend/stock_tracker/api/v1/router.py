"""
Stock Portfolio Tracker - API v1 Router
"""
from fastapi import APIRouter

from stock_tracker.api.v1.endpoints import (
    admin, auth, closed_positions, health, portfolio, watchlist
)

api_router = APIRouter()


# API v1 root endpoint
@api_router.get("/", tags=["API Info"])
async def api_root():
    """API v1 root - returns version info."""
    return {
        "api": "Stock Portfolio Tracker",
        "version": "v1",
        "status": "operational"
    }


# Include all endpoint routers
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(portfolio.router, prefix="/portfolio", tags=["Portfolio"])
api_router.include_router(watchlist.router, prefix="/watchlist", tags=["Watchlist"])
api_router.include_router(closed_positions.router, prefix="/closed-positions", tags=["Closed Positions"])
api_router.include_router(admin.router, prefix="/admin", tags=["Admin"])
api_router.include_router(health.router, tags=["Health"])
