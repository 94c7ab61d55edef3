"""
Stock Portfolio Tracker - Database Status Endpoint
"""
from typing import Annotated

from fastapi import APIRouter, Depends

from stock_tracker.db.database import DatabaseHealth
from stock_tracker.dependencies import get_db_health

router = APIRouter()


@router.get("/db-status")
async def database_status(
    health: Annotated[DatabaseHealth, Depends(get_db_health)],
):
    """Re-check the database connection and report the result."""
    await health.check()
    return health.as_dict()
