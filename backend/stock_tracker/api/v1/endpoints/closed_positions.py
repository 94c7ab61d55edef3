"""
Stock Portfolio Tracker - Closed Positions Endpoints
"""
from typing import Annotated, Any, Dict, List

from fastapi import APIRouter, Body, Depends

from stock_tracker.core.reconciliation import summarize_closed_positions
from stock_tracker.db.models.user import User
from stock_tracker.db.repositories import ReplaceAllStore
from stock_tracker.dependencies import get_closed_positions, get_current_active_user
from stock_tracker.schemas.portfolio import SaveResponse

router = APIRouter()


@router.get("", response_model=List[Dict[str, Any]])
async def list_closed_positions(
    current_user: Annotated[User, Depends(get_current_active_user)],
    store: Annotated[ReplaceAllStore, Depends(get_closed_positions)],
):
    """Get closed positions, latest sell date first."""
    positions = await store.list_all(current_user.id)
    return [position.to_dict() for position in positions]


@router.post("", response_model=SaveResponse)
async def save_closed_positions(
    current_user: Annotated[User, Depends(get_current_active_user)],
    store: Annotated[ReplaceAllStore, Depends(get_closed_positions)],
    records: List[Any] = Body(...),
):
    """Replace all closed positions with the records sent."""
    outcome = await store.replace_all(current_user.id, records)
    return SaveResponse(
        message="Closed positions saved successfully",
        saved=outcome.inserted,
        skipped=outcome.skipped,
    )


@router.get("/summary")
async def closed_positions_summary(
    current_user: Annotated[User, Depends(get_current_active_user)],
    store: Annotated[ReplaceAllStore, Depends(get_closed_positions)],
):
    """
    Totals over all closed positions.

    Each position's invested/realized/P&L/holding period is recomputed from
    its prices, quantity and dates rather than read from storage.
    """
    positions = await store.list_all(current_user.id)
    return summarize_closed_positions(positions).to_dict()
