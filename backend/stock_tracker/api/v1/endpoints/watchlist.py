"""
Stock Portfolio Tracker - Watchlist Endpoints
"""
from typing import Annotated, Any, Dict, List

from fastapi import APIRouter, Body, Depends, status

from stock_tracker.core.portfolio import PortfolioLifecycleService
from stock_tracker.db.models.user import User
from stock_tracker.db.repositories import ReplaceAllStore
from stock_tracker.dependencies import (
    get_current_active_user,
    get_lifecycle_service,
    get_watchlist,
)
from stock_tracker.schemas.portfolio import BuyFromWatchlistRequest, SaveResponse

router = APIRouter()


@router.get("", response_model=List[Dict[str, Any]])
async def list_watchlist(
    current_user: Annotated[User, Depends(get_current_active_user)],
    store: Annotated[ReplaceAllStore, Depends(get_watchlist)],
):
    """Get the watchlist, most recently added first."""
    entries = await store.list_all(current_user.id)
    return [entry.to_dict() for entry in entries]


@router.post("", response_model=SaveResponse)
async def save_watchlist(
    current_user: Annotated[User, Depends(get_current_active_user)],
    store: Annotated[ReplaceAllStore, Depends(get_watchlist)],
    records: List[Any] = Body(...),
):
    """Replace the whole watchlist with the records sent."""
    outcome = await store.replace_all(current_user.id, records)
    return SaveResponse(
        message="Watchlist saved successfully",
        saved=outcome.inserted,
        skipped=outcome.skipped,
    )


@router.post("/{entry_id}/buy", status_code=status.HTTP_201_CREATED)
async def buy_from_watchlist(
    entry_id: int,
    data: BuyFromWatchlistRequest,
    current_user: Annotated[User, Depends(get_current_active_user)],
    service: Annotated[PortfolioLifecycleService, Depends(get_lifecycle_service)],
):
    """Buy a watched symbol and remove it from the watchlist."""
    position = await service.buy_from_watchlist(
        user_id=current_user.id,
        entry_id=entry_id,
        quantity=data.quantity,
        buy_price=data.buy_price,
        purchase_date=data.purchase_date,
        target_price=data.target_price,
        stop_loss=data.stop_loss,
    )
    return position.to_dict()
