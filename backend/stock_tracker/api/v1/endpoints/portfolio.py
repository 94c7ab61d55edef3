"""
Stock Portfolio Tracker - Portfolio Endpoints
Open positions: whole-collection load/save, buy and sell
"""
from typing import Annotated, Any, Dict, List

from fastapi import APIRouter, Body, Depends, status

from stock_tracker.core.portfolio import PortfolioLifecycleService
from stock_tracker.db.models.user import User
from stock_tracker.db.repositories import ReplaceAllStore
from stock_tracker.dependencies import (
    get_current_active_user,
    get_lifecycle_service,
    get_positions,
)
from stock_tracker.schemas.portfolio import SaveResponse, SellRequest, SellResponse

router = APIRouter()


@router.get("", response_model=List[Dict[str, Any]])
async def list_positions(
    current_user: Annotated[User, Depends(get_current_active_user)],
    store: Annotated[ReplaceAllStore, Depends(get_positions)],
):
    """Get all open positions, most recently added first."""
    positions = await store.list_all(current_user.id)
    return [position.to_dict() for position in positions]


@router.post("", response_model=SaveResponse)
async def save_positions(
    current_user: Annotated[User, Depends(get_current_active_user)],
    store: Annotated[ReplaceAllStore, Depends(get_positions)],
    records: List[Any] = Body(...),
):
    """
    Replace the whole portfolio with the records sent.

    Records without a symbol are skipped. On failure nothing changes.
    """
    outcome = await store.replace_all(current_user.id, records)
    return SaveResponse(
        message="Portfolio saved successfully",
        saved=outcome.inserted,
        skipped=outcome.skipped,
    )


@router.post("/buy", status_code=status.HTTP_201_CREATED)
async def buy_position(
    current_user: Annotated[User, Depends(get_current_active_user)],
    service: Annotated[PortfolioLifecycleService, Depends(get_lifecycle_service)],
    record: Dict[str, Any] = Body(...),
):
    """Add a new position from a (sparse) position record."""
    position = await service.buy(current_user.id, record)
    return position.to_dict()


@router.post("/{position_id}/sell", response_model=SellResponse)
async def sell_position(
    position_id: int,
    data: SellRequest,
    current_user: Annotated[User, Depends(get_current_active_user)],
    service: Annotated[PortfolioLifecycleService, Depends(get_lifecycle_service)],
):
    """Sell part or all of a position, recording a closed position."""
    outcome = await service.sell(
        user_id=current_user.id,
        position_id=position_id,
        quantity=data.quantity,
        sell_price=data.sell_price,
        sell_date=data.sell_date,
        notes=data.notes,
    )
    return SellResponse(
        closed_position=outcome.closed.to_dict(),
        remaining_position=outcome.remaining.to_dict() if outcome.remaining else None,
        fully_closed=outcome.fully_closed,
    )
