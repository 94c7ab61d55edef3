"""
Stock Portfolio Tracker - Admin Endpoints
"""
from typing import Annotated, List

from fastapi import APIRouter, Depends, Query

from stock_tracker.db.models.user import User
from stock_tracker.db.repositories.user import UserRepository
from stock_tracker.dependencies import get_current_superuser, get_user_repository
from stock_tracker.schemas.user import User as UserSchema, UserWithStats

router = APIRouter()


@router.get("/users", response_model=List[UserWithStats])
async def list_users_with_stats(
    _: Annotated[User, Depends(get_current_superuser)],
    user_repo: Annotated[UserRepository, Depends(get_user_repository)],
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
):
    """All users, newest first, each with collection counts and totals."""
    users = await user_repo.get_all(skip=skip, limit=limit)
    return [
        UserWithStats(
            **UserSchema.model_validate(user).model_dump(),
            stats=await user_repo.get_stats(user.id),
        )
        for user in users
    ]
