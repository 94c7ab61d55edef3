"""
Stock Portfolio Tracker - Dependencies
Dependency injection for FastAPI endpoints
"""
from typing import AsyncGenerator

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from stock_tracker.config import settings
from stock_tracker.core.portfolio import PortfolioLifecycleService
from stock_tracker.core.security import verify_token
from stock_tracker.db.database import DatabaseHealth
from stock_tracker.db.models.user import User
from stock_tracker.db.repositories import (
    ReplaceAllStore,
    UserRepository,
    get_closed_position_store,
    get_position_store,
    get_watchlist_store,
)
from stock_tracker.utils.exceptions import raise_forbidden, raise_unauthorized


# OAuth2 scheme for token authentication
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_PREFIX}/auth/login"
)


def get_session_maker(request: Request) -> async_sessionmaker:
    """Session factory created at start-up (see main.create_application)."""
    return request.app.state.session_maker


def get_db_health(request: Request) -> DatabaseHealth:
    return request.app.state.db_health


async def get_db(
    session_maker: async_sessionmaker = Depends(get_session_maker)
) -> AsyncGenerator[AsyncSession, None]:
    """
    Database session dependency.

    Yields:
        AsyncSession: Database session
    """
    async with session_maker() as session:
        yield session


async def get_user_repository(
    db: AsyncSession = Depends(get_db)
) -> UserRepository:
    return UserRepository(db)


def get_positions(
    session_maker: async_sessionmaker = Depends(get_session_maker)
) -> ReplaceAllStore:
    return get_position_store(session_maker)


def get_watchlist(
    session_maker: async_sessionmaker = Depends(get_session_maker)
) -> ReplaceAllStore:
    return get_watchlist_store(session_maker)


def get_closed_positions(
    session_maker: async_sessionmaker = Depends(get_session_maker)
) -> ReplaceAllStore:
    return get_closed_position_store(session_maker)


def get_lifecycle_service(
    session_maker: async_sessionmaker = Depends(get_session_maker)
) -> PortfolioLifecycleService:
    return PortfolioLifecycleService(session_maker)


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    user_repo: UserRepository = Depends(get_user_repository)
) -> User:
    """
    Get current authenticated user from JWT token.

    Args:
        token: JWT access token
        user_repo: User repository

    Returns:
        Current User object

    Raises:
        HTTPException: If token is invalid or user not found
    """
    user_id = verify_token(token, token_type="access")
    if user_id is None or not user_id.isdigit():
        raise_unauthorized("Could not validate credentials")

    user = await user_repo.get_by_id(int(user_id))
    if user is None:
        raise_unauthorized("Could not validate credentials")

    return user


async def get_current_active_user(
    current_user: User = Depends(get_current_user)
) -> User:
    """
    Get current active user.

    Raises:
        HTTPException: If user is inactive
    """
    if not current_user.is_active:
        raise_forbidden("Inactive user")
    return current_user


async def get_current_superuser(
    current_user: User = Depends(get_current_active_user)
) -> User:
    """
    Get current superuser.

    Raises:
        HTTPException: If user is not a superuser
    """
    if not current_user.is_superuser:
        raise_forbidden("The user doesn't have enough privileges")
    return current_user
