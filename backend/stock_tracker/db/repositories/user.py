"""
Stock Portfolio Tracker - User Repository
CRUD operations for User model
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional, List

from sqlalchemy import func, select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from stock_tracker.db.models.closed_position import ClosedPosition
from stock_tracker.db.models.position import Position
from stock_tracker.db.models.user import User
from stock_tracker.db.models.watchlist import WatchlistEntry
from stock_tracker.schemas.user import UserCreate, UserStats
from stock_tracker.core.security import get_password_hash, verify_password


class UserRepository:
    """Repository for User CRUD operations."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def get_by_id(self, user_id: int) -> Optional[User]:
        """
        Get user by ID.

        Args:
            user_id: The user's ID

        Returns:
            User object if found, None otherwise
        """
        result = await self.session.execute(
            select(User).where(User.id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(
            select(User).where(User.email == email)
        )
        return result.scalar_one_or_none()

    async def get_by_username(self, username: str) -> Optional[User]:
        result = await self.session.execute(
            select(User).where(User.username == username)
        )
        return result.scalar_one_or_none()

    async def get_by_email_or_username(
        self,
        email: str,
        username: str
    ) -> Optional[User]:
        """
        Get user by email or username.

        Returns:
            First user matching either field, None otherwise
        """
        result = await self.session.execute(
            select(User).where(
                or_(User.email == email, User.username == username)
            )
        )
        return result.scalars().first()

    async def get_all(
        self,
        skip: int = 0,
        limit: int = 100
    ) -> List[User]:
        """
        Get all users, newest first.

        Args:
            skip: Number of records to skip
            limit: Maximum number of records to return
        """
        result = await self.session.execute(
            select(User)
            .order_by(User.created_at.desc(), User.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def create(self, user_data: UserCreate) -> User:
        """
        Create a new user.

        Args:
            user_data: User creation data

        Returns:
            Created User object
        """
        user = User(
            email=user_data.email,
            username=user_data.username,
            phone=user_data.phone,
            hashed_password=get_password_hash(user_data.password),
            is_active=True,
            is_superuser=False,
        )
        self.session.add(user)
        await self.session.commit()
        await self.session.refresh(user)
        return user

    async def authenticate(
        self,
        email_or_username: str,
        password: str
    ) -> Optional[User]:
        """
        Authenticate a user by email/username and password.

        Args:
            email_or_username: User's email address or username
            password: Plain text password

        Returns:
            User object if authentication successful, None otherwise
        """
        # Usernames cannot contain "@", so try email first when one is present
        if "@" in email_or_username:
            user = await self.get_by_email(email_or_username)
        else:
            user = await self.get_by_username(email_or_username)

        if not user:
            return None
        if not verify_password(password, user.hashed_password):
            return None
        return user

    async def update_last_login(self, user: User) -> User:
        """Stamp the user's last login time."""
        user.last_login = datetime.utcnow()
        await self.session.commit()
        await self.session.refresh(user)
        return user

    async def get_stats(self, user_id: int) -> UserStats:
        """
        Aggregate a user's collections.

        Args:
            user_id: User ID

        Returns:
            UserStats with row counts and open-position totals
        """
        position_row = (
            await self.session.execute(
                select(
                    func.count(Position.id),
                    func.coalesce(func.sum(Position.invested), 0),
                    func.coalesce(func.sum(Position.current_value), 0),
                ).where(Position.user_id == user_id)
            )
        ).one()

        closed_count = await self.session.scalar(
            select(func.count(ClosedPosition.id)).where(ClosedPosition.user_id == user_id)
        )
        watchlist_count = await self.session.scalar(
            select(func.count(WatchlistEntry.id)).where(WatchlistEntry.user_id == user_id)
        )

        position_count, total_invested, total_current_value = position_row
        return UserStats(
            position_count=position_count,
            closed_position_count=closed_count or 0,
            watchlist_count=watchlist_count or 0,
            total_invested=float(Decimal(str(total_invested))),
            total_current_value=float(Decimal(str(total_current_value))),
        )
