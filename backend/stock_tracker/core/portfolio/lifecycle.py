"""
Portfolio Lifecycle Service

Buy, sell and buy-from-watchlist. Each operation touches more than one row
(and often more than one table), so each runs in a single transaction: either
every change lands or none does.

Usage:
    service = PortfolioLifecycleService(async_session_maker)

    position = await service.buy(user_id=1, raw={"symbol": "TCS", "buyPrice": 3500, "quantity": 10})
    outcome = await service.sell(user_id=1, position_id=position.id, quantity=4, sell_price=Decimal("3900"))
"""
from dataclasses import asdict, dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from loguru import logger

from stock_tracker.core.reconciliation import (
    ResolvedClosedPosition,
    ResolvedPosition,
    reconcile_closed_position,
    reconcile_position,
)
from stock_tracker.core.reconciliation.values import round_price, to_decimal
from stock_tracker.db.database import transaction
from stock_tracker.db.models.closed_position import ClosedPosition
from stock_tracker.db.models.position import Position
from stock_tracker.db.models.watchlist import WatchlistEntry
from stock_tracker.db.repositories.collections import CLOSED_POSITIONS, POSITIONS
from stock_tracker.utils.exceptions import (
    InsufficientSharesError,
    InvalidOrderError,
    PositionNotFoundError,
    WatchlistEntryNotFoundError,
)

# Fields recomputed whenever quantity or cost basis changes
_POSITION_DERIVED = ("invested", "current_value", "pl", "pl_percent", "id")


@dataclass
class SellOutcome:
    """Result of a sell: the remaining position (None after a full sell) and the closed trade."""
    closed: ResolvedClosedPosition
    remaining: Optional[ResolvedPosition] = None

    @property
    def fully_closed(self) -> bool:
        return self.remaining is None


def _position_inputs(row: Position) -> dict:
    """A stored position as reconciler input, minus everything derived from quantity."""
    raw = asdict(POSITIONS.from_row(row))
    for key in _POSITION_DERIVED:
        raw.pop(key, None)
    return raw


def _apply(row: Any, values: dict) -> None:
    for key, value in values.items():
        setattr(row, key, value)


class PortfolioLifecycleService:
    """
    Multi-row portfolio operations.

    Raises the trading exceptions (PositionNotFoundError,
    InsufficientSharesError, ...) for bad requests; storage failures surface
    as StorageUnavailableError / PersistenceFailedError with nothing changed.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        today: Optional[Callable[[], date]] = None,
    ):
        self.session_factory = session_factory
        self._today = today or date.today

    # ==================== Buy ====================

    async def buy(self, user_id: int, raw: Mapping[str, Any]) -> ResolvedPosition:
        """
        Add a new position.

        Args:
            user_id: Owner user ID
            raw: Sparse position record (same shape the portfolio accepts)

        Returns:
            The stored position
        """
        resolved = reconcile_position(raw, today=self._today())
        if resolved is None:
            raise InvalidOrderError("Symbol is required")
        if resolved.quantity <= 0:
            raise InvalidOrderError("Quantity must be positive")

        async with transaction(self.session_factory) as session:
            row = Position(user_id=user_id, **POSITIONS.to_row(resolved))
            session.add(row)
            await session.flush()
            stored = POSITIONS.from_row(row)

        logger.info(f"User {user_id} bought {stored.quantity} {stored.symbol} @ {stored.buy_price}")
        return stored

    # ==================== Sell ====================

    async def sell(
        self,
        user_id: int,
        position_id: int,
        quantity: int,
        sell_price: Decimal,
        sell_date: Optional[date] = None,
        notes: Optional[str] = None,
    ) -> SellOutcome:
        """
        Sell part or all of a position.

        A partial sell reduces the position's quantity and recomputes its
        invested/value/P&L; a full sell deletes it. Either way exactly one
        closed position is recorded.

        Raises:
            PositionNotFoundError: Position does not exist or belongs to someone else
            InvalidOrderError: Non-positive quantity or negative price
            InsufficientSharesError: Selling more than is held
        """
        if quantity <= 0:
            raise InvalidOrderError("Quantity must be positive")
        if sell_price < 0:
            raise InvalidOrderError("Sell price cannot be negative")

        sell_date = sell_date or self._today()

        async with transaction(self.session_factory) as session:
            position = await self._get_owned(session, Position, position_id, user_id)
            if position is None:
                raise PositionNotFoundError()
            if quantity > position.quantity:
                raise InsufficientSharesError(
                    f"Cannot sell {quantity} shares of {position.symbol}, only {position.quantity} held"
                )

            closed = reconcile_closed_position(
                {
                    "symbol": position.symbol,
                    "name": position.name,
                    "sector": position.sector,
                    "buy_price": position.buy_price,
                    "sell_price": sell_price,
                    "quantity": quantity,
                    "buy_date": position.purchase_date,
                    "sell_date": sell_date,
                    "notes": notes,
                },
                today=self._today(),
            )
            closed_row = ClosedPosition(user_id=user_id, **CLOSED_POSITIONS.to_row(closed))
            session.add(closed_row)

            remaining = None
            if quantity == position.quantity:
                await session.delete(position)
            else:
                raw = _position_inputs(position)
                raw["quantity"] = position.quantity - quantity
                raw["last_updated"] = datetime.utcnow()
                updated = reconcile_position(raw, today=self._today())
                _apply(position, POSITIONS.to_row(updated))
                remaining = updated

            await session.flush()
            closed.id = closed_row.id
            if remaining is not None:
                remaining.id = position.id

        logger.info(
            f"User {user_id} sold {quantity} {closed.symbol} @ {closed.sell_price} "
            f"(P&L {closed.pl}, {'full' if remaining is None else 'partial'})"
        )
        return SellOutcome(closed=closed, remaining=remaining)

    # ==================== Buy from watchlist ====================

    async def buy_from_watchlist(
        self,
        user_id: int,
        entry_id: int,
        quantity: int,
        buy_price: Optional[Decimal] = None,
        purchase_date: Optional[date] = None,
        target_price: Optional[Decimal] = None,
        stop_loss: Optional[Decimal] = None,
    ) -> ResolvedPosition:
        """
        Buy a watched symbol and take it off the watchlist.

        If the symbol is already held, the shares are added to that position
        at the weighted average buy price; otherwise a new position is
        created. The watchlist entry is removed in the same transaction.

        Args:
            buy_price: Defaults to the entry's current price

        Raises:
            WatchlistEntryNotFoundError: Entry does not exist or belongs to someone else
            InvalidOrderError: Non-positive quantity or no usable price
        """
        if quantity <= 0:
            raise InvalidOrderError("Quantity must be positive")

        async with transaction(self.session_factory) as session:
            entry = await self._get_owned(session, WatchlistEntry, entry_id, user_id)
            if entry is None:
                raise WatchlistEntryNotFoundError()

            price = to_decimal(buy_price) if buy_price is not None else entry.current_price
            if price is None or price < 0:
                raise InvalidOrderError(f"No buy price for {entry.symbol}")
            price = round_price(price)

            existing = (
                await session.execute(
                    select(Position)
                    .where(Position.user_id == user_id, Position.symbol == entry.symbol)
                    .order_by(Position.id)
                    .limit(1)
                )
            ).scalar_one_or_none()

            if existing is not None:
                total_quantity = existing.quantity + quantity
                total_invested = existing.invested + price * quantity
                raw = _position_inputs(existing)
                raw.update(
                    quantity=total_quantity,
                    buy_price=total_invested / total_quantity,
                    invested=total_invested,
                    last_updated=datetime.utcnow(),
                )
                resolved = reconcile_position(raw, today=self._today())
                _apply(existing, POSITIONS.to_row(resolved))
                row = existing
            else:
                resolved = reconcile_position(
                    {
                        "symbol": entry.symbol,
                        "name": entry.name,
                        "sector": entry.sector,
                        "buy_price": price,
                        "current_price": entry.current_price,
                        "quantity": quantity,
                        "day_change": entry.day_change,
                        "day_change_percent": entry.day_change_percent,
                        "target_price": target_price if target_price is not None else entry.target_price,
                        "stop_loss": stop_loss if stop_loss is not None else entry.stop_loss,
                        "purchase_date": purchase_date,
                    },
                    today=self._today(),
                )
                row = Position(user_id=user_id, **POSITIONS.to_row(resolved))
                session.add(row)

            await session.delete(entry)
            await session.flush()
            resolved.id = row.id

        logger.info(
            f"User {user_id} bought {quantity} {resolved.symbol} from watchlist "
            f"({'added to existing position' if existing is not None else 'new position'})"
        )
        return resolved

    @staticmethod
    async def _get_owned(session: AsyncSession, model: Any, record_id: int, user_id: int):
        result = await session.execute(
            select(model).where(model.id == record_id, model.user_id == user_id)
        )
        return result.scalar_one_or_none()
