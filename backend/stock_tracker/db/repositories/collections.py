"""
Replace-All Store

Per-user collections (positions, watchlist, closed positions) are saved by
the client as a whole: the stored collection is replaced by the one sent.
One generic store does this for every record kind; what differs per kind
(table, reconciler, row mapping, listing order) lives in a
CollectionDescriptor.
"""
from dataclasses import dataclass, fields
from typing import Any, Callable, Generic, Iterable, List, Mapping, Optional, Tuple, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from loguru import logger

from stock_tracker.core.reconciliation import (
    HoldingPeriod,
    ResolvedClosedPosition,
    ResolvedPosition,
    ResolvedWatchlistEntry,
    reconcile_closed_position,
    reconcile_position,
    reconcile_watchlist_entry,
)
from stock_tracker.db.database import reading, transaction
from stock_tracker.db.models.closed_position import ClosedPosition
from stock_tracker.db.models.position import Position
from stock_tracker.db.models.watchlist import WatchlistEntry

R = TypeVar("R")


@dataclass(frozen=True)
class CollectionDescriptor(Generic[R]):
    """How one record kind is reconciled, stored and listed."""
    kind: str
    model: Any
    reconcile: Callable[[Mapping[str, Any]], Optional[R]]
    to_row: Callable[[R], dict]
    from_row: Callable[[Any], R]
    order_by: Tuple[Any, ...]


@dataclass
class ReplaceResult:
    """Outcome of a successful replace."""
    inserted: int = 0
    skipped: int = 0


def _record_columns(record: Any, **overrides: Any) -> dict:
    """Dataclass fields as column values; the identity is always left to the database."""
    row = {f.name: getattr(record, f.name) for f in fields(record) if f.name != "id"}
    row.update(overrides)
    return row


# =========================
# Row mappings
# =========================

def _position_from_row(row: Position) -> ResolvedPosition:
    return ResolvedPosition(
        id=row.id,
        symbol=row.symbol,
        name=row.name,
        sector=row.sector,
        buy_price=row.buy_price,
        current_price=row.current_price if row.current_price is not None else row.buy_price,
        quantity=row.quantity,
        invested=row.invested,
        current_value=row.current_value,
        pl=row.pl,
        pl_percent=row.pl_percent,
        purchase_date=row.purchase_date,
        last_updated=row.last_updated,
        day_change=row.day_change,
        day_change_percent=row.day_change_percent,
        target_price=row.target_price,
        stop_loss=row.stop_loss,
        position_size=row.position_size,
    )


def _watchlist_entry_from_row(row: WatchlistEntry) -> ResolvedWatchlistEntry:
    return ResolvedWatchlistEntry(
        id=row.id,
        symbol=row.symbol,
        name=row.name,
        sector=row.sector,
        current_price=row.current_price,
        day_change=row.day_change,
        day_change_percent=row.day_change_percent,
        target_price=row.target_price,
        stop_loss=row.stop_loss,
        notes=row.notes,
        added_date=row.added_date,
        last_updated=row.last_updated,
    )


def _closed_position_from_row(row: ClosedPosition) -> ResolvedClosedPosition:
    return ResolvedClosedPosition(
        id=row.id,
        symbol=row.symbol,
        name=row.name,
        sector=row.sector,
        buy_price=row.buy_price,
        sell_price=row.sell_price,
        quantity=row.quantity,
        invested=row.invested,
        realized=row.realized,
        pl=row.pl,
        pl_percent=row.pl_percent,
        buy_date=row.buy_date,
        sell_date=row.sell_date,
        holding_period=HoldingPeriod.parse(row.holding_period) or HoldingPeriod.unavailable(),
        notes=row.notes,
    )


POSITIONS = CollectionDescriptor(
    kind="position",
    model=Position,
    reconcile=reconcile_position,
    to_row=_record_columns,
    from_row=_position_from_row,
    order_by=(Position.created_at.desc(), Position.id.desc()),
)

WATCHLIST = CollectionDescriptor(
    kind="watchlist entry",
    model=WatchlistEntry,
    reconcile=reconcile_watchlist_entry,
    to_row=_record_columns,
    from_row=_watchlist_entry_from_row,
    order_by=(WatchlistEntry.added_date.desc(), WatchlistEntry.id.desc()),
)

CLOSED_POSITIONS = CollectionDescriptor(
    kind="closed position",
    model=ClosedPosition,
    reconcile=reconcile_closed_position,
    to_row=lambda record: _record_columns(record, holding_period=str(record.holding_period)),
    from_row=_closed_position_from_row,
    order_by=(ClosedPosition.sell_date.desc(), ClosedPosition.id.desc()),
)


class ReplaceAllStore(Generic[R]):
    """
    Replace-all persistence for one record kind.

    ``replace_all`` is atomic: afterwards the stored collection is exactly the
    valid records sent, or (on error) exactly what was stored before.
    The ``*_in`` variants do the same work on a session the caller already
    has open, without committing it.
    """

    def __init__(self, session_factory: async_sessionmaker, descriptor: CollectionDescriptor[R]):
        self.session_factory = session_factory
        self.descriptor = descriptor

    async def list_all(self, user_id: int) -> List[R]:
        """
        Get a user's collection in display order.

        Raises:
            StorageUnavailableError: If the database cannot be reached
        """
        async with reading(self.session_factory) as session:
            return await self.list_in(session, user_id)

    async def list_in(self, session: AsyncSession, user_id: int) -> List[R]:
        model = self.descriptor.model
        result = await session.execute(
            select(model)
            .where(model.user_id == user_id)
            .order_by(*self.descriptor.order_by)
        )
        return [self.descriptor.from_row(row) for row in result.scalars().all()]

    async def replace_all(self, user_id: int, raw_records: Iterable[Any]) -> ReplaceResult:
        """
        Replace a user's whole collection.

        Args:
            user_id: Authenticated user ID
            raw_records: Sparse input records

        Returns:
            ReplaceResult with inserted/skipped counts

        Raises:
            StorageUnavailableError: If no connection could be opened
            PersistenceFailedError: If the delete or an insert failed
                (already rolled back)
        """
        async with transaction(self.session_factory) as session:
            outcome = await self.replace_in(session, user_id, raw_records)

        logger.info(
            f"Replaced {self.descriptor.kind} collection for user {user_id}: "
            f"{outcome.inserted} saved, {outcome.skipped} skipped"
        )
        return outcome

    async def replace_in(
        self,
        session: AsyncSession,
        user_id: int,
        raw_records: Iterable[Any],
    ) -> ReplaceResult:
        """Delete and re-insert within an open transaction (no commit)."""
        kind = self.descriptor.kind
        model = self.descriptor.model

        records: List[R] = []
        skipped = 0
        for index, raw in enumerate(raw_records):
            record = self.descriptor.reconcile(raw) if isinstance(raw, Mapping) else None
            if record is None:
                logger.warning(f"Skipping {kind} #{index} without a symbol for user {user_id}: {raw!r}")
                skipped += 1
                continue
            records.append(record)

        await session.execute(delete(model).where(model.user_id == user_id))

        for record in records:
            session.add(model(user_id=user_id, **self.descriptor.to_row(record)))
            # Flush per row so a failing record aborts before later ones are sent
            await session.flush()

        return ReplaceResult(inserted=len(records), skipped=skipped)


def get_position_store(session_factory: async_sessionmaker) -> ReplaceAllStore[ResolvedPosition]:
    """Factory function to create the positions store."""
    return ReplaceAllStore(session_factory, POSITIONS)


def get_watchlist_store(session_factory: async_sessionmaker) -> ReplaceAllStore[ResolvedWatchlistEntry]:
    """Factory function to create the watchlist store."""
    return ReplaceAllStore(session_factory, WATCHLIST)


def get_closed_position_store(session_factory: async_sessionmaker) -> ReplaceAllStore[ResolvedClosedPosition]:
    """Factory function to create the closed positions store."""
    return ReplaceAllStore(session_factory, CLOSED_POSITIONS)
