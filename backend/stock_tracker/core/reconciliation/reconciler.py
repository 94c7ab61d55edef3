"""
Derived-Field Reconciler

Turns a sparse, loosely-named input record into a fully populated record of
one kind. Fields are resolved in dependency order: each computed default only
reads fields resolved before it.

Never raises. A record without a usable symbol comes back as None and is
dropped by the caller.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Mapping, Optional, TypeVar

from stock_tracker.core.reconciliation.aliases import (
    AliasTable,
    CLOSED_POSITION_ALIASES,
    CLOSED_POSITION_DERIVED_FIELDS,
    IDENTITY_ALIASES,
    POSITION_ALIASES,
    WATCHLIST_ALIASES,
)
from stock_tracker.core.reconciliation.records import (
    ResolvedClosedPosition,
    ResolvedPosition,
    ResolvedWatchlistEntry,
)
from stock_tracker.core.reconciliation.values import (
    HoldingPeriod,
    ZERO,
    percent_of,
    round_money,
    round_percent,
    round_price,
    to_date,
    to_datetime,
    to_decimal,
    to_int,
    to_text,
)

T = TypeVar("T")


def resolve_identity(raw: Mapping[str, Any]) -> Optional[str]:
    """
    First non-blank symbol among the identity aliases, trimmed.

    Numeric codes (e.g. BSE scrip codes sent as numbers) are taken as text.
    """
    for alias in IDENTITY_ALIASES:
        value = raw.get(alias)
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        if isinstance(value, (str, int, Decimal)):
            symbol = to_text(value)
            if symbol:
                return symbol
    return None


def resolve_field(
    raw: Mapping[str, Any],
    aliases: AliasTable,
    field_name: str,
    coerce: Callable[[Any], Optional[T]],
) -> Optional[T]:
    """First value among the field's aliases that survives coercion."""
    for alias in aliases[field_name]:
        value = coerce(raw.get(alias))
        if value is not None:
            return value
    return None


def _marked_unavailable(raw: Mapping[str, Any]) -> bool:
    return any(
        HoldingPeriod.marks_unavailable(raw.get(alias))
        for alias in CLOSED_POSITION_ALIASES["holding_period"]
    )


def _optional(value: Optional[Decimal], rounder: Callable[[Decimal], Decimal]) -> Optional[Decimal]:
    return rounder(value) if value is not None else None


def reconcile_position(
    raw: Mapping[str, Any],
    today: Optional[date] = None,
    now: Optional[datetime] = None,
) -> Optional[ResolvedPosition]:
    """
    Resolve an open position.

    Args:
        raw: Sparse input record
        today: Date used for a missing purchase date (defaults to today)
        now: Timestamp used for a missing last-updated value

    Returns:
        ResolvedPosition, or None if the record has no symbol
    """
    symbol = resolve_identity(raw)
    if symbol is None:
        return None

    def get(field_name: str, coerce: Callable[[Any], Optional[T]]) -> Optional[T]:
        return resolve_field(raw, POSITION_ALIASES, field_name, coerce)

    name = get("name", to_text) or f"{symbol} Ltd"

    buy_price = get("buy_price", to_decimal)
    buy_price = round_price(buy_price if buy_price is not None else ZERO)

    current_price = get("current_price", to_decimal)
    current_price = round_price(current_price) if current_price is not None else buy_price

    quantity = get("quantity", to_int)
    quantity = quantity if quantity is not None else 0

    invested = get("invested", to_decimal)
    invested = round_money(invested if invested is not None else buy_price * quantity)

    current_value = get("current_value", to_decimal)
    current_value = round_money(
        current_value if current_value is not None else current_price * quantity
    )

    pl = current_value - invested

    day_change = get("day_change", to_decimal)
    day_change_percent = get("day_change_percent", to_decimal)

    return ResolvedPosition(
        symbol=symbol,
        name=name,
        sector=get("sector", to_text),
        buy_price=buy_price,
        current_price=current_price,
        quantity=quantity,
        invested=invested,
        current_value=current_value,
        pl=pl,
        pl_percent=percent_of(pl, invested),
        purchase_date=get("purchase_date", to_date) or today or date.today(),
        last_updated=get("last_updated", to_datetime) or now or datetime.utcnow(),
        day_change=round_price(day_change if day_change is not None else ZERO),
        day_change_percent=round_percent(
            day_change_percent if day_change_percent is not None else ZERO
        ),
        target_price=_optional(get("target_price", to_decimal), round_price),
        stop_loss=_optional(get("stop_loss", to_decimal), round_price),
        position_size=get("position_size", to_text) or "Medium",
    )


def reconcile_watchlist_entry(
    raw: Mapping[str, Any],
    today: Optional[date] = None,
    now: Optional[datetime] = None,
) -> Optional[ResolvedWatchlistEntry]:
    """Resolve a watchlist entry, or None if the record has no symbol."""
    symbol = resolve_identity(raw)
    if symbol is None:
        return None

    def get(field_name: str, coerce: Callable[[Any], Optional[T]]) -> Optional[T]:
        return resolve_field(raw, WATCHLIST_ALIASES, field_name, coerce)

    return ResolvedWatchlistEntry(
        symbol=symbol,
        name=get("name", to_text) or f"{symbol} Ltd",
        sector=get("sector", to_text) or "Unknown",
        current_price=_optional(get("current_price", to_decimal), round_price),
        day_change=_optional(get("day_change", to_decimal), round_price),
        day_change_percent=_optional(get("day_change_percent", to_decimal), round_percent),
        target_price=_optional(get("target_price", to_decimal), round_price),
        stop_loss=_optional(get("stop_loss", to_decimal), round_price),
        notes=get("notes", to_text),
        added_date=get("added_date", to_date) or today or date.today(),
        last_updated=get("last_updated", to_datetime) or now or datetime.utcnow(),
    )


def reconcile_closed_position(
    raw: Mapping[str, Any],
    today: Optional[date] = None,
) -> Optional[ResolvedClosedPosition]:
    """
    Resolve a closed position.

    The holding period is taken from the record when it carries a day count;
    otherwise it is the whole-day difference between the supplied buy and
    sell dates, and unavailable when either date is missing or invalid.
    """
    symbol = resolve_identity(raw)
    if symbol is None:
        return None

    def get(field_name: str, coerce: Callable[[Any], Optional[T]]) -> Optional[T]:
        return resolve_field(raw, CLOSED_POSITION_ALIASES, field_name, coerce)

    today = today or date.today()

    buy_price = get("buy_price", to_decimal)
    buy_price = round_price(buy_price if buy_price is not None else ZERO)

    sell_price = get("sell_price", to_decimal)
    sell_price = round_price(sell_price) if sell_price is not None else buy_price

    quantity = get("quantity", to_int)
    quantity = quantity if quantity is not None else 0

    invested = get("invested", to_decimal)
    invested = round_money(invested if invested is not None else buy_price * quantity)

    realized = get("realized", to_decimal)
    realized = round_money(realized if realized is not None else sell_price * quantity)

    pl = realized - invested

    supplied_buy_date = get("buy_date", to_date)
    supplied_sell_date = get("sell_date", to_date)

    holding_period = get("holding_period", HoldingPeriod.parse)
    if holding_period is None:
        if _marked_unavailable(raw):
            # An explicit "N/A" is kept; the dates may be defaults from an earlier save
            holding_period = HoldingPeriod.unavailable()
        elif supplied_buy_date is not None and supplied_sell_date is not None:
            holding_period = HoldingPeriod.between(supplied_buy_date, supplied_sell_date)
        else:
            holding_period = HoldingPeriod.unavailable()

    return ResolvedClosedPosition(
        symbol=symbol,
        name=get("name", to_text) or f"{symbol} Ltd",
        sector=get("sector", to_text),
        buy_price=buy_price,
        sell_price=sell_price,
        quantity=quantity,
        invested=invested,
        realized=realized,
        pl=pl,
        pl_percent=percent_of(pl, invested),
        buy_date=supplied_buy_date or today,
        sell_date=supplied_sell_date or today,
        holding_period=holding_period,
        notes=get("notes", to_text),
    )


def rederive_closed_position(
    raw: Mapping[str, Any],
    today: Optional[date] = None,
) -> Optional[ResolvedClosedPosition]:
    """
    Resolve a closed position from its price, quantity and date fields only.

    Stored invested/realized values and day counts are ignored, so records
    written by older clients with stale derived fields come out consistent.
    An "N/A" holding period is kept: its dates were not supplied.
    """
    derived_keys = {
        alias
        for field_name in CLOSED_POSITION_DERIVED_FIELDS
        for alias in CLOSED_POSITION_ALIASES[field_name]
    }
    stripped = {
        key: value
        for key, value in raw.items()
        if key not in derived_keys or HoldingPeriod.marks_unavailable(value)
    }
    return reconcile_closed_position(stripped, today=today)
