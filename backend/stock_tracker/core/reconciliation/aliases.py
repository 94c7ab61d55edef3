"""
Accepted input field names per record kind.

Each table maps a resolved field to the raw keys that may carry it, in
priority order: the first key holding a usable value wins. Records arrive
from several client generations, hence camelCase and snake_case spellings
and the stored close*/final* names for closed positions, which take
priority over the sell*/realized names the UI sends.

pl and pl_percent are deliberately absent: they are always recomputed from
the resolved invested and value amounts.
"""
from typing import Dict, Tuple

AliasTable = Dict[str, Tuple[str, ...]]


IDENTITY_ALIASES: Tuple[str, ...] = ("ticker", "symbol")


POSITION_ALIASES: AliasTable = {
    "name": ("name",),
    "sector": ("sector",),
    "buy_price": ("buyPrice", "buy_price"),
    "current_price": ("currentPrice", "current_price"),
    "quantity": ("quantity",),
    "invested": ("invested",),
    "current_value": ("currentValue", "current_value"),
    "purchase_date": ("purchaseDate", "purchase_date", "buyDate", "buy_date"),
    "last_updated": ("lastUpdated", "last_updated"),
    "day_change": ("dayChange", "day_change"),
    "day_change_percent": ("dayChangePercent", "day_change_percent"),
    "target_price": ("targetPrice", "target_price"),
    "stop_loss": ("stopLoss", "stop_loss"),
    "position_size": ("position", "positionSize", "position_size"),
}


WATCHLIST_ALIASES: AliasTable = {
    "name": ("name",),
    "sector": ("sector",),
    "current_price": ("currentPrice", "current_price"),
    "day_change": ("dayChange", "day_change"),
    "day_change_percent": ("dayChangePercent", "day_change_percent"),
    "target_price": ("targetPrice", "target_price"),
    "stop_loss": ("stopLoss", "stop_loss"),
    "notes": ("notes",),
    "added_date": ("addedDate", "added_date"),
    "last_updated": ("lastUpdated", "last_updated"),
}


CLOSED_POSITION_ALIASES: AliasTable = {
    "name": ("name",),
    "sector": ("sector",),
    "buy_price": ("buyPrice", "buy_price"),
    "sell_price": (
        "closePrice", "close_price", "sellPrice", "sell_price", "currentPrice", "current_price",
    ),
    "quantity": ("quantity",),
    "invested": ("invested",),
    "realized": ("closeValue", "close_value", "realized"),
    "buy_date": ("purchaseDate", "purchase_date", "buyDate", "buy_date"),
    "sell_date": ("closedDate", "closed_date", "sellDate", "sell_date"),
    "holding_period": ("holdingPeriod", "holding_period"),
    "notes": ("notes",),
}


# Closed-position fields re-derived (never trusted) when summarising
CLOSED_POSITION_DERIVED_FIELDS: Tuple[str, ...] = ("invested", "realized", "holding_period")
