"""
Stock Portfolio Tracker - Pydantic Schemas
Collection save and trading request/response schemas
"""
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts both camelCase (web client) and snake_case field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =========================
# Collection Schemas
# =========================

class SaveResponse(BaseModel):
    """Response for a whole-collection save."""
    success: bool = True
    message: str
    saved: int = 0
    skipped: int = 0


# =========================
# Trading Schemas
# =========================

class SellRequest(CamelModel):
    """Sell part or all of a position."""
    quantity: int = Field(..., gt=0)
    sell_price: Decimal = Field(..., ge=0)
    sell_date: Optional[date] = None
    notes: Optional[str] = Field(None, max_length=1000)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "quantity": 5,
                "sellPrice": 3850.5,
                "sellDate": "2024-03-15",
                "notes": "Booked partial profit"
            }
        }
    )


class SellResponse(BaseModel):
    """Closed trade plus what is left of the position."""
    closed_position: Dict[str, Any]
    remaining_position: Optional[Dict[str, Any]] = None
    fully_closed: bool


class BuyFromWatchlistRequest(CamelModel):
    """Buy a watched symbol; price defaults to the entry's current price."""
    quantity: int = Field(..., gt=0)
    buy_price: Optional[Decimal] = Field(None, ge=0)
    purchase_date: Optional[date] = None
    target_price: Optional[Decimal] = Field(None, ge=0)
    stop_loss: Optional[Decimal] = Field(None, ge=0)
