"""
Value coercion and rounding for loosely-shaped records.

Every coercion returns None for values it cannot interpret, so a bad field
behaves exactly like a missing one and falls through to the next alias or to
its computed default.
"""
import math
import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Context, Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, ClassVar, Optional, Union


MONEY = Decimal("0.01")
PRICE = Decimal("0.0001")
PERCENT = Decimal("0.01")

ZERO = Decimal("0")
HUNDRED = Decimal("100")

# No Numeric(15, x) column holds a magnitude at or above this
MAX_MAGNITUDE = Decimal("1e15")

# Wide enough for products and ratios of bounded inputs
_ROUNDING_CONTEXT = Context(prec=60)


# =========================
# Coercion
# =========================

def to_decimal(value: Any) -> Optional[Decimal]:
    """Interpret numbers and numeric strings as Decimal; out-of-range magnitudes are absent."""
    result = _to_decimal(value)
    if result is None or abs(result) >= MAX_MAGNITUDE:
        return None
    return result


def _to_decimal(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return None
        # str() keeps the shortest repr, so 0.1 stays 0.1
        return Decimal(str(value))
    if isinstance(value, str):
        text = value.strip().replace(",", "")
        if not text:
            return None
        try:
            result = Decimal(text)
        except InvalidOperation:
            return None
        return result if result.is_finite() else None
    return None


def to_int(value: Any) -> Optional[int]:
    """Interpret a value as a whole number, truncating fractions."""
    result = to_decimal(value)
    if result is None:
        return None
    return int(result)


def to_date(value: Any) -> Optional[date]:
    """Accept date/datetime objects and ISO-8601 strings (time part ignored)."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    return None


def to_datetime(value: Any) -> Optional[datetime]:
    """Accept datetimes, dates and ISO-8601 strings; aware values become naive UTC."""
    if value is None:
        return None
    if isinstance(value, datetime):
        result = value
    elif isinstance(value, date):
        result = datetime.combine(value, datetime.min.time())
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            result = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if result.tzinfo is not None:
        result = result.astimezone(timezone.utc).replace(tzinfo=None)
    return result


def to_text(value: Any) -> Optional[str]:
    """Trimmed string; blank strings count as absent."""
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip()
    return text or None


# =========================
# Rounding
# =========================

def round_money(value: Decimal) -> Decimal:
    return value.quantize(MONEY, rounding=ROUND_HALF_UP, context=_ROUNDING_CONTEXT)


def round_price(value: Decimal) -> Decimal:
    return value.quantize(PRICE, rounding=ROUND_HALF_UP, context=_ROUNDING_CONTEXT)


def round_percent(value: Decimal) -> Decimal:
    return value.quantize(PERCENT, rounding=ROUND_HALF_UP, context=_ROUNDING_CONTEXT)


def percent_of(pl: Decimal, invested: Decimal) -> Decimal:
    """P&L as a percentage of the amount invested; 0 when nothing was invested."""
    if invested > 0:
        return round_percent(pl / invested * HUNDRED)
    return round_percent(ZERO)


# =========================
# Holding period
# =========================

_DAY_COUNT = re.compile(r"^\s*(-?\d+)(?:\s*days?)?\s*$", re.IGNORECASE)


@dataclass(frozen=True)
class HoldingPeriod:
    """Whole days a position was held, or unavailable."""

    days: Optional[int] = None

    UNAVAILABLE: ClassVar[str] = "N/A"

    @property
    def available(self) -> bool:
        return self.days is not None

    @classmethod
    def unavailable(cls) -> "HoldingPeriod":
        return cls(days=None)

    @classmethod
    def between(cls, buy_date: date, sell_date: date) -> "HoldingPeriod":
        return cls(days=(sell_date - buy_date).days)

    @classmethod
    def marks_unavailable(cls, value: Any) -> bool:
        """True for an explicit "N/A" (or an unavailable HoldingPeriod)."""
        if isinstance(value, HoldingPeriod):
            return not value.available
        return isinstance(value, str) and value.strip().upper() == cls.UNAVAILABLE

    @classmethod
    def parse(cls, value: Any) -> Optional["HoldingPeriod"]:
        """
        Read a stored or caller-supplied holding period.

        Integers, numeric strings and strings like "10 days" give a day count.
        Anything else (including "N/A") returns None.
        """
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, HoldingPeriod):
            return value if value.available else None
        if isinstance(value, (int, float, Decimal)):
            days = to_int(value)
            return cls(days=days) if days is not None else None
        if isinstance(value, str):
            match = _DAY_COUNT.match(value)
            if match:
                return cls(days=int(match.group(1)))
        return None

    def to_json(self) -> Union[int, str]:
        return self.days if self.available else self.UNAVAILABLE

    def __str__(self) -> str:
        return str(self.days) if self.available else self.UNAVAILABLE
