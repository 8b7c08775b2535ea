"""pt-BR presentation helpers shared by reports, exports and the API."""

from __future__ import annotations

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from .datetime_utils import to_local

CENTS = Decimal("0.01")

Number = Union[int, float, Decimal]


def round_half_up(value: Number, places: Decimal = CENTS) -> Decimal:
    # str() first so 0.125 rounds like the decimal the user sees
    return Decimal(str(value)).quantize(places, rounding=ROUND_HALF_UP)


def format_date(value: date) -> str:
    return value.strftime("%d/%m/%Y")


def format_time(value: Optional[datetime], tz_name: str | None = None) -> str:
    if value is None:
        return "-"
    return to_local(value, tz_name).strftime("%H:%M")


def format_hours(value: Number) -> str:
    return f"{round_half_up(value)}h"


def format_brl(value: Number) -> str:
    """``1234.5`` -> ``R$ 1.234,50``."""
    amount = round_half_up(value)
    text = f"{amount:,.2f}"
    text = text.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"R$ {text}"


def json_amount(value: Number) -> float:
    """Half-up to cents, as a JSON number."""
    return float(round_half_up(value))
