from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from ..time_records.model import TimeRecord


@dataclass(frozen=True)
class PayrollCalculation:
    employee_id: int
    employee_name: str
    start_date: date
    end_date: date
    total_hours: Decimal
    hourly_rate: Decimal
    total_payment: Decimal
    source_records: tuple[TimeRecord, ...] = ()
    error: Optional[str] = None
    tz_name: Optional[str] = None
