from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Optional

from ..common.datetime_utils import as_utc
from ..time_records.model import TimeRecord


@dataclass(frozen=True)
class WorkedInterval:
    clock_in: TimeRecord
    clock_out: TimeRecord

    @property
    def duration(self) -> timedelta:
        return as_utc(self.clock_out.timestamp) - as_utc(self.clock_in.timestamp)

    @property
    def hours(self) -> float:
        return self.duration.total_seconds() / 3600


@dataclass(frozen=True)
class DaySummary:
    """Resumo derivado de um dia (não persistido)."""

    date: date
    entry: Optional[datetime]
    exit: Optional[datetime]
    total_hours: float
    incomplete: bool
    corrected: bool
    worked_intervals: int = 0
    records: tuple[TimeRecord, ...] = ()

    @property
    def worked(self) -> bool:
        return self.worked_intervals > 0


@dataclass(frozen=True)
class RangeReport:
    employee_id: int
    start_date: date
    end_date: date
    total_hours: float
    days_worked: int
    average_daily_hours: float
    per_day: list[DaySummary] = field(default_factory=list)

    @property
    def incomplete_days(self) -> int:
        return sum(1 for d in self.per_day if d.incomplete)
