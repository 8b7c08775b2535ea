from __future__ import annotations

from datetime import date
from typing import Iterable, Sequence

from ..common.datetime_utils import as_utc
from ..core.enums import RecordType
from ..time_records.model import TimeRecord
from .grouping import group_by_local_date
from .model import DaySummary, RangeReport
from .pairing import pair_intervals


def summarize_day(work_date: date, records: Sequence[TimeRecord]) -> DaySummary:
    pairing = pair_intervals(records)

    incomplete = pairing.incomplete
    total_seconds = 0.0
    valid = 0
    for interval in pairing.intervals:
        seconds = interval.duration.total_seconds()
        if seconds <= 0:
            incomplete = True
            continue
        total_seconds += seconds
        valid += 1

    entries = [as_utc(r.timestamp) for r in records if r.type == RecordType.IN]
    exits = [as_utc(r.timestamp) for r in records if r.type == RecordType.OUT]

    return DaySummary(
        date=work_date,
        entry=min(entries) if entries else None,
        exit=max(exits) if exits else None,
        total_hours=total_seconds / 3600,
        incomplete=incomplete,
        corrected=any(r.corrected for r in records),
        worked_intervals=valid,
        records=tuple(sorted(records, key=lambda r: as_utc(r.timestamp))),
    )


def build_range_report(
    *,
    employee_id: int,
    records: Iterable[TimeRecord],
    start: date,
    end: date,
    tz_name: str | None = None,
) -> RangeReport:
    """Aggregate raw events into per-day summaries and range totals.

    Days outside [start, end] (in local time) are ignored.
    """
    groups = group_by_local_date(records, tz_name)

    per_day = [
        summarize_day(work_date, day_records)
        for work_date, day_records in sorted(groups.items())
        if start <= work_date <= end
    ]

    total_hours = sum(d.total_hours for d in per_day)
    days_worked = sum(1 for d in per_day if d.worked)
    average = total_hours / days_worked if days_worked else 0.0

    return RangeReport(
        employee_id=employee_id,
        start_date=start,
        end_date=end,
        total_hours=total_hours,
        days_worked=days_worked,
        average_daily_hours=average,
        per_day=per_day,
    )
