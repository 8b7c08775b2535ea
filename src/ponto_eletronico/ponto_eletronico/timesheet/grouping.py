from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Iterable

from ..common.datetime_utils import local_date
from ..time_records.model import TimeRecord


def group_by_local_date(records: Iterable[TimeRecord], tz_name: str | None = None) -> dict[date, list[TimeRecord]]:
    """Bucket records by the employee-local calendar date of their timestamp.

    A clock-out at 22:30 in São Paulo is 01:30 UTC the next day; it still
    belongs to the local day it happened on.
    """
    groups: dict[date, list[TimeRecord]] = defaultdict(list)
    for record in records:
        groups[local_date(record.timestamp, tz_name)].append(record)
    return dict(groups)
