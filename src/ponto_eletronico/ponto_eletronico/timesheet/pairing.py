from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from ..common.datetime_utils import as_utc
from ..core.enums import RecordType
from ..time_records.model import TimeRecord
from .model import WorkedInterval


@dataclass(frozen=True)
class PairingResult:
    intervals: tuple[WorkedInterval, ...]
    incomplete: bool


def sort_records(records: Iterable[TimeRecord]) -> list[TimeRecord]:
    return sorted(records, key=lambda r: as_utc(r.timestamp))


def pair_intervals(records: Iterable[TimeRecord]) -> PairingResult:
    """Pair one day's events positionally: (0, 1), (2, 3), ...

    Only a literal in -> out pair yields an interval. A same-type pair or an
    unpaired trailing event flags the day as incomplete and contributes
    nothing.
    """
    ordered = sort_records(records)
    intervals: list[WorkedInterval] = []
    incomplete = len(ordered) % 2 == 1

    for i in range(0, len(ordered) - 1, 2):
        first, second = ordered[i], ordered[i + 1]
        if first.type == RecordType.IN and second.type == RecordType.OUT:
            intervals.append(WorkedInterval(clock_in=first, clock_out=second))
        else:
            incomplete = True

    return PairingResult(intervals=tuple(intervals), incomplete=incomplete)
