from __future__ import annotations

from decimal import Decimal

from ...common.formatting import round_half_up
from .base import PayrollCalculator


class HourlyPayrollCalculator(PayrollCalculator):
    """Standard rule: hours * rate, rounded half-up to cents."""

    def payment(self, *, total_hours: Decimal, hourly_rate: Decimal) -> Decimal:
        return round_half_up(total_hours * hourly_rate)
