from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional, Sequence

from ..common.datetime_utils import local_range_bounds
from ..common.formatting import round_half_up
from ..core.exceptions import InvalidInputError, NotFoundError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..time_records.model import TimeRecord
from ..time_records.repository import TimeRecordRepository
from ..timesheet.aggregator import build_range_report
from .calculator.base import PayrollCalculator
from .calculator.hourly_calculator import HourlyPayrollCalculator
from .model import PayrollCalculation

logger = logging.getLogger(__name__)


def parse_hourly_rate(value) -> Decimal:
    """Accept ``25.50``, ``"25.50"`` or ``"25,50"``; must be > 0."""
    if isinstance(value, bool) or value is None:
        raise InvalidInputError("Valor por hora é obrigatório")
    try:
        rate = Decimal(str(value).strip().replace(",", "."))
    except InvalidOperation:
        raise InvalidInputError(f"Valor por hora inválido: {value!r}")
    if not rate.is_finite() or rate <= 0:
        raise InvalidInputError("O valor por hora deve ser maior que zero")
    return rate


def validate_period(start: date, end: date) -> None:
    if start is None or end is None:
        raise InvalidInputError("Período inicial e final são obrigatórios")
    if start > end:
        raise InvalidInputError("A data inicial deve ser anterior ou igual à data final")


class PayrollService:
    """Hours worked x hourly rate, per employee or for everyone at once."""

    def __init__(
        self,
        time_records: TimeRecordRepository,
        employees: EmployeeRepository,
        *,
        calculator: Optional[PayrollCalculator] = None,
        tz_name: Optional[str] = None,
    ):
        self._time_records = time_records
        self._employees = employees
        self._calculator = calculator or HourlyPayrollCalculator()
        self._tz_name = tz_name

    def _tz_for(self, employee: Employee) -> Optional[str]:
        return employee.timezone or self._tz_name

    def _fetch(self, employee: Employee, start: date, end: date) -> Sequence[TimeRecord]:
        lower, upper = local_range_bounds(start, end, self._tz_for(employee))
        return self._time_records.list_for_employee(employee.employee_id, start=lower, end=upper)

    def compute(
        self,
        employee: Employee,
        records: Sequence[TimeRecord],
        *,
        hourly_rate: Decimal,
        start: date,
        end: date,
    ) -> PayrollCalculation:
        """Pure part: records already fetched, parameters already validated."""
        report = build_range_report(
            employee_id=employee.employee_id,
            records=records,
            start=start,
            end=end,
            tz_name=self._tz_for(employee),
        )
        total_hours = round_half_up(report.total_hours)
        return PayrollCalculation(
            employee_id=employee.employee_id,
            employee_name=employee.full_name,
            start_date=start,
            end_date=end,
            total_hours=total_hours,
            hourly_rate=hourly_rate,
            total_payment=self._calculator.payment(total_hours=total_hours, hourly_rate=hourly_rate),
            source_records=tuple(records),
            tz_name=self._tz_for(employee),
        )

    def calculate(self, employee_id: int, hourly_rate, start: date, end: date) -> PayrollCalculation:
        rate = parse_hourly_rate(hourly_rate)
        validate_period(start, end)

        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError("Funcionário não encontrado")

        records = self._fetch(employee, start, end)
        return self.compute(employee, records, hourly_rate=rate, start=start, end=end)

    def calculate_all(self, hourly_rate, start: date, end: date) -> list[PayrollCalculation]:
        """Batch over active employees; one employee's failure never aborts the batch."""
        rate = parse_hourly_rate(hourly_rate)
        validate_period(start, end)

        results: list[PayrollCalculation] = []
        for employee in self._employees.list_active():
            try:
                records = self._fetch(employee, start, end)
            except Exception:
                logger.exception("Failed to fetch time records for employee %s", employee.employee_id)
                results.append(
                    PayrollCalculation(
                        employee_id=employee.employee_id,
                        employee_name=employee.full_name,
                        start_date=start,
                        end_date=end,
                        total_hours=round_half_up(0),
                        hourly_rate=rate,
                        total_payment=round_half_up(0),
                        error="Falha ao buscar registros de ponto",
                        tz_name=self._tz_for(employee),
                    )
                )
                continue
            results.append(self.compute(employee, records, hourly_rate=rate, start=start, end=end))

        logger.info("Payroll batch %s..%s computed for %d employees", start, end, len(results))
        return results
