from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence

from ..common.datetime_utils import local_range_bounds
from ..common.formatting import format_date, format_hours, format_time, json_amount
from ..core.exceptions import InvalidInputError, NotFoundError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..time_records.repository import TimeRecordRepository
from ..timesheet.aggregator import build_range_report
from ..timesheet.model import DaySummary, RangeReport

logger = logging.getLogger(__name__)

DAY_COLUMNS = ["Data", "Entrada", "Saída", "Total de Horas", "Observações"]
INCOMPLETE_NOTE = "Registro incompleto"
CORRECTED_NOTE = "Contém correções"


@dataclass(frozen=True)
class EmployeeReport:
    employee: Employee
    report: RangeReport
    tz_name: Optional[str] = None


@dataclass(frozen=True)
class EmployeeTotals:
    employee_id: int
    full_name: str
    role: str
    department: str
    total_hours: float
    days_worked: int
    average_daily_hours: float
    incomplete_days: int


@dataclass(frozen=True)
class GeneralReport:
    start_date: date
    end_date: date
    rows: list[EmployeeTotals]
    total_hours: float
    average_hours_per_employee: float


@dataclass(frozen=True)
class DepartmentStats:
    department: str
    employees: int
    total_hours: float
    days_worked: int
    average_hours_per_employee: float


def observations(day: DaySummary) -> str:
    notes = []
    if day.incomplete:
        notes.append(INCOMPLETE_NOTE)
    if day.corrected:
        notes.append(CORRECTED_NOTE)
    return "; ".join(notes)


def day_rows(report: RangeReport, tz_name: Optional[str] = None) -> list[dict]:
    """Per-day table rows keyed by the report column headers."""
    return [
        {
            "Data": format_date(d.date),
            "Entrada": format_time(d.entry, tz_name),
            "Saída": format_time(d.exit, tz_name),
            "Total de Horas": format_hours(d.total_hours),
            "Observações": observations(d),
        }
        for d in report.per_day
    ]


def report_to_dict(data: EmployeeReport) -> dict:
    report = data.report
    return {
        "employee": {
            "id": data.employee.employee_id,
            "full_name": data.employee.full_name,
            "role": data.employee.role,
            "department": data.employee.department,
        },
        "period": {"start": report.start_date.isoformat(), "end": report.end_date.isoformat()},
        "total_hours": json_amount(report.total_hours),
        "days_worked": report.days_worked,
        "average_daily_hours": json_amount(report.average_daily_hours),
        "per_day": [
            {
                "date": d.date.isoformat(),
                "entry": d.entry.isoformat() if d.entry else None,
                "exit": d.exit.isoformat() if d.exit else None,
                "total_hours": json_amount(d.total_hours),
                "incomplete": d.incomplete,
                "corrected": d.corrected,
            }
            for d in report.per_day
        ],
        "rows": day_rows(report, data.tz_name),
    }


class ReportService:
    def __init__(
        self,
        time_records: TimeRecordRepository,
        employees: EmployeeRepository,
        *,
        tz_name: Optional[str] = None,
    ):
        self._time_records = time_records
        self._employees = employees
        self._tz_name = tz_name

    def _range_report(self, employee: Employee, start: date, end: date) -> RangeReport:
        tz_name = employee.timezone or self._tz_name
        lower, upper = local_range_bounds(start, end, tz_name)
        records = self._time_records.list_for_employee(employee.employee_id, start=lower, end=upper)
        return build_range_report(
            employee_id=employee.employee_id,
            records=records,
            start=start,
            end=end,
            tz_name=tz_name,
        )

    @staticmethod
    def _check_period(start: date, end: date) -> None:
        if start > end:
            raise InvalidInputError("A data inicial deve ser anterior ou igual à data final")

    def employee_report(self, employee_id: int, *, start: date, end: date) -> EmployeeReport:
        self._check_period(start, end)
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError("Funcionário não encontrado")
        return EmployeeReport(
            employee=employee,
            report=self._range_report(employee, start, end),
            tz_name=employee.timezone or self._tz_name,
        )

    def _totals(self, employees: Sequence[Employee], start: date, end: date) -> list[EmployeeTotals]:
        rows = []
        for e in employees:
            report = self._range_report(e, start, end)
            rows.append(
                EmployeeTotals(
                    employee_id=e.employee_id,
                    full_name=e.full_name,
                    role=e.role,
                    department=e.department,
                    total_hours=report.total_hours,
                    days_worked=report.days_worked,
                    average_daily_hours=report.average_daily_hours,
                    incomplete_days=report.incomplete_days,
                )
            )
        return rows

    def general_report(self, *, start: date, end: date) -> GeneralReport:
        self._check_period(start, end)
        rows = self._totals(self._employees.list_active(), start, end)
        total = sum(r.total_hours for r in rows)
        return GeneralReport(
            start_date=start,
            end_date=end,
            rows=rows,
            total_hours=total,
            average_hours_per_employee=total / len(rows) if rows else 0.0,
        )

    def department_statistics(self, *, start: date, end: date) -> list[DepartmentStats]:
        self._check_period(start, end)
        by_department: dict[str, list[EmployeeTotals]] = defaultdict(list)
        for row in self._totals(self._employees.list_active(), start, end):
            by_department[row.department].append(row)

        stats = []
        for department, rows in sorted(by_department.items()):
            total = sum(r.total_hours for r in rows)
            stats.append(
                DepartmentStats(
                    department=department,
                    employees=len(rows),
                    total_hours=total,
                    days_worked=sum(r.days_worked for r in rows),
                    average_hours_per_employee=total / len(rows),
                )
            )
        return stats
