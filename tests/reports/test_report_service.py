from datetime import date

import pytest

from tests.fakes import InMemoryEmployees, InMemoryTimeRecords, make_employee, make_record, utc, workday

from src.ponto_eletronico.ponto_eletronico.core.enums import EmployeeStatus
from src.ponto_eletronico.ponto_eletronico.core.exceptions import InvalidInputError, NotFoundError
from src.ponto_eletronico.ponto_eletronico.reports.service import ReportService, day_rows, report_to_dict

SP = "America/Sao_Paulo"
JAN_6 = date(2025, 1, 6)
JAN_10 = date(2025, 1, 10)


@pytest.fixture
def service():
    employees = InMemoryEmployees(
        make_employee(1, full_name="Ana", department="TI"),
        make_employee(2, full_name="Bruno", department="TI"),
        make_employee(3, full_name="Carla", department="RH"),
        make_employee(4, full_name="Davi", department="RH", status=EmployeeStatus.INACTIVE),
    )
    records = InMemoryTimeRecords(
        *workday(1, 1, JAN_6),
        *workday(3, 1, date(2025, 1, 7), hours=4),
        make_record(5, 1, "in", utc(2025, 1, 8, 11), corrected=True, justification="Ajuste"),
        *workday(6, 3, JAN_6, hours=6),
        *workday(8, 4, JAN_6),
    )
    return ReportService(records, employees, tz_name=SP)


def test_employee_report_rows(service):
    data = service.employee_report(1, start=JAN_6, end=JAN_10)

    assert data.report.total_hours == 12.0
    assert data.report.days_worked == 2
    rows = day_rows(data.report, data.tz_name)
    assert rows[0] == {
        "Data": "06/01/2025",
        "Entrada": "08:00",
        "Saída": "16:00",
        "Total de Horas": "8.00h",
        "Observações": "",
    }
    assert rows[2]["Saída"] == "-"
    assert rows[2]["Observações"] == "Registro incompleto; Contém correções"


def test_report_to_dict(service):
    payload = report_to_dict(service.employee_report(1, start=JAN_6, end=JAN_10))

    assert payload["employee"]["full_name"] == "Ana"
    assert payload["total_hours"] == 12.0
    assert payload["average_daily_hours"] == 6.0
    assert payload["per_day"][2]["incomplete"] is True


def test_employee_report_errors(service):
    with pytest.raises(NotFoundError):
        service.employee_report(42, start=JAN_6, end=JAN_10)
    with pytest.raises(InvalidInputError):
        service.employee_report(1, start=JAN_10, end=JAN_6)


def test_general_report_covers_active_employees(service):
    data = service.general_report(start=JAN_6, end=JAN_10)

    assert [r.full_name for r in data.rows] == ["Ana", "Bruno", "Carla"]
    assert data.total_hours == 18.0
    assert data.average_hours_per_employee == 6.0
    assert data.rows[0].incomplete_days == 1


def test_department_statistics(service):
    stats = {s.department: s for s in service.department_statistics(start=JAN_6, end=JAN_10)}

    assert stats["TI"].employees == 2
    assert stats["TI"].total_hours == 12.0
    assert stats["TI"].average_hours_per_employee == 6.0
    assert stats["RH"].employees == 1
    assert stats["RH"].days_worked == 1


def test_json_hours_round_half_up_like_rows():
    # 11:00 -> 13:40:30 UTC is 2.675h
    records = InMemoryTimeRecords(
        make_record(1, 1, "in", utc(2025, 1, 6, 11)),
        make_record(2, 1, "out", utc(2025, 1, 6, 13, 40, 30)),
    )
    reports = ReportService(records, InMemoryEmployees(make_employee(1)), tz_name=SP)

    payload = report_to_dict(reports.employee_report(1, start=JAN_6, end=JAN_6))

    assert payload["total_hours"] == 2.68
    assert payload["per_day"][0]["total_hours"] == 2.68
    assert payload["rows"][0]["Total de Horas"] == "2.68h"
