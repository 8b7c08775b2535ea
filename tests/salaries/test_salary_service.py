import csv
import io
from datetime import date
from decimal import Decimal

import pytest

from tests.fakes import InMemoryAudit, InMemoryEmployees, InMemorySalaries, make_employee

from src.ponto_eletronico.ponto_eletronico.core.enums import AuditAction
from src.ponto_eletronico.ponto_eletronico.core.exceptions import NotFoundError, ValidationError
from src.ponto_eletronico.ponto_eletronico.salaries.model import Salary
from src.ponto_eletronico.ponto_eletronico.salaries.service import CSV_HEADER, SalaryService

ADMIN = 9


def _salary(salary_id, amount, effective_date, employee_id=1):
    return Salary(salary_id=salary_id, employee_id=employee_id, amount=Decimal(amount), effective_date=effective_date)


def _service(*salaries):
    employees = InMemoryEmployees(make_employee(1, full_name="Ana"), make_employee(2, full_name="Bruno"))
    audit = InMemoryAudit()
    repo = InMemorySalaries(*salaries)
    return SalaryService(repo, employees, audit, tz_name="America/Sao_Paulo"), repo, audit


def test_create_is_audited():
    svc, repo, audit = _service()

    salary = svc.create(admin_id=ADMIN, employee_id=1, amount="3500,00", effective_date="2025-01-01", notes=" contratação ")

    assert salary.amount == Decimal("3500.00")
    assert salary.effective_date == date(2025, 1, 1)
    assert salary.notes == "contratação"
    assert salary.created_by == ADMIN
    entry = audit.entries[-1]
    assert (entry.entity_type, entry.entity_id, entry.action) == ("salary", salary.salary_id, AuditAction.CREATE)
    assert entry.changes["after"]["amount"] == 3500.0


def test_effective_date_from_browser_timestamp_uses_local_day():
    svc, _, _ = _service()

    # 03:00Z is midnight in São Paulo
    salary = svc.create(admin_id=ADMIN, employee_id=1, amount=3000, effective_date="2025-03-01T03:00:00.000Z")

    assert salary.effective_date == date(2025, 3, 1)


@pytest.mark.parametrize("amount", [None, "", "abc", 0, "-10", True])
def test_invalid_amount_is_rejected(amount):
    svc, repo, audit = _service()

    with pytest.raises(ValidationError):
        svc.create(admin_id=ADMIN, employee_id=1, amount=amount, effective_date="2025-01-01")
    assert repo.by_id == {}
    assert audit.entries == []


def test_missing_employee_or_date_is_rejected():
    svc, _, _ = _service()

    with pytest.raises(ValidationError):
        svc.create(admin_id=ADMIN, employee_id=None, amount=1000, effective_date="2025-01-01")
    with pytest.raises(NotFoundError):
        svc.create(admin_id=ADMIN, employee_id=77, amount=1000, effective_date="2025-01-01")
    with pytest.raises(ValidationError):
        svc.create(admin_id=ADMIN, employee_id=1, amount=1000, effective_date=None)


def test_current_is_latest_already_in_effect():
    svc, _, _ = _service(
        _salary(1, "3000", date(2024, 1, 1)),
        _salary(2, "3500", date(2025, 1, 1)),
        _salary(3, "4000", date(2025, 7, 1)),
        _salary(4, "9000", date(2025, 1, 1), employee_id=2),
    )

    assert svc.current(1, as_of=date(2025, 3, 15)).salary_id == 2
    assert svc.current(1, as_of=date(2025, 7, 1)).salary_id == 3
    assert svc.current(1, as_of=date(2024, 6, 1)).salary_id == 1


def test_current_without_salary_in_effect_is_not_found():
    svc, _, _ = _service(_salary(1, "3000", date(2030, 1, 1)))

    with pytest.raises(NotFoundError):
        svc.current(1, as_of=date(2025, 1, 1))
    with pytest.raises(NotFoundError):
        svc.current(2, as_of=date(2025, 1, 1))


def test_history_newest_first():
    svc, _, _ = _service(
        _salary(1, "3000", date(2024, 1, 1)),
        _salary(2, "3500", date(2025, 1, 1)),
        _salary(3, "9000", date(2025, 1, 1), employee_id=2),
    )

    assert [s.salary_id for s in svc.history(1)] == [2, 1]


def test_update_keeps_missing_fields_and_audits_before_after():
    svc, repo, audit = _service(_salary(1, "3000", date(2024, 1, 1)))

    after = svc.update(admin_id=ADMIN, salary_id=1, amount="3200.50")

    assert after.amount == Decimal("3200.50")
    assert after.effective_date == date(2024, 1, 1)
    assert repo.by_id[1] == after
    entry = audit.entries[-1]
    assert entry.action == AuditAction.UPDATE
    assert entry.changes["before"]["amount"] == 3000.0
    assert entry.changes["after"]["amount"] == 3200.5


def test_rejected_update_leaves_salary_alone():
    svc, repo, audit = _service(_salary(1, "3000", date(2024, 1, 1)))

    with pytest.raises(ValidationError):
        svc.update(admin_id=ADMIN, salary_id=1, amount="-1")

    assert repo.by_id[1].amount == Decimal("3000")
    assert audit.entries == []


def test_delete_is_audited():
    svc, repo, audit = _service(_salary(1, "3000", date(2024, 1, 1)))

    svc.delete(admin_id=ADMIN, salary_id=1)

    assert repo.by_id == {}
    assert audit.entries[-1].action == AuditAction.DELETE
    assert audit.entries[-1].changes["before"]["id"] == 1
    with pytest.raises(NotFoundError):
        svc.delete(admin_id=ADMIN, salary_id=1)


def test_export_csv():
    svc, _, _ = _service(
        Salary(salary_id=1, employee_id=1, amount=Decimal("3500"), effective_date=date(2025, 1, 1), notes="reajuste", created_by=ADMIN),
        _salary(2, "9000", date(2025, 1, 1), employee_id=2),
    )

    rows = list(csv.reader(io.StringIO(svc.export_csv(1))))

    assert rows[0] == CSV_HEADER
    assert rows[1] == ["1", "Ana", "01/01/2025", "3500.00", "reajuste", "", "ID: 9"]
    assert len(rows) == 2
    assert len(list(csv.reader(io.StringIO(svc.export_csv())))) == 3
