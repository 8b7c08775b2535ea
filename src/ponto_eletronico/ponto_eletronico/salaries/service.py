from __future__ import annotations

import csv
import io
import logging
from dataclasses import replace
from datetime import date
from typing import Optional, Sequence

from ..common.datetime_utils import parse_local_day, today_local
from ..common.formatting import format_brl, format_date, json_amount
from ..common.validators import require_amount
from ..core.enums import AuditAction
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..time_records.repository import AuditLogRepository
from .model import Salary
from .repository import SalaryRepository

logger = logging.getLogger(__name__)

AUDIT_ENTITY = "salary"

CSV_HEADER = ["ID", "Funcionário", "Data de Vigência", "Valor", "Observações", "Data de Registro", "Criado Por"]


def salary_to_dict(salary: Salary) -> dict:
    return {
        "id": salary.salary_id,
        "employee_id": salary.employee_id,
        "amount": json_amount(salary.amount),
        "effective_date": salary.effective_date.isoformat(),
        "notes": salary.notes,
        "created_by": salary.created_by,
        "created_at": salary.created_at.isoformat() if salary.created_at else None,
        "display": {
            "amount": format_brl(salary.amount),
            "effective_date": format_date(salary.effective_date),
        },
    }


def _clean_notes(value) -> Optional[str]:
    text = str(value).strip() if value is not None else ""
    return text or None


class SalaryService:
    """Salary history per employee; every admin change is audited."""

    def __init__(
        self,
        salaries: SalaryRepository,
        employees: EmployeeRepository,
        audit: AuditLogRepository,
        *,
        tz_name: Optional[str] = None,
    ):
        self._salaries = salaries
        self._employees = employees
        self._audit = audit
        self._tz_name = tz_name

    def _get_employee(self, employee_id: Optional[int]) -> Employee:
        if employee_id is None:
            raise ValidationError("Funcionário é obrigatório")
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError("Funcionário não encontrado")
        return employee

    def _get_salary(self, salary_id: int) -> Salary:
        salary = self._salaries.get_by_id(salary_id)
        if not salary:
            raise NotFoundError("Registro de salário não encontrado")
        return salary

    def _effective_date(self, value, employee: Employee) -> date:
        if value in (None, ""):
            raise ValidationError("Data de vigência é obrigatória")
        return parse_local_day(value, tz_name=employee.timezone or self._tz_name)

    def create(
        self,
        *,
        admin_id: int,
        employee_id: Optional[int],
        amount,
        effective_date,
        notes: Optional[str] = None,
    ) -> Salary:
        employee = self._get_employee(employee_id)
        salary_id = self._salaries.create(
            employee_id=employee.employee_id,
            amount=require_amount(amount, "Valor do salário"),
            effective_date=self._effective_date(effective_date, employee),
            notes=_clean_notes(notes),
            created_by=admin_id,
        )
        salary = self._get_salary(salary_id)
        self._audit.add(
            entity_type=AUDIT_ENTITY,
            entity_id=salary_id,
            action=AuditAction.CREATE,
            changed_by=admin_id,
            changes={"after": salary_to_dict(salary)},
        )
        logger.info("Admin %s registered salary %s for employee %s", admin_id, salary_id, employee.employee_id)
        return salary

    def current(self, employee_id: int, *, as_of: Optional[date] = None) -> Salary:
        employee = self._get_employee(employee_id)
        as_of = as_of or today_local(employee.timezone or self._tz_name)
        salary = self._salaries.get_current(employee_id, as_of=as_of)
        if not salary:
            raise NotFoundError("Não existe registro de salário para este funcionário")
        return salary

    def history(self, employee_id: int) -> Sequence[Salary]:
        self._get_employee(employee_id)
        return self._salaries.list_for_employee(employee_id)

    def update(
        self,
        *,
        admin_id: int,
        salary_id: int,
        amount=None,
        effective_date=None,
        notes=None,
    ) -> Salary:
        before = self._get_salary(salary_id)
        employee = self._get_employee(before.employee_id)

        after = replace(
            before,
            amount=require_amount(amount, "Valor do salário") if amount is not None else before.amount,
            effective_date=(
                self._effective_date(effective_date, employee) if effective_date is not None else before.effective_date
            ),
            notes=_clean_notes(notes) if notes is not None else before.notes,
        )
        self._salaries.update(after)
        self._audit.add(
            entity_type=AUDIT_ENTITY,
            entity_id=salary_id,
            action=AuditAction.UPDATE,
            changed_by=admin_id,
            changes={"before": salary_to_dict(before), "after": salary_to_dict(after)},
        )
        logger.info("Admin %s updated salary %s", admin_id, salary_id)
        return after

    def delete(self, *, admin_id: int, salary_id: int) -> None:
        before = self._get_salary(salary_id)
        if not self._salaries.delete_by_id(salary_id):
            raise ValidationError("Falha ao excluir registro de salário")
        self._audit.add(
            entity_type=AUDIT_ENTITY,
            entity_id=salary_id,
            action=AuditAction.DELETE,
            changed_by=admin_id,
            changes={"before": salary_to_dict(before)},
        )
        logger.info("Admin %s deleted salary %s", admin_id, salary_id)

    def export_csv(self, employee_id: Optional[int] = None) -> str:
        if employee_id is None:
            salaries = self._salaries.list_all()
        else:
            salaries = self.history(employee_id)
        names = {e.employee_id: e.full_name for e in self._employees.list_all()}

        out = io.StringIO()
        writer = csv.writer(out)
        writer.writerow(CSV_HEADER)
        for s in salaries:
            writer.writerow(
                [
                    s.salary_id,
                    names.get(s.employee_id, f"ID: {s.employee_id}"),
                    format_date(s.effective_date),
                    f"{s.amount:.2f}",
                    s.notes or "",
                    s.created_at.strftime("%d/%m/%Y") if s.created_at else "",
                    names.get(s.created_by, f"ID: {s.created_by}") if s.created_by is not None else "",
                ]
            )
        logger.info("Exported %d salary records to CSV", len(salaries))
        return out.getvalue()
