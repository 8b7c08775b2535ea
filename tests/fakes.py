"""In-memory repositories and builders shared by the test modules."""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timezone
from typing import Optional

from werkzeug.security import generate_password_hash

from src.ponto_eletronico.ponto_eletronico.common.datetime_utils import as_utc
from src.ponto_eletronico.ponto_eletronico.core.enums import AccessLevel, AuditAction, EmployeeStatus, RecordType
from src.ponto_eletronico.ponto_eletronico.employees.model import Employee
from src.ponto_eletronico.ponto_eletronico.salaries.model import Salary
from src.ponto_eletronico.ponto_eletronico.time_records.model import AuditLogEntry, TimeRecord, TimeRecordFilter
from src.ponto_eletronico.ponto_eletronico.transactions.model import FinancialTransaction, TransactionFilter


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def make_employee(employee_id: int = 1, **overrides) -> Employee:
    fields = dict(
        employee_id=employee_id,
        full_name=f"Funcionário {employee_id}",
        cpf="52998224725" if employee_id == 1 else f"{employee_id:011d}",
        email=f"func{employee_id}@empresa.com.br",
        username=f"func{employee_id}",
        password_hash=generate_password_hash("secret1"),
        role="Analista",
        department="TI",
        admission_date=date(2024, 1, 2),
        birth_date=date(1990, 5, 17),
        status=EmployeeStatus.ACTIVE,
        access_level=AccessLevel.EMPLOYEE,
        first_login=False,
    )
    fields.update(overrides)
    return Employee(**fields)


def make_record(record_id: int, employee_id: int, record_type: str, timestamp: datetime, **overrides) -> TimeRecord:
    return TimeRecord(
        record_id=record_id,
        employee_id=employee_id,
        type=RecordType(record_type),
        timestamp=timestamp,
        **overrides,
    )


class InMemoryEmployees:
    def __init__(self, *employees: Employee):
        self.by_id: dict[int, Employee] = {e.employee_id: e for e in employees}

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self.by_id.get(employee_id)

    def get_by_username(self, username: str) -> Optional[Employee]:
        return next((e for e in self.by_id.values() if e.username == username), None)

    def get_by_cpf(self, cpf: str) -> Optional[Employee]:
        return next((e for e in self.by_id.values() if e.cpf == cpf), None)

    def list_all(self):
        return sorted(self.by_id.values(), key=lambda e: e.full_name)

    def list_active(self):
        return [e for e in self.list_all() if e.is_active]

    def create(self, employee: Employee) -> int:
        new_id = max(self.by_id, default=0) + 1
        self.by_id[new_id] = replace(employee, employee_id=new_id)
        return new_id

    def update(self, employee: Employee) -> bool:
        if employee.employee_id not in self.by_id:
            return False
        self.by_id[employee.employee_id] = employee
        return True

    def update_password(self, employee_id: int, *, password_hash: str, first_login: bool) -> bool:
        current = self.by_id.get(employee_id)
        if current is None:
            return False
        self.by_id[employee_id] = replace(current, password_hash=password_hash, first_login=first_login)
        return True

    def delete_by_id(self, employee_id: int) -> bool:
        return self.by_id.pop(employee_id, None) is not None


class InMemoryTimeRecords:
    def __init__(self, *records: TimeRecord):
        self.by_id: dict[int, TimeRecord] = {r.record_id: r for r in records}

    def _sorted(self):
        return sorted(self.by_id.values(), key=lambda r: as_utc(r.timestamp))

    def get_by_id(self, record_id: int) -> Optional[TimeRecord]:
        return self.by_id.get(record_id)

    def list_for_employee(self, employee_id: int, *, start: datetime, end: datetime):
        return [r for r in self._sorted() if r.employee_id == employee_id and start <= as_utc(r.timestamp) < end]

    def list_filtered(self, flt: TimeRecordFilter):
        out = []
        for r in self._sorted():
            if flt.employee_id is not None and r.employee_id != flt.employee_id:
                continue
            if flt.type is not None and r.type != flt.type:
                continue
            if flt.start is not None and as_utc(r.timestamp) < flt.start:
                continue
            if flt.end is not None and as_utc(r.timestamp) >= flt.end:
                continue
            out.append(r)
        return list(reversed(out))

    def get_last_for_employee(self, employee_id: int) -> Optional[TimeRecord]:
        mine = [r for r in self._sorted() if r.employee_id == employee_id]
        return mine[-1] if mine else None

    def create(
        self,
        *,
        employee_id,
        record_type,
        timestamp,
        latitude,
        longitude,
        photo_ref,
        ip_address,
        justification=None,
        corrected=False,
        created_by=None,
    ) -> int:
        new_id = max(self.by_id, default=0) + 1
        self.by_id[new_id] = TimeRecord(
            record_id=new_id,
            employee_id=employee_id,
            type=record_type,
            timestamp=timestamp,
            latitude=latitude,
            longitude=longitude,
            photo_ref=photo_ref,
            ip_address=ip_address,
            justification=justification,
            corrected=corrected,
            created_by=created_by,
        )
        return new_id

    def admin_update(self, *, record_id, record_type, timestamp, justification) -> bool:
        current = self.by_id.get(record_id)
        if current is None:
            return False
        self.by_id[record_id] = replace(
            current, type=record_type, timestamp=timestamp, justification=justification, corrected=True
        )
        return True

    def delete_by_id(self, record_id: int) -> bool:
        return self.by_id.pop(record_id, None) is not None


class InMemoryAudit:
    def __init__(self):
        self.entries: list[AuditLogEntry] = []

    def add(self, *, entity_type: str, entity_id: int, action: AuditAction, changed_by: int, changes: dict) -> int:
        entry = AuditLogEntry(
            audit_id=len(self.entries) + 1,
            entity_type=entity_type,
            entity_id=entity_id,
            action=action,
            changed_by=changed_by,
            changes=changes,
            created_at=utc(2025, 1, 1),
        )
        self.entries.append(entry)
        return entry.audit_id

    def list_for_entity(self, *, entity_type: str, entity_id: int):
        return [e for e in self.entries if e.entity_type == entity_type and e.entity_id == entity_id]


def workday(record_id: int, employee_id: int, day: date, *, start_hour: int = 11, hours: int = 8):
    """One in/out pair in UTC; 11:00 UTC is 08:00 in São Paulo."""
    clock_in = utc(day.year, day.month, day.day, start_hour)
    clock_out = utc(day.year, day.month, day.day, start_hour + hours)
    return [
        make_record(record_id, employee_id, "in", clock_in),
        make_record(record_id + 1, employee_id, "out", clock_out),
    ]


class InMemorySalaries:
    def __init__(self, *salaries: Salary):
        self.by_id: dict[int, Salary] = {s.salary_id: s for s in salaries}

    def get_by_id(self, salary_id: int) -> Optional[Salary]:
        return self.by_id.get(salary_id)

    def list_for_employee(self, employee_id: int):
        mine = [s for s in self.by_id.values() if s.employee_id == employee_id]
        return sorted(mine, key=lambda s: (s.effective_date, s.salary_id), reverse=True)

    def list_all(self):
        return sorted(self.by_id.values(), key=lambda s: (s.effective_date, s.salary_id), reverse=True)

    def get_current(self, employee_id: int, *, as_of: date) -> Optional[Salary]:
        return next((s for s in self.list_for_employee(employee_id) if s.effective_date <= as_of), None)

    def create(self, *, employee_id, amount, effective_date, notes, created_by) -> int:
        new_id = max(self.by_id, default=0) + 1
        self.by_id[new_id] = Salary(
            salary_id=new_id,
            employee_id=employee_id,
            amount=amount,
            effective_date=effective_date,
            notes=notes,
            created_by=created_by,
            created_at=utc(2025, 1, 1),
        )
        return new_id

    def update(self, salary: Salary) -> bool:
        if salary.salary_id not in self.by_id:
            return False
        self.by_id[salary.salary_id] = salary
        return True

    def delete_by_id(self, salary_id: int) -> bool:
        return self.by_id.pop(salary_id, None) is not None


class InMemoryTransactions:
    def __init__(self, *transactions: FinancialTransaction):
        self.by_id: dict[int, FinancialTransaction] = {t.transaction_id: t for t in transactions}

    def get_by_id(self, transaction_id: int) -> Optional[FinancialTransaction]:
        return self.by_id.get(transaction_id)

    def list_filtered(self, flt: TransactionFilter):
        out = []
        for t in self.by_id.values():
            if flt.employee_id is not None and t.employee_id != flt.employee_id:
                continue
            if flt.type is not None and t.type != flt.type:
                continue
            if flt.start_date is not None and t.transaction_date < flt.start_date:
                continue
            if flt.end_date is not None and t.transaction_date > flt.end_date:
                continue
            out.append(t)
        return sorted(out, key=lambda t: (t.transaction_date, t.transaction_id), reverse=True)

    def create(
        self,
        *,
        employee_id,
        transaction_type,
        amount,
        description,
        transaction_date,
        reference,
        notes,
        created_by,
    ) -> int:
        new_id = max(self.by_id, default=0) + 1
        self.by_id[new_id] = FinancialTransaction(
            transaction_id=new_id,
            employee_id=employee_id,
            type=transaction_type,
            amount=amount,
            description=description,
            transaction_date=transaction_date,
            reference=reference,
            notes=notes,
            created_by=created_by,
            created_at=utc(2025, 1, 1),
        )
        return new_id

    def update(self, transaction: FinancialTransaction) -> bool:
        if transaction.transaction_id not in self.by_id:
            return False
        self.by_id[transaction.transaction_id] = transaction
        return True

    def delete_by_id(self, transaction_id: int) -> bool:
        return self.by_id.pop(transaction_id, None) is not None
