from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Optional, Sequence

from ..common.datetime_utils import as_utc
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Salary
from .repository import SalaryRepository

_COLUMNS = "salary_id, employee_id, amount, effective_date, notes, created_by, created_at"


def _to_salary(r: dict[str, Any]) -> Salary:
    return Salary(
        salary_id=int(r["salary_id"]),
        employee_id=int(r["employee_id"]),
        amount=Decimal(str(r["amount"])),
        effective_date=r["effective_date"],
        notes=r.get("notes"),
        created_by=r.get("created_by"),
        created_at=as_utc(r["created_at"]) if r.get("created_at") else None,
    )


class MySQLSalaryRepository(SalaryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, salary_id: int) -> Optional[Salary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM salaries WHERE salary_id=%s", (int(salary_id),))
            r = fetchone(cur)
            return _to_salary(r) if r else None

    def list_for_employee(self, employee_id: int) -> Sequence[Salary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM salaries
                WHERE employee_id=%s
                ORDER BY effective_date DESC, salary_id DESC
                """,
                (int(employee_id),),
            )
            return [_to_salary(r) for r in fetchall(cur)]

    def list_all(self) -> Sequence[Salary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM salaries ORDER BY employee_id, effective_date DESC, salary_id DESC")
            return [_to_salary(r) for r in fetchall(cur)]

    def get_current(self, employee_id: int, *, as_of: date) -> Optional[Salary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM salaries
                WHERE employee_id=%s AND effective_date <= %s
                ORDER BY effective_date DESC, salary_id DESC
                LIMIT 1
                """,
                (int(employee_id), as_of),
            )
            r = fetchone(cur)
            return _to_salary(r) if r else None

    def create(
        self,
        *,
        employee_id: int,
        amount: Decimal,
        effective_date: date,
        notes: Optional[str],
        created_by: int,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO salaries(employee_id, amount, effective_date, notes, created_by, created_at)
                VALUES(%s,%s,%s,%s,%s,UTC_TIMESTAMP())
                """,
                (int(employee_id), amount, effective_date, notes, int(created_by)),
            )
            return int(cur.lastrowid)

    def update(self, salary: Salary) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE salaries SET amount=%s, effective_date=%s, notes=%s WHERE salary_id=%s",
                (salary.amount, salary.effective_date, salary.notes, int(salary.salary_id)),
            )
            return cur.rowcount > 0

    def delete_by_id(self, salary_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM salaries WHERE salary_id=%s", (int(salary_id),))
            return cur.rowcount > 0
