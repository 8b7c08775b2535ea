from __future__ import annotations

from typing import Any, Optional, Sequence

from ..core.enums import AccessLevel, EmployeeStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Employee
from .repository import EmployeeRepository

_COLUMNS = """
    employee_id, full_name, cpf, email, phone, username, password_hash, role, department,
    admission_date, birth_date, status, access_level, first_login, timezone
"""


def _to_employee(row: dict[str, Any]) -> Employee:
    return Employee(
        employee_id=int(row["employee_id"]),
        full_name=row["full_name"],
        cpf=row["cpf"],
        email=row["email"],
        phone=row.get("phone"),
        username=row["username"],
        password_hash=row["password_hash"],
        role=row["role"],
        department=row["department"],
        admission_date=row["admission_date"],
        birth_date=row["birth_date"],
        status=EmployeeStatus(row.get("status") or EmployeeStatus.ACTIVE.value),
        access_level=AccessLevel(row.get("access_level") or AccessLevel.EMPLOYEE.value),
        first_login=bool(row.get("first_login", True)),
        timezone=row.get("timezone"),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, where: str, value: Any) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE {where}=%s", (value,))
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self._get_one("employee_id", int(employee_id))

    def get_by_username(self, username: str) -> Optional[Employee]:
        return self._get_one("username", username)

    def get_by_cpf(self, cpf: str) -> Optional[Employee]:
        return self._get_one("cpf", cpf)

    def list_all(self) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees ORDER BY full_name")
            return [_to_employee(r) for r in fetchall(cur)]

    def list_active(self) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM employees WHERE status=%s ORDER BY full_name",
                (EmployeeStatus.ACTIVE.value,),
            )
            return [_to_employee(r) for r in fetchall(cur)]

    def create(self, employee: Employee) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO employees(full_name, cpf, email, phone, username, password_hash, role, department,
                                      admission_date, birth_date, status, access_level, first_login, timezone)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    employee.full_name,
                    employee.cpf,
                    employee.email,
                    employee.phone,
                    employee.username,
                    employee.password_hash,
                    employee.role,
                    employee.department,
                    employee.admission_date,
                    employee.birth_date,
                    employee.status.value,
                    employee.access_level.value,
                    int(employee.first_login),
                    employee.timezone,
                ),
            )
            return int(cur.lastrowid)

    def update(self, employee: Employee) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE employees
                SET full_name=%s, cpf=%s, email=%s, phone=%s, username=%s, role=%s, department=%s,
                    admission_date=%s, birth_date=%s, status=%s, access_level=%s, timezone=%s
                WHERE employee_id=%s
                """,
                (
                    employee.full_name,
                    employee.cpf,
                    employee.email,
                    employee.phone,
                    employee.username,
                    employee.role,
                    employee.department,
                    employee.admission_date,
                    employee.birth_date,
                    employee.status.value,
                    employee.access_level.value,
                    employee.timezone,
                    int(employee.employee_id),
                ),
            )
            return cur.rowcount > 0

    def update_password(self, employee_id: int, *, password_hash: str, first_login: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE employees SET password_hash=%s, first_login=%s WHERE employee_id=%s",
                (password_hash, int(first_login), int(employee_id)),
            )
            return cur.rowcount > 0

    def delete_by_id(self, employee_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM employees WHERE employee_id=%s", (int(employee_id),))
            return cur.rowcount > 0
