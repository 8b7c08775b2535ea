from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import AccessLevel, EmployeeStatus


@dataclass(frozen=True)
class Employee:
    """Entidade de domínio: funcionário.

    Note: plain data object, no DB access here.
    """

    employee_id: int
    full_name: str
    cpf: str
    email: str
    username: str
    password_hash: str
    role: str
    department: str
    admission_date: date
    birth_date: date
    phone: Optional[str] = None
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    access_level: AccessLevel = AccessLevel.EMPLOYEE
    first_login: bool = True
    timezone: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status == EmployeeStatus.ACTIVE

    @property
    def is_admin(self) -> bool:
        return self.access_level == AccessLevel.ADMIN

    def public_dict(self) -> dict:
        return {
            "id": self.employee_id,
            "full_name": self.full_name,
            "cpf": self.cpf,
            "email": self.email,
            "phone": self.phone,
            "username": self.username,
            "role": self.role,
            "department": self.department,
            "admission_date": self.admission_date.isoformat(),
            "birth_date": self.birth_date.isoformat(),
            "status": self.status.value,
            "access_level": self.access_level.value,
            "first_login": self.first_login,
            "timezone": self.timezone,
        }
