from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from .model import Salary


class SalaryRepository(Protocol):
    def get_by_id(self, salary_id: int) -> Optional[Salary]:
        raise NotImplementedError

    def list_for_employee(self, employee_id: int) -> Sequence[Salary]:
        """Newest effective date first."""

        raise NotImplementedError

    def list_all(self) -> Sequence[Salary]:
        raise NotImplementedError

    def get_current(self, employee_id: int, *, as_of: date) -> Optional[Salary]:
        """Latest salary with ``effective_date <= as_of``."""

        raise NotImplementedError

    def create(
        self,
        *,
        employee_id: int,
        amount: Decimal,
        effective_date: date,
        notes: Optional[str],
        created_by: int,
    ) -> int:
        raise NotImplementedError

    def update(self, salary: Salary) -> bool:
        raise NotImplementedError

    def delete_by_id(self, salary_id: int) -> bool:
        raise NotImplementedError
