from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class Salary:
    """Entidade de domínio: salário com data de vigência.

    The history of an employee is the list of these; the current salary is
    the latest one already in effect.
    """

    salary_id: int
    employee_id: int
    amount: Decimal
    effective_date: date
    notes: Optional[str] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
