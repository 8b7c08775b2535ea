from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import TransactionType


@dataclass(frozen=True)
class FinancialTransaction:
    """Entidade de domínio: lançamento financeiro (bônus, adiantamento, dedução...).

    ``amount`` is always positive; ``type`` decides whether it adds to or
    subtracts from what the employee receives.
    """

    transaction_id: int
    employee_id: int
    type: TransactionType
    amount: Decimal
    description: str
    transaction_date: date
    reference: Optional[str] = None
    notes: Optional[str] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None

    @property
    def signed_amount(self) -> Decimal:
        return -self.amount if self.type == TransactionType.DEDUCTION else self.amount


@dataclass(frozen=True)
class TransactionFilter:
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    employee_id: Optional[int] = None
    type: Optional[TransactionType] = None


@dataclass(frozen=True)
class TransactionSummary:
    count: int
    credits: Decimal
    deductions: Decimal
    net: Decimal
    by_type: dict[TransactionType, Decimal] = field(default_factory=dict)
