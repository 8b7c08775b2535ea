from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import TransactionType
from .model import FinancialTransaction, TransactionFilter


class TransactionRepository(Protocol):
    def get_by_id(self, transaction_id: int) -> Optional[FinancialTransaction]:
        raise NotImplementedError

    def list_filtered(self, flt: TransactionFilter) -> Sequence[FinancialTransaction]:
        """Dates inclusive on both ends, newest first."""

        raise NotImplementedError

    def create(
        self,
        *,
        employee_id: int,
        transaction_type: TransactionType,
        amount: Decimal,
        description: str,
        transaction_date: date,
        reference: Optional[str],
        notes: Optional[str],
        created_by: int,
    ) -> int:
        raise NotImplementedError

    def update(self, transaction: FinancialTransaction) -> bool:
        raise NotImplementedError

    def delete_by_id(self, transaction_id: int) -> bool:
        raise NotImplementedError
