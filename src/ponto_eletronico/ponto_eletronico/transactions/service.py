from __future__ import annotations

import csv
import io
import logging
from collections import defaultdict
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence

from ..common.datetime_utils import parse_local_day
from ..common.formatting import format_brl, format_date, json_amount, round_half_up
from ..common.validators import require_amount, require_min_length, require_non_empty
from ..core.enums import AuditAction, TransactionType
from ..core.exceptions import InvalidInputError, NotFoundError, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..time_records.repository import AuditLogRepository
from .model import FinancialTransaction, TransactionFilter, TransactionSummary
from .repository import TransactionRepository

logger = logging.getLogger(__name__)

AUDIT_ENTITY = "financial_transaction"
MIN_DESCRIPTION_LENGTH = 3

CSV_HEADER = [
    "ID",
    "Funcionário",
    "Data",
    "Tipo",
    "Descrição",
    "Valor",
    "Referência",
    "Observações",
    "Criado Por",
]


def parse_transaction_type(value) -> TransactionType:
    if isinstance(value, TransactionType):
        return value
    try:
        return TransactionType(str(value or "").strip().lower())
    except ValueError:
        raise ValidationError("Tipo de transação inválido")


def transaction_to_dict(txn: FinancialTransaction) -> dict:
    return {
        "id": txn.transaction_id,
        "employee_id": txn.employee_id,
        "type": txn.type.value,
        "type_label": txn.type.label,
        "amount": json_amount(txn.amount),
        "description": txn.description,
        "transaction_date": txn.transaction_date.isoformat(),
        "reference": txn.reference,
        "notes": txn.notes,
        "created_by": txn.created_by,
        "created_at": txn.created_at.isoformat() if txn.created_at else None,
        "display": {
            "amount": format_brl(txn.amount),
            "transaction_date": format_date(txn.transaction_date),
        },
    }


def summary_to_dict(summary: TransactionSummary) -> dict:
    return {
        "count": summary.count,
        "credits": json_amount(summary.credits),
        "deductions": json_amount(summary.deductions),
        "net": json_amount(summary.net),
        "by_type": {t.value: json_amount(v) for t, v in summary.by_type.items()},
    }


def _optional_text(value) -> Optional[str]:
    text = str(value).strip() if value is not None else ""
    return text or None


def summarize(transactions: Sequence[FinancialTransaction]) -> TransactionSummary:
    """Totals per type plus the net effect (deductions subtract)."""
    by_type: dict[TransactionType, Decimal] = defaultdict(Decimal)
    for t in transactions:
        by_type[t.type] += t.amount

    deductions = by_type.get(TransactionType.DEDUCTION, Decimal("0"))
    credits = sum((v for k, v in by_type.items() if k != TransactionType.DEDUCTION), Decimal("0"))
    return TransactionSummary(
        count=len(transactions),
        credits=round_half_up(credits),
        deductions=round_half_up(deductions),
        net=round_half_up(credits - deductions),
        by_type={k: round_half_up(v) for k, v in sorted(by_type.items(), key=lambda kv: kv[0].value)},
    )


class TransactionService:
    """Bonuses, advances, deductions and other one-off payments; audited."""

    def __init__(
        self,
        transactions: TransactionRepository,
        employees: EmployeeRepository,
        audit: AuditLogRepository,
        *,
        tz_name: Optional[str] = None,
    ):
        self._transactions = transactions
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

    def _get_transaction(self, transaction_id: int) -> FinancialTransaction:
        txn = self._transactions.get_by_id(transaction_id)
        if not txn:
            raise NotFoundError("Transação não encontrada")
        return txn

    def _validated_fields(self, data: Mapping[str, Any], employee: Employee, *, current=None) -> dict:
        def pick(key: str):
            if data.get(key) is not None:
                return data[key]
            return getattr(current, key) if current is not None else None

        day = pick("transaction_date")
        if day in (None, ""):
            raise ValidationError("Data da transação é obrigatória")
        description = require_non_empty(pick("description"), "Descrição")
        return {
            "type": parse_transaction_type(pick("type")),
            "amount": require_amount(pick("amount"), "Valor"),
            "description": require_min_length(description, "Descrição", MIN_DESCRIPTION_LENGTH),
            "transaction_date": parse_local_day(day, tz_name=employee.timezone or self._tz_name),
            "reference": _optional_text(pick("reference")),
            "notes": _optional_text(pick("notes")),
        }

    def build_filter(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        employee_id: Optional[int] = None,
        transaction_type=None,
    ) -> TransactionFilter:
        if start_date and end_date and start_date > end_date:
            raise InvalidInputError("A data inicial deve ser anterior ou igual à data final")
        return TransactionFilter(
            start_date=start_date,
            end_date=end_date,
            employee_id=employee_id,
            type=parse_transaction_type(transaction_type) if transaction_type else None,
        )

    def list_transactions(self, flt: TransactionFilter) -> Sequence[FinancialTransaction]:
        return self._transactions.list_filtered(flt)

    def summary(self, flt: TransactionFilter) -> TransactionSummary:
        return summarize(self._transactions.list_filtered(flt))

    def create(self, *, admin_id: int, employee_id: Optional[int], data: Mapping[str, Any]) -> FinancialTransaction:
        employee = self._get_employee(employee_id)
        fields = self._validated_fields(data, employee)
        transaction_id = self._transactions.create(
            employee_id=employee.employee_id,
            transaction_type=fields["type"],
            amount=fields["amount"],
            description=fields["description"],
            transaction_date=fields["transaction_date"],
            reference=fields["reference"],
            notes=fields["notes"],
            created_by=admin_id,
        )
        txn = self._get_transaction(transaction_id)
        self._audit.add(
            entity_type=AUDIT_ENTITY,
            entity_id=transaction_id,
            action=AuditAction.CREATE,
            changed_by=admin_id,
            changes={"after": transaction_to_dict(txn)},
        )
        logger.info(
            "Admin %s created %s transaction %s for employee %s",
            admin_id,
            txn.type.value,
            transaction_id,
            employee.employee_id,
        )
        return txn

    def update(self, *, admin_id: int, transaction_id: int, data: Mapping[str, Any]) -> FinancialTransaction:
        before = self._get_transaction(transaction_id)
        employee = self._get_employee(before.employee_id)
        after = replace(before, **self._validated_fields(data, employee, current=before))

        self._transactions.update(after)
        self._audit.add(
            entity_type=AUDIT_ENTITY,
            entity_id=transaction_id,
            action=AuditAction.UPDATE,
            changed_by=admin_id,
            changes={"before": transaction_to_dict(before), "after": transaction_to_dict(after)},
        )
        logger.info("Admin %s updated transaction %s", admin_id, transaction_id)
        return after

    def delete(self, *, admin_id: int, transaction_id: int) -> None:
        before = self._get_transaction(transaction_id)
        if not self._transactions.delete_by_id(transaction_id):
            raise ValidationError("Falha ao excluir transação")
        self._audit.add(
            entity_type=AUDIT_ENTITY,
            entity_id=transaction_id,
            action=AuditAction.DELETE,
            changed_by=admin_id,
            changes={"before": transaction_to_dict(before)},
        )
        logger.info("Admin %s deleted transaction %s", admin_id, transaction_id)

    def export_csv(self, flt: TransactionFilter) -> str:
        transactions = self._transactions.list_filtered(flt)
        names = {e.employee_id: e.full_name for e in self._employees.list_all()}

        out = io.StringIO()
        writer = csv.writer(out)
        writer.writerow(CSV_HEADER)
        for t in transactions:
            writer.writerow(
                [
                    t.transaction_id,
                    names.get(t.employee_id, f"ID: {t.employee_id}"),
                    format_date(t.transaction_date),
                    t.type.label,
                    t.description,
                    f"{t.signed_amount:.2f}",
                    t.reference or "",
                    t.notes or "",
                    names.get(t.created_by, f"ID: {t.created_by}") if t.created_by is not None else "",
                ]
            )
        logger.info("Exported %d financial transactions to CSV", len(transactions))
        return out.getvalue()
