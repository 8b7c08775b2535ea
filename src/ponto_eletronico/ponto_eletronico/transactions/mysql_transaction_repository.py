from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Optional, Sequence

from ..common.datetime_utils import as_utc
from ..core.enums import TransactionType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import FinancialTransaction, TransactionFilter
from .repository import TransactionRepository

_COLUMNS = """
    transaction_id, employee_id, type, amount, description, transaction_date, reference, notes,
    created_by, created_at
"""


def _to_transaction(r: dict[str, Any]) -> FinancialTransaction:
    return FinancialTransaction(
        transaction_id=int(r["transaction_id"]),
        employee_id=int(r["employee_id"]),
        type=TransactionType(r["type"]),
        amount=Decimal(str(r["amount"])),
        description=r["description"],
        transaction_date=r["transaction_date"],
        reference=r.get("reference"),
        notes=r.get("notes"),
        created_by=r.get("created_by"),
        created_at=as_utc(r["created_at"]) if r.get("created_at") else None,
    )


class MySQLTransactionRepository(TransactionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, transaction_id: int) -> Optional[FinancialTransaction]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM financial_transactions WHERE transaction_id=%s",
                (int(transaction_id),),
            )
            r = fetchone(cur)
            return _to_transaction(r) if r else None

    def list_filtered(self, flt: TransactionFilter) -> Sequence[FinancialTransaction]:
        where: list[str] = []
        params: list[Any] = []
        if flt.employee_id is not None:
            where.append("employee_id=%s")
            params.append(int(flt.employee_id))
        if flt.type is not None:
            where.append("type=%s")
            params.append(flt.type.value)
        if flt.start_date is not None:
            where.append("transaction_date >= %s")
            params.append(flt.start_date)
        if flt.end_date is not None:
            where.append("transaction_date <= %s")
            params.append(flt.end_date)

        sql = f"SELECT {_COLUMNS} FROM financial_transactions"
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY transaction_date DESC, transaction_id DESC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_transaction(r) for r in fetchall(cur)]

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO financial_transactions(employee_id, type, amount, description, transaction_date,
                                                   reference, notes, created_by, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,UTC_TIMESTAMP())
                """,
                (
                    int(employee_id),
                    transaction_type.value,
                    amount,
                    description,
                    transaction_date,
                    reference,
                    notes,
                    int(created_by),
                ),
            )
            return int(cur.lastrowid)

    def update(self, transaction: FinancialTransaction) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE financial_transactions
                SET type=%s, amount=%s, description=%s, transaction_date=%s, reference=%s, notes=%s
                WHERE transaction_id=%s
                """,
                (
                    transaction.type.value,
                    transaction.amount,
                    transaction.description,
                    transaction.transaction_date,
                    transaction.reference,
                    transaction.notes,
                    int(transaction.transaction_id),
                ),
            )
            return cur.rowcount > 0

    def delete_by_id(self, transaction_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM financial_transactions WHERE transaction_id=%s", (int(transaction_id),))
            return cur.rowcount > 0
