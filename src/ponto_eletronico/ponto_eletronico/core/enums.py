from __future__ import annotations

from enum import Enum


class AccessLevel(str, Enum):
    """Nível de acesso usado para autorização."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class EmployeeStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class RecordType(str, Enum):
    """Tipo do registro de ponto (entrada/saída)."""

    IN = "in"
    OUT = "out"

    @property
    def label(self) -> str:
        return "Entrada" if self is RecordType.IN else "Saída"


class AuditAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class TransactionType(str, Enum):
    """Lançamento financeiro avulso (fora da folha por hora)."""

    SALARY = "salary"
    ADVANCE = "advance"
    BONUS = "bonus"
    VACATION = "vacation"
    THIRTEENTH = "thirteenth"
    ADJUSTMENT = "adjustment"
    DEDUCTION = "deduction"

    @property
    def label(self) -> str:
        return _TRANSACTION_LABELS[self]


_TRANSACTION_LABELS = {
    TransactionType.SALARY: "Salário",
    TransactionType.ADVANCE: "Adiantamento",
    TransactionType.BONUS: "Bônus",
    TransactionType.VACATION: "Férias",
    TransactionType.THIRTEENTH: "Décimo Terceiro",
    TransactionType.ADJUSTMENT: "Ajuste",
    TransactionType.DEDUCTION: "Dedução",
}
