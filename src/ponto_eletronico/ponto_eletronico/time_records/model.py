from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import AuditAction, RecordType


@dataclass(frozen=True)
class TimeRecord:
    """Entidade de domínio: registro de ponto (entrada ou saída).

    ``timestamp`` is an instant; naive values are UTC (see ``as_utc``).
    """

    record_id: int
    employee_id: int
    type: RecordType
    timestamp: datetime
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    photo_ref: Optional[str] = None
    ip_address: Optional[str] = None
    justification: Optional[str] = None
    corrected: bool = False
    created_by: Optional[int] = None


@dataclass(frozen=True)
class TimeRecordFilter:
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    employee_id: Optional[int] = None
    type: Optional[RecordType] = None


@dataclass(frozen=True)
class AuditLogEntry:
    audit_id: int
    entity_type: str
    entity_id: int
    action: AuditAction
    changed_by: int
    changes: dict
    created_at: datetime
