from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AuditAction, RecordType
from .model import AuditLogEntry, TimeRecord, TimeRecordFilter


class TimeRecordRepository(Protocol):
    def get_by_id(self, record_id: int) -> Optional[TimeRecord]:
        raise NotImplementedError

    def list_for_employee(self, employee_id: int, *, start: datetime, end: datetime) -> Sequence[TimeRecord]:
        """Records with ``start <= timestamp < end`` (UTC), oldest first."""

        raise NotImplementedError

    def list_filtered(self, flt: TimeRecordFilter) -> Sequence[TimeRecord]:
        raise NotImplementedError

    def get_last_for_employee(self, employee_id: int) -> Optional[TimeRecord]:
        raise NotImplementedError

    def create(
        self,
        *,
        employee_id: int,
        record_type: RecordType,
        timestamp: datetime,
        latitude: Optional[float],
        longitude: Optional[float],
        photo_ref: Optional[str],
        ip_address: Optional[str],
        justification: Optional[str] = None,
        corrected: bool = False,
        created_by: Optional[int] = None,
    ) -> int:
        raise NotImplementedError

    def admin_update(
        self,
        *,
        record_id: int,
        record_type: RecordType,
        timestamp: datetime,
        justification: Optional[str],
    ) -> bool:
        """Admin-only override; always marks the record as corrected."""

        raise NotImplementedError

    def delete_by_id(self, record_id: int) -> bool:
        raise NotImplementedError


class AuditLogRepository(Protocol):
    def add(self, *, entity_type: str, entity_id: int, action: AuditAction, changed_by: int, changes: dict) -> int:
        raise NotImplementedError

    def list_for_entity(self, *, entity_type: str, entity_id: int) -> Sequence[AuditLogEntry]:
        raise NotImplementedError
