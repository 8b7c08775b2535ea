from __future__ import annotations

import csv
import io
import logging
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Optional, Sequence

from ..common.datetime_utils import as_utc, local_range_bounds, now_utc, parse_iso_datetime, to_local, today_local
from ..common.validators import require_coordinates, require_non_empty
from ..core.constants import DEFAULT_HISTORY_DAYS
from ..core.enums import AuditAction, RecordType
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from .model import AuditLogEntry, TimeRecord, TimeRecordFilter
from .repository import AuditLogRepository, TimeRecordRepository

logger = logging.getLogger(__name__)

AUDIT_ENTITY = "time_record"

CSV_HEADER = [
    "ID",
    "Funcionário",
    "Data",
    "Hora",
    "Tipo",
    "Endereço IP",
    "Latitude",
    "Longitude",
    "Manual",
    "Justificativa",
    "Criado Por",
]


def parse_record_type(value) -> RecordType:
    if isinstance(value, RecordType):
        return value
    try:
        return RecordType(str(value or "").strip().lower())
    except ValueError:
        raise ValidationError("Tipo de registro inválido (use 'in' ou 'out')")


def record_to_dict(record: TimeRecord) -> dict:
    return {
        "id": record.record_id,
        "employee_id": record.employee_id,
        "type": record.type.value,
        "timestamp": as_utc(record.timestamp).isoformat(),
        "latitude": record.latitude,
        "longitude": record.longitude,
        "photo_ref": record.photo_ref,
        "ip_address": record.ip_address,
        "justification": record.justification,
        "corrected": record.corrected,
        "created_by": record.created_by,
    }


class TimeRecordService:
    """Clock-in/out for employees plus audited corrections for admins."""

    def __init__(
        self,
        records: TimeRecordRepository,
        employees: EmployeeRepository,
        audit: AuditLogRepository,
        *,
        tz_name: Optional[str] = None,
    ):
        self._records = records
        self._employees = employees
        self._audit = audit
        self._tz_name = tz_name

    def tz_for(self, employee: Optional[Employee]) -> Optional[str]:
        if employee and employee.timezone:
            return employee.timezone
        return self._tz_name

    def _get_employee(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError("Funcionário não encontrado")
        return employee

    def _get_record(self, record_id: int) -> TimeRecord:
        record = self._records.get_by_id(record_id)
        if not record:
            raise NotFoundError("Registro de ponto não encontrado")
        return record

    def current_status(self, employee_id: int) -> RecordType:
        last = self._records.get_last_for_employee(employee_id)
        if last is None:
            return RecordType.OUT
        return last.type

    def clock(
        self,
        employee_id: int,
        *,
        record_type,
        latitude,
        longitude,
        photo_ref: str,
        ip_address: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> TimeRecord:
        record_type = parse_record_type(record_type)
        employee = self._get_employee(employee_id)
        if not employee.is_active:
            raise ValidationError("Funcionário inativo")

        lat, lon = require_coordinates(latitude, longitude)
        photo_ref = require_non_empty(photo_ref, "Foto")

        status = self.current_status(employee_id)
        if record_type == RecordType.IN and status == RecordType.IN:
            raise ValidationError("Você já registrou entrada. Registre a saída primeiro")
        if record_type == RecordType.OUT and status == RecordType.OUT:
            raise ValidationError("Não há registro de entrada em aberto")

        timestamp = as_utc(now) if now else now_utc()
        record_id = self._records.create(
            employee_id=employee_id,
            record_type=record_type,
            timestamp=timestamp,
            latitude=lat,
            longitude=lon,
            photo_ref=photo_ref,
            ip_address=ip_address,
            created_by=employee_id,
        )
        return TimeRecord(
            record_id=record_id,
            employee_id=employee_id,
            type=record_type,
            timestamp=timestamp,
            latitude=lat,
            longitude=lon,
            photo_ref=photo_ref,
            ip_address=ip_address,
            created_by=employee_id,
        )

    def recent_history(self, employee_id: int, *, days: int = DEFAULT_HISTORY_DAYS, today: Optional[date] = None) -> Sequence[TimeRecord]:
        employee = self._get_employee(employee_id)
        tz_name = self.tz_for(employee)
        today = today or today_local(tz_name)
        start, end = local_range_bounds(today - timedelta(days=days), today, tz_name)
        return self._records.list_for_employee(employee_id, start=start, end=end)

    def records_for_range(self, employee: Employee, *, start: date, end: date) -> Sequence[TimeRecord]:
        """Raw events of one employee for a local-date range."""
        lower, upper = local_range_bounds(start, end, self.tz_for(employee))
        return self._records.list_for_employee(employee.employee_id, start=lower, end=upper)

    def build_filter(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        employee_id: Optional[int] = None,
        record_type=None,
    ) -> TimeRecordFilter:
        lower = upper = None
        if start_date is not None:
            lower, _ = local_range_bounds(start_date, start_date, self._tz_name)
        if end_date is not None:
            _, upper = local_range_bounds(end_date, end_date, self._tz_name)
        return TimeRecordFilter(
            start=lower,
            end=upper,
            employee_id=employee_id,
            type=parse_record_type(record_type) if record_type else None,
        )

    def list_records(self, flt: TimeRecordFilter) -> Sequence[TimeRecord]:
        return self._records.list_filtered(flt)

    def admin_create(
        self,
        *,
        admin_id: int,
        employee_id: int,
        record_type,
        timestamp,
        justification: str,
        latitude=None,
        longitude=None,
        ip_address: Optional[str] = None,
    ) -> TimeRecord:
        if employee_id is None:
            raise ValidationError("Funcionário é obrigatório")
        employee = self._get_employee(employee_id)
        record_type = parse_record_type(record_type)
        justification = require_non_empty(justification, "Justificativa")
        if not isinstance(timestamp, datetime):
            timestamp = parse_iso_datetime(timestamp, tz_name=self.tz_for(employee))

        lat = lon = None
        if latitude is not None or longitude is not None:
            lat, lon = require_coordinates(latitude, longitude)

        record_id = self._records.create(
            employee_id=employee_id,
            record_type=record_type,
            timestamp=as_utc(timestamp),
            latitude=lat,
            longitude=lon,
            photo_ref=None,
            ip_address=ip_address,
            justification=justification,
            corrected=True,
            created_by=admin_id,
        )
        record = self._get_record(record_id)
        self._audit.add(
            entity_type=AUDIT_ENTITY,
            entity_id=record_id,
            action=AuditAction.CREATE,
            changed_by=admin_id,
            changes={"after": record_to_dict(record)},
        )
        logger.info("Admin %s created %s record %s for employee %s", admin_id, record_type.value, record_id, employee_id)
        return record

    def admin_update(
        self,
        *,
        admin_id: int,
        record_id: int,
        record_type=None,
        timestamp=None,
        justification: Optional[str] = None,
    ) -> TimeRecord:
        before = self._get_record(record_id)
        employee = self._employees.get_by_id(before.employee_id)

        new_type = parse_record_type(record_type) if record_type else before.type
        if timestamp is None:
            new_ts = before.timestamp
        elif isinstance(timestamp, datetime):
            new_ts = as_utc(timestamp)
        else:
            new_ts = parse_iso_datetime(timestamp, tz_name=self.tz_for(employee))
        new_justification = require_non_empty(justification or before.justification, "Justificativa")

        self._records.admin_update(
            record_id=record_id,
            record_type=new_type,
            timestamp=new_ts,
            justification=new_justification,
        )
        after = replace(before, type=new_type, timestamp=new_ts, justification=new_justification, corrected=True)
        self._audit.add(
            entity_type=AUDIT_ENTITY,
            entity_id=record_id,
            action=AuditAction.UPDATE,
            changed_by=admin_id,
            changes={"before": record_to_dict(before), "after": record_to_dict(after)},
        )
        logger.info("Admin %s corrected record %s", admin_id, record_id)
        return after

    def admin_delete(self, *, admin_id: int, record_id: int) -> None:
        before = self._get_record(record_id)
        if not self._records.delete_by_id(record_id):
            raise ValidationError("Falha ao excluir registro de ponto")
        self._audit.add(
            entity_type=AUDIT_ENTITY,
            entity_id=record_id,
            action=AuditAction.DELETE,
            changed_by=admin_id,
            changes={"before": record_to_dict(before)},
        )
        logger.info("Admin %s deleted record %s", admin_id, record_id)

    def audit_trail(self, *, entity_type: str, entity_id: int) -> Sequence[AuditLogEntry]:
        return self._audit.list_for_entity(entity_type=entity_type, entity_id=entity_id)

    def export_csv(self, flt: TimeRecordFilter) -> str:
        records = self._records.list_filtered(flt)
        names = {e.employee_id: e.full_name for e in self._employees.list_all()}

        out = io.StringIO()
        writer = csv.writer(out)
        writer.writerow(CSV_HEADER)
        for r in records:
            local = to_local(r.timestamp, self._tz_name)
            writer.writerow(
                [
                    r.record_id,
                    names.get(r.employee_id, f"ID: {r.employee_id}"),
                    local.strftime("%d/%m/%Y"),
                    local.strftime("%H:%M:%S"),
                    r.type.label,
                    r.ip_address or "",
                    "" if r.latitude is None else r.latitude,
                    "" if r.longitude is None else r.longitude,
                    "Sim" if r.corrected else "Não",
                    r.justification or "",
                    names.get(r.created_by, f"ID: {r.created_by}") if r.created_by is not None else "",
                ]
            )
        logger.info("Exported %d time records to CSV", len(records))
        return out.getvalue()
