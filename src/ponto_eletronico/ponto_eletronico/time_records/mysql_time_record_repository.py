from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Sequence

from ..common.datetime_utils import as_utc
from ..core.enums import RecordType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, optional_float, to_db_datetime
from .model import TimeRecord, TimeRecordFilter
from .repository import TimeRecordRepository

_COLUMNS = """
    record_id, employee_id, type, timestamp, latitude, longitude, photo_ref, ip_address,
    justification, corrected, created_by
"""


def _to_record(r: dict[str, Any]) -> TimeRecord:
    return TimeRecord(
        record_id=int(r["record_id"]),
        employee_id=int(r["employee_id"]),
        type=RecordType(r["type"]),
        timestamp=as_utc(r["timestamp"]),
        latitude=optional_float(r.get("latitude")),
        longitude=optional_float(r.get("longitude")),
        photo_ref=r.get("photo_ref"),
        ip_address=r.get("ip_address"),
        justification=r.get("justification"),
        corrected=bool(r.get("corrected")),
        created_by=r.get("created_by"),
    )


class MySQLTimeRecordRepository(TimeRecordRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, record_id: int) -> Optional[TimeRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM time_records WHERE record_id=%s", (int(record_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_for_employee(self, employee_id: int, *, start: datetime, end: datetime) -> Sequence[TimeRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM time_records
                WHERE employee_id=%s AND timestamp >= %s AND timestamp < %s
                ORDER BY timestamp ASC, record_id ASC
                """,
                (int(employee_id), to_db_datetime(start), to_db_datetime(end)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_filtered(self, flt: TimeRecordFilter) -> Sequence[TimeRecord]:
        where: list[str] = []
        params: list[Any] = []
        if flt.employee_id is not None:
            where.append("employee_id=%s")
            params.append(int(flt.employee_id))
        if flt.type is not None:
            where.append("type=%s")
            params.append(flt.type.value)
        if flt.start is not None:
            where.append("timestamp >= %s")
            params.append(to_db_datetime(flt.start))
        if flt.end is not None:
            where.append("timestamp < %s")
            params.append(to_db_datetime(flt.end))

        sql = f"SELECT {_COLUMNS} FROM time_records"
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY timestamp DESC, record_id DESC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_record(r) for r in fetchall(cur)]

    def get_last_for_employee(self, employee_id: int) -> Optional[TimeRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM time_records
                WHERE employee_id=%s
                ORDER BY timestamp DESC, record_id DESC
                LIMIT 1
                """,
                (int(employee_id),),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO time_records(employee_id, type, timestamp, latitude, longitude, photo_ref,
                                         ip_address, justification, corrected, created_by)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(employee_id),
                    record_type.value,
                    to_db_datetime(timestamp),
                    latitude,
                    longitude,
                    photo_ref,
                    ip_address,
                    justification,
                    int(corrected),
                    created_by,
                ),
            )
            return int(cur.lastrowid)

    def admin_update(
        self,
        *,
        record_id: int,
        record_type: RecordType,
        timestamp: datetime,
        justification: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE time_records
                SET type=%s, timestamp=%s, justification=%s, corrected=1
                WHERE record_id=%s
                """,
                (record_type.value, to_db_datetime(timestamp), justification, int(record_id)),
            )
            return cur.rowcount > 0

    def delete_by_id(self, record_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM time_records WHERE record_id=%s", (int(record_id),))
            return cur.rowcount > 0
