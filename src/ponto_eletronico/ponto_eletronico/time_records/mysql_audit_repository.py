from __future__ import annotations

import json
from typing import Sequence

from ..common.datetime_utils import as_utc
from ..core.enums import AuditAction
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import AuditLogEntry
from .repository import AuditLogRepository


class MySQLAuditLogRepository(AuditLogRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def add(self, *, entity_type: str, entity_id: int, action: AuditAction, changed_by: int, changes: dict) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO audit_logs(entity_type, entity_id, action, changed_by, changes, created_at)
                VALUES(%s,%s,%s,%s,%s,UTC_TIMESTAMP())
                """,
                (entity_type, int(entity_id), action.value, int(changed_by), json.dumps(changes, default=str)),
            )
            return int(cur.lastrowid)

    def list_for_entity(self, *, entity_type: str, entity_id: int) -> Sequence[AuditLogEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT audit_id, entity_type, entity_id, action, changed_by, changes, created_at
                FROM audit_logs
                WHERE entity_type=%s AND entity_id=%s
                ORDER BY created_at DESC, audit_id DESC
                """,
                (entity_type, int(entity_id)),
            )
            return [
                AuditLogEntry(
                    audit_id=int(r["audit_id"]),
                    entity_type=r["entity_type"],
                    entity_id=int(r["entity_id"]),
                    action=AuditAction(r["action"]),
                    changed_by=int(r["changed_by"]),
                    changes=json.loads(r["changes"]) if r.get("changes") else {},
                    created_at=as_utc(r["created_at"]),
                )
                for r in fetchall(cur)
            ]
