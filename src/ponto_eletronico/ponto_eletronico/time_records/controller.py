from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.web import (
    admin_required,
    current_employee_id,
    error_response,
    json_body,
    login_required,
    optional_int,
    send_csv,
)
from ..container import Container
from ..core.exceptions import DomainError
from .service import record_to_dict


def _client_ip() -> str:
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.remote_addr or ""


def register(app: Flask, container: Container) -> None:
    service = container.time_record_service

    def _filter_from_args():
        args = request.args
        return service.build_filter(
            start_date=parse_iso_date(args["startDate"]) if args.get("startDate") else None,
            end_date=parse_iso_date(args["endDate"]) if args.get("endDate") else None,
            employee_id=optional_int(args.get("userId") or args.get("employeeId")),
            record_type=args.get("type") or None,
        )

    @app.route("/api/time-records", methods=["POST"], endpoint="clock")
    @login_required
    def clock():
        data = json_body()
        try:
            record = service.clock(
                current_employee_id(),
                record_type=data.get("type"),
                latitude=data.get("latitude"),
                longitude=data.get("longitude"),
                photo_ref=data.get("photo") or data.get("photoRef") or "",
                ip_address=_client_ip(),
            )
        except DomainError as e:
            return error_response(e)
        return jsonify(record_to_dict(record)), 201

    @app.route("/api/time-records/me", methods=["GET"], endpoint="my_time_records")
    @login_required
    def my_time_records():
        try:
            records = service.recent_history(current_employee_id())
        except DomainError as e:
            return error_response(e)
        return jsonify([record_to_dict(r) for r in records])

    @app.route("/api/time-records/status", methods=["GET"], endpoint="my_status")
    @login_required
    def my_status():
        return jsonify({"status": service.current_status(current_employee_id()).value})

    @app.route("/api/admin/time-records", methods=["GET"], endpoint="admin_list_time_records")
    @admin_required
    def admin_list_time_records():
        try:
            records = service.list_records(_filter_from_args())
        except DomainError as e:
            return error_response(e)
        return jsonify([record_to_dict(r) for r in records])

    @app.route("/api/admin/time-records", methods=["POST"], endpoint="admin_create_time_record")
    @admin_required
    def admin_create_time_record():
        data = json_body()
        try:
            record = service.admin_create(
                admin_id=current_employee_id(),
                employee_id=optional_int(data.get("userId") or data.get("employeeId")),
                record_type=data.get("type"),
                timestamp=data.get("timestamp"),
                justification=data.get("justification", ""),
                latitude=data.get("latitude"),
                longitude=data.get("longitude"),
                ip_address=_client_ip(),
            )
        except DomainError as e:
            return error_response(e)
        return jsonify(record_to_dict(record)), 201

    @app.route("/api/admin/time-records/<int:record_id>", methods=["PUT"], endpoint="admin_update_time_record")
    @admin_required
    def admin_update_time_record(record_id: int):
        data = json_body()
        try:
            record = service.admin_update(
                admin_id=current_employee_id(),
                record_id=record_id,
                record_type=data.get("type"),
                timestamp=data.get("timestamp"),
                justification=data.get("justification"),
            )
        except DomainError as e:
            return error_response(e)
        return jsonify(record_to_dict(record))

    @app.route("/api/admin/time-records/<int:record_id>", methods=["DELETE"], endpoint="admin_delete_time_record")
    @admin_required
    def admin_delete_time_record(record_id: int):
        try:
            service.admin_delete(admin_id=current_employee_id(), record_id=record_id)
        except DomainError as e:
            return error_response(e)
        return "", 204

    @app.route("/api/admin/export-time-records", methods=["GET"], endpoint="admin_export_time_records")
    @admin_required
    def admin_export_time_records():
        try:
            csv_text = service.export_csv(_filter_from_args())
        except DomainError as e:
            return error_response(e)
        return send_csv(csv_text, filename="time-records.csv")

    @app.route(
        "/api/admin/audit-logs/<entity_type>/<int:entity_id>",
        methods=["GET"],
        endpoint="admin_audit_logs",
    )
    @admin_required
    def admin_audit_logs(entity_type: str, entity_id: int):
        entries = service.audit_trail(entity_type=entity_type, entity_id=entity_id)
        return jsonify(
            [
                {
                    "id": e.audit_id,
                    "entity_type": e.entity_type,
                    "entity_id": e.entity_id,
                    "action": e.action.value,
                    "changed_by": e.changed_by,
                    "changes": e.changes,
                    "created_at": e.created_at.isoformat(),
                }
                for e in entries
            ]
        )
