from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.web import admin_required, current_employee_id, error_response, json_body, optional_int, send_csv
from ..container import Container
from ..core.exceptions import DomainError
from .service import summary_to_dict, transaction_to_dict


def _fields(data: dict) -> dict:
    # camelCase from the client, snake_case for the service
    return {
        "type": data.get("type"),
        "amount": data.get("amount"),
        "description": data.get("description"),
        "transaction_date": data.get("transactionDate"),
        "reference": data.get("reference"),
        "notes": data.get("notes"),
    }


def register(app: Flask, container: Container) -> None:
    service = container.transaction_service

    def _filter_from_args():
        args = request.args
        return service.build_filter(
            start_date=parse_iso_date(args["startDate"]) if args.get("startDate") else None,
            end_date=parse_iso_date(args["endDate"]) if args.get("endDate") else None,
            employee_id=optional_int(args.get("userId") or args.get("employeeId")),
            transaction_type=args.get("type") or None,
        )

    @app.route("/api/admin/transactions", methods=["POST"], endpoint="admin_create_transaction")
    @admin_required
    def admin_create_transaction():
        data = json_body()
        try:
            txn = service.create(
                admin_id=current_employee_id(),
                employee_id=optional_int(data.get("userId") or data.get("employeeId")),
                data=_fields(data),
            )
        except DomainError as e:
            return error_response(e)
        return jsonify(transaction_to_dict(txn)), 201

    @app.route("/api/admin/transactions", methods=["GET"], endpoint="admin_list_transactions")
    @admin_required
    def admin_list_transactions():
        try:
            transactions = service.list_transactions(_filter_from_args())
        except DomainError as e:
            return error_response(e)
        return jsonify([transaction_to_dict(t) for t in transactions])

    @app.route("/api/admin/transactions/summary", methods=["GET"], endpoint="admin_transactions_summary")
    @admin_required
    def admin_transactions_summary():
        try:
            summary = service.summary(_filter_from_args())
        except DomainError as e:
            return error_response(e)
        return jsonify(summary_to_dict(summary))

    @app.route("/api/admin/transactions/<int:transaction_id>", methods=["PUT"], endpoint="admin_update_transaction")
    @admin_required
    def admin_update_transaction(transaction_id: int):
        try:
            txn = service.update(
                admin_id=current_employee_id(),
                transaction_id=transaction_id,
                data=_fields(json_body()),
            )
        except DomainError as e:
            return error_response(e)
        return jsonify(transaction_to_dict(txn))

    @app.route("/api/admin/transactions/<int:transaction_id>", methods=["DELETE"], endpoint="admin_delete_transaction")
    @admin_required
    def admin_delete_transaction(transaction_id: int):
        try:
            service.delete(admin_id=current_employee_id(), transaction_id=transaction_id)
        except DomainError as e:
            return error_response(e)
        return "", 204

    @app.route("/api/admin/export-transactions", methods=["GET"], endpoint="admin_export_transactions")
    @admin_required
    def admin_export_transactions():
        try:
            csv_text = service.export_csv(_filter_from_args())
        except DomainError as e:
            return error_response(e)
        return send_csv(csv_text, filename="financial-transactions.csv")
