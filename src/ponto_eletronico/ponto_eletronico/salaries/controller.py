from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import admin_required, current_employee_id, error_response, json_body, optional_int, send_csv
from ..container import Container
from ..core.exceptions import DomainError
from .service import salary_to_dict


def register(app: Flask, container: Container) -> None:
    service = container.salary_service

    @app.route("/api/admin/salaries", methods=["POST"], endpoint="admin_create_salary")
    @admin_required
    def admin_create_salary():
        data = json_body()
        try:
            salary = service.create(
                admin_id=current_employee_id(),
                employee_id=optional_int(data.get("userId") or data.get("employeeId")),
                amount=data.get("amount"),
                effective_date=data.get("effectiveDate"),
                notes=data.get("notes"),
            )
        except DomainError as e:
            return error_response(e)
        return jsonify(salary_to_dict(salary)), 201

    @app.route("/api/admin/salaries/current/<int:employee_id>", methods=["GET"], endpoint="admin_current_salary")
    @admin_required
    def admin_current_salary(employee_id: int):
        try:
            salary = service.current(employee_id)
        except DomainError as e:
            return error_response(e)
        return jsonify(salary_to_dict(salary))

    @app.route("/api/admin/salaries/history/<int:employee_id>", methods=["GET"], endpoint="admin_salary_history")
    @admin_required
    def admin_salary_history(employee_id: int):
        try:
            salaries = service.history(employee_id)
        except DomainError as e:
            return error_response(e)
        return jsonify([salary_to_dict(s) for s in salaries])

    @app.route("/api/admin/salaries/<int:salary_id>", methods=["PUT"], endpoint="admin_update_salary")
    @admin_required
    def admin_update_salary(salary_id: int):
        data = json_body()
        try:
            salary = service.update(
                admin_id=current_employee_id(),
                salary_id=salary_id,
                amount=data.get("amount"),
                effective_date=data.get("effectiveDate"),
                notes=data.get("notes"),
            )
        except DomainError as e:
            return error_response(e)
        return jsonify(salary_to_dict(salary))

    @app.route("/api/admin/salaries/<int:salary_id>", methods=["DELETE"], endpoint="admin_delete_salary")
    @admin_required
    def admin_delete_salary(salary_id: int):
        try:
            service.delete(admin_id=current_employee_id(), salary_id=salary_id)
        except DomainError as e:
            return error_response(e)
        return "", 204

    @app.route("/api/admin/export-salaries", methods=["GET"], endpoint="admin_export_salaries")
    @admin_required
    def admin_export_salaries():
        try:
            csv_text = service.export_csv(optional_int(request.args.get("userId") or request.args.get("employeeId")))
        except DomainError as e:
            return error_response(e)
        return send_csv(csv_text, filename="salaries.csv")
