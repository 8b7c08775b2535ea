from __future__ import annotations

from flask import Flask, jsonify, session

from ..common.web import admin_required, current_employee_id, error_response, json_body, login_required
from ..container import Container
from ..core.exceptions import DomainError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify({"status": "ok"})

    @app.route("/api/login", methods=["POST"], endpoint="login")
    def login():
        data = json_body()
        try:
            s_user = container.auth_service.authenticate(data.get("username", ""), data.get("password", ""))
        except DomainError as e:
            return error_response(e)

        session.clear()
        session.permanent = bool(data.get("remember"))

        session["employee_id"] = s_user.employee_id
        session["name"] = s_user.full_name
        session["access_level"] = s_user.access_level.value

        return jsonify(
            {
                "success": True,
                "employee_id": s_user.employee_id,
                "full_name": s_user.full_name,
                "access_level": s_user.access_level.value,
                "first_login": s_user.first_login,
            }
        )

    @app.route("/api/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return jsonify({"success": True, "message": "Sessão encerrada"})

    @app.route("/api/me", methods=["GET"], endpoint="me")
    @login_required
    def me():
        try:
            employee = container.employee_service.get(current_employee_id())
        except DomainError as e:
            return error_response(e)
        return jsonify(employee.public_dict())

    @app.route("/api/me/password", methods=["POST"], endpoint="change_password")
    @login_required
    def change_password():
        data = json_body()
        try:
            container.auth_service.change_password(
                current_employee_id(),
                old_password=data.get("oldPassword", ""),
                new_password=data.get("newPassword", ""),
            )
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "message": "Senha alterada com sucesso"})

    @app.route("/api/admin/employees", methods=["GET"], endpoint="admin_list_employees")
    @admin_required
    def admin_list_employees():
        return jsonify([e.public_dict() for e in container.employee_service.list_all()])

    @app.route("/api/admin/employees", methods=["POST"], endpoint="admin_create_employee")
    @admin_required
    def admin_create_employee():
        try:
            employee = container.employee_service.create_employee(json_body())
        except DomainError as e:
            return error_response(e)
        return jsonify(employee.public_dict()), 201

    @app.route("/api/admin/employees/<int:employee_id>", methods=["GET"], endpoint="admin_get_employee")
    @admin_required
    def admin_get_employee(employee_id: int):
        try:
            employee = container.employee_service.get(employee_id)
        except DomainError as e:
            return error_response(e)
        return jsonify(employee.public_dict())

    @app.route("/api/admin/employees/<int:employee_id>", methods=["PUT"], endpoint="admin_update_employee")
    @admin_required
    def admin_update_employee(employee_id: int):
        try:
            employee = container.employee_service.update_employee(employee_id, json_body())
        except DomainError as e:
            return error_response(e)
        return jsonify(employee.public_dict())

    @app.route("/api/admin/employees/<int:employee_id>", methods=["DELETE"], endpoint="admin_delete_employee")
    @admin_required
    def admin_delete_employee(employee_id: int):
        try:
            container.employee_service.delete_employee(
                current_employee_id=current_employee_id(),
                employee_id=employee_id,
            )
        except DomainError as e:
            return error_response(e)
        return "", 204
