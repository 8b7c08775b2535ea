from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.formatting import json_amount
from ..common.web import (
    PDF_MIMETYPE,
    XLSX_MIMETYPE,
    admin_required,
    current_employee_id,
    error_response,
    is_admin,
    login_required,
    parse_period,
    send_bytes,
)
from ..container import Container
from ..core.constants import DEFAULT_REPORT_DAYS
from ..core.exceptions import AuthorizationError, DomainError
from .excel_export import employee_report_xlsx, general_report_xlsx
from .pdf_export import employee_report_pdf, general_report_pdf
from .service import report_to_dict


def register(app: Flask, container: Container) -> None:
    tz_name = app.config.get("TIMEZONE")

    def _employee_report(employee_id: int):
        # Employees may only read their own report.
        if not is_admin() and employee_id != current_employee_id():
            raise AuthorizationError("Acesso negado")
        start, end = parse_period(request.args, default_days=DEFAULT_REPORT_DAYS, tz_name=tz_name)
        return container.report_service.employee_report(employee_id, start=start, end=end)

    def _general_report():
        start, end = parse_period(request.args, default_days=DEFAULT_REPORT_DAYS, tz_name=tz_name)
        return container.report_service.general_report(start=start, end=end)

    def _suffix(start, end) -> str:
        return f"{start.strftime('%Y%m%d')}_{end.strftime('%Y%m%d')}"

    @app.route("/api/reports/employee/<int:employee_id>", methods=["GET"], endpoint="employee_report")
    @login_required
    def employee_report(employee_id: int):
        try:
            data = _employee_report(employee_id)
        except DomainError as e:
            return error_response(e)
        return jsonify(report_to_dict(data))

    @app.route("/api/reports/employee/<int:employee_id>.xlsx", methods=["GET"], endpoint="employee_report_xlsx")
    @login_required
    def employee_report_excel(employee_id: int):
        try:
            data = _employee_report(employee_id)
        except DomainError as e:
            return error_response(e)
        filename = f"relatorio_{employee_id}_{_suffix(data.report.start_date, data.report.end_date)}.xlsx"
        return send_bytes(employee_report_xlsx(data), mimetype=XLSX_MIMETYPE, filename=filename)

    @app.route("/api/reports/employee/<int:employee_id>.pdf", methods=["GET"], endpoint="employee_report_pdf")
    @login_required
    def employee_report_pdf_view(employee_id: int):
        try:
            data = _employee_report(employee_id)
        except DomainError as e:
            return error_response(e)
        filename = f"relatorio_{employee_id}_{_suffix(data.report.start_date, data.report.end_date)}.pdf"
        return send_bytes(employee_report_pdf(data), mimetype=PDF_MIMETYPE, filename=filename)

    @app.route("/api/admin/reports/general", methods=["GET"], endpoint="general_report")
    @admin_required
    def general_report():
        try:
            data = _general_report()
        except DomainError as e:
            return error_response(e)
        return jsonify(
            {
                "period": {"start": data.start_date.isoformat(), "end": data.end_date.isoformat()},
                "total_hours": json_amount(data.total_hours),
                "average_hours_per_employee": json_amount(data.average_hours_per_employee),
                "employees": [
                    {
                        "id": r.employee_id,
                        "full_name": r.full_name,
                        "role": r.role,
                        "department": r.department,
                        "total_hours": json_amount(r.total_hours),
                        "days_worked": r.days_worked,
                        "average_daily_hours": json_amount(r.average_daily_hours),
                        "incomplete_days": r.incomplete_days,
                    }
                    for r in data.rows
                ],
            }
        )

    @app.route("/api/admin/reports/general.xlsx", methods=["GET"], endpoint="general_report_xlsx")
    @admin_required
    def general_report_excel():
        try:
            data = _general_report()
        except DomainError as e:
            return error_response(e)
        filename = f"relatorio_geral_{_suffix(data.start_date, data.end_date)}.xlsx"
        return send_bytes(general_report_xlsx(data), mimetype=XLSX_MIMETYPE, filename=filename)

    @app.route("/api/admin/reports/general.pdf", methods=["GET"], endpoint="general_report_pdf")
    @admin_required
    def general_report_pdf_view():
        try:
            data = _general_report()
        except DomainError as e:
            return error_response(e)
        filename = f"relatorio_geral_{_suffix(data.start_date, data.end_date)}.pdf"
        return send_bytes(general_report_pdf(data), mimetype=PDF_MIMETYPE, filename=filename)

    @app.route("/api/admin/reports/departments", methods=["GET"], endpoint="department_report")
    @admin_required
    def department_report():
        try:
            start, end = parse_period(request.args, default_days=DEFAULT_REPORT_DAYS, tz_name=tz_name)
            stats = container.report_service.department_statistics(start=start, end=end)
        except DomainError as e:
            return error_response(e)
        return jsonify(
            {
                "period": {"start": start.isoformat(), "end": end.isoformat()},
                "departments": [
                    {
                        "department": s.department,
                        "employees": s.employees,
                        "total_hours": json_amount(s.total_hours),
                        "days_worked": s.days_worked,
                        "average_hours_per_employee": json_amount(s.average_hours_per_employee),
                    }
                    for s in stats
                ],
            }
        )
