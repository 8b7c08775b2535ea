from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.formatting import format_brl, format_hours
from ..common.web import PDF_MIMETYPE, admin_required, error_response, json_body, optional_int, parse_period, send_bytes
from ..container import Container
from ..core.constants import DEFAULT_REPORT_DAYS
from ..core.exceptions import DomainError, ValidationError
from ..reports.pdf_export import payroll_pdf
from ..time_records.service import record_to_dict
from .model import PayrollCalculation


def calculation_to_dict(calc: PayrollCalculation, *, include_records: bool = False) -> dict:
    out = {
        "employee_id": calc.employee_id,
        "employee_name": calc.employee_name,
        "period": {"start": calc.start_date.isoformat(), "end": calc.end_date.isoformat()},
        "total_hours": float(calc.total_hours),
        "hourly_rate": float(calc.hourly_rate),
        "total_payment": float(calc.total_payment),
        "display": {
            "total_hours": format_hours(calc.total_hours),
            "hourly_rate": format_brl(calc.hourly_rate),
            "total_payment": format_brl(calc.total_payment),
        },
        "records_count": len(calc.source_records),
        "error": calc.error,
    }
    if include_records:
        out["records"] = [record_to_dict(r) for r in calc.source_records]
    return out


def register(app: Flask, container: Container) -> None:
    tz_name = app.config.get("TIMEZONE")

    @app.route("/api/admin/payroll", methods=["POST"], endpoint="admin_payroll")
    @admin_required
    def admin_payroll():
        data = json_body()
        try:
            employee_id = optional_int(data.get("employeeId") or data.get("userId"))
            if employee_id is None:
                raise ValidationError("Selecione um funcionário")
            start, end = parse_period(data, default_days=DEFAULT_REPORT_DAYS, tz_name=tz_name)
            calc = container.payroll_service.calculate(employee_id, data.get("hourlyRate"), start, end)
        except DomainError as e:
            return error_response(e)
        return jsonify(calculation_to_dict(calc, include_records=True))

    @app.route("/api/admin/payroll/all", methods=["POST"], endpoint="admin_payroll_all")
    @admin_required
    def admin_payroll_all():
        data = json_body()
        try:
            start, end = parse_period(data, default_days=DEFAULT_REPORT_DAYS, tz_name=tz_name)
            calcs = container.payroll_service.calculate_all(data.get("hourlyRate"), start, end)
        except DomainError as e:
            return error_response(e)
        return jsonify([calculation_to_dict(c) for c in calcs])

    @app.route("/api/admin/payroll/export.pdf", methods=["GET"], endpoint="admin_payroll_pdf")
    @admin_required
    def admin_payroll_pdf():
        args = request.args
        try:
            start, end = parse_period(args, default_days=DEFAULT_REPORT_DAYS, tz_name=tz_name)
            employee_id = optional_int(args.get("employeeId") or args.get("userId"))
            if employee_id is None:
                calcs = container.payroll_service.calculate_all(args.get("hourlyRate"), start, end)
            else:
                calcs = [container.payroll_service.calculate(employee_id, args.get("hourlyRate"), start, end)]
        except DomainError as e:
            return error_response(e)

        filename = f"pagamento_{start.strftime('%Y%m%d')}_{end.strftime('%Y%m%d')}.pdf"
        return send_bytes(payroll_pdf(calcs, tz_name=tz_name), mimetype=PDF_MIMETYPE, filename=filename)
