"""Flask helpers shared by the feature controllers."""

from __future__ import annotations

import io
from datetime import date, timedelta
from functools import wraps
from typing import Optional

from flask import current_app, jsonify, request, send_file, session

from ..core.enums import AccessLevel
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    NotFoundError,
    ValidationError,
)
from .datetime_utils import parse_iso_date, today_local

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
)


def error_response(exc: DomainError):
    status = next((code for cls, code in _STATUS_BY_ERROR if isinstance(exc, cls)), 400)
    return jsonify({"success": False, "message": str(exc)}), status


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "employee_id" not in session:
            return jsonify({"success": False, "message": "Não autenticado"}), 401
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "employee_id" not in session:
            return jsonify({"success": False, "message": "Não autenticado"}), 401
        if session.get("access_level") != AccessLevel.ADMIN.value:
            return jsonify({"success": False, "message": "Acesso negado"}), 403
        return view(*args, **kwargs)

    return wrapper


def current_employee_id() -> int:
    return int(session["employee_id"])


def is_admin() -> bool:
    return session.get("access_level") == AccessLevel.ADMIN.value


def json_body() -> dict:
    return request.get_json(silent=True) or {}


def optional_int(value) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Número inválido: {value!r}")


def parse_period(source, *, default_days: int, tz_name: Optional[str] = None) -> tuple[date, date]:
    """Read ``startDate``/``endDate`` (YYYY-MM-DD) from query args or a JSON body."""
    today = today_local(tz_name)
    start_s = source.get("startDate") or source.get("start")
    end_s = source.get("endDate") or source.get("end")
    end = parse_iso_date(end_s) if end_s else today
    start = parse_iso_date(start_s) if start_s else end - timedelta(days=default_days)
    return start, end


def send_bytes(payload: bytes, *, mimetype: str, filename: str):
    return send_file(io.BytesIO(payload), mimetype=mimetype, as_attachment=True, download_name=filename)


XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
PDF_MIMETYPE = "application/pdf"


def send_csv(text: str, *, filename: str):
    # BOM so Excel opens accented columns correctly
    return current_app.response_class(
        text.encode("utf-8-sig"),
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
