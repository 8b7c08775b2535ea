from datetime import date

import pytest
from werkzeug.security import generate_password_hash

from tests.fakes import (
    InMemoryAudit,
    InMemoryEmployees,
    InMemorySalaries,
    InMemoryTimeRecords,
    InMemoryTransactions,
    make_employee,
    workday,
)

from src.ponto_eletronico.ponto_eletronico.container import build_services
from src.ponto_eletronico.ponto_eletronico.core.enums import AccessLevel
from src.ponto_eletronico.ponto_eletronico.main import create_app
from src.ponto_eletronico.ponto_eletronico.reports.excel_export import SHEET_NAME

GPS = {"latitude": -23.55, "longitude": -46.63, "photo": "fotos/abc.jpg"}
PERIOD = {"startDate": "2025-01-06", "endDate": "2025-01-10"}


@pytest.fixture
def repos():
    employees = InMemoryEmployees(
        make_employee(1, full_name="Ana"),
        make_employee(
            9,
            full_name="Administrador",
            username="admin",
            password_hash=generate_password_hash("admin123"),
            access_level=AccessLevel.ADMIN,
        ),
    )
    records = InMemoryTimeRecords(*workday(1, 1, date(2025, 1, 6)))
    return employees, records, InMemoryAudit()


@pytest.fixture
def client(repos):
    employees, records, audit = repos
    container = build_services(
        employees_repo=employees,
        time_records_repo=records,
        audit_repo=audit,
        salaries_repo=InMemorySalaries(),
        transactions_repo=InMemoryTransactions(),
        tz_name="America/Sao_Paulo",
    )
    app = create_app(container=container, settings_module="config.testing")
    return app.test_client()


def _login(client, username, password):
    resp = client.post("/api/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()


def test_health(client):
    assert client.get("/api/health").get_json() == {"status": "ok"}


def test_login_failure_is_401(client):
    resp = client.post("/api/login", json={"username": "func1", "password": "nope"})
    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_protected_routes_need_session(client):
    assert client.get("/api/me").status_code == 401
    assert client.post("/api/admin/payroll", json={}).status_code == 401


def test_employee_cannot_reach_admin_routes(client):
    _login(client, "func1", "secret1")

    assert client.get("/api/admin/employees").status_code == 403
    assert client.get("/api/reports/employee/9").status_code == 403


def test_clock_in_out_flow(client, repos):
    _login(client, "func1", "secret1")

    resp = client.post("/api/time-records", json={"type": "in", **GPS})
    assert resp.status_code == 201
    assert client.get("/api/time-records/status").get_json() == {"status": "in"}

    again = client.post("/api/time-records", json={"type": "in", **GPS})
    assert again.status_code == 400

    assert client.post("/api/time-records", json={"type": "out", **GPS}).status_code == 201
    assert client.get("/api/time-records/status").get_json() == {"status": "out"}


def test_own_report_json(client):
    _login(client, "func1", "secret1")

    resp = client.get("/api/reports/employee/1", query_string=PERIOD)

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["total_hours"] == 8.0
    assert body["rows"][0]["Entrada"] == "08:00"


def test_report_with_inverted_period_is_400(client):
    _login(client, "func1", "secret1")

    resp = client.get("/api/reports/employee/1", query_string={"startDate": "2025-01-10", "endDate": "2025-01-06"})

    assert resp.status_code == 400


def test_admin_payroll(client):
    _login(client, "admin", "admin123")

    resp = client.post("/api/admin/payroll", json={"employeeId": 1, "hourlyRate": "25,50", **PERIOD})

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["total_hours"] == 8.0
    assert body["total_payment"] == 204.0
    assert body["display"]["total_payment"] == "R$ 204,00"
    assert len(body["records"]) == 2


def test_admin_payroll_rejects_bad_rate(client):
    _login(client, "admin", "admin123")

    resp = client.post("/api/admin/payroll", json={"employeeId": 1, "hourlyRate": 0, **PERIOD})

    assert resp.status_code == 400


def test_admin_payroll_all_and_pdf(client):
    _login(client, "admin", "admin123")

    resp = client.post("/api/admin/payroll/all", json={"hourlyRate": 25.5, **PERIOD})
    assert resp.status_code == 200
    assert {c["employee_name"]: c["total_payment"] for c in resp.get_json()} == {"Ana": 204.0, "Administrador": 0.0}

    pdf = client.get("/api/admin/payroll/export.pdf", query_string={"hourlyRate": "25.50", **PERIOD})
    assert pdf.status_code == 200
    assert pdf.mimetype == "application/pdf"
    assert pdf.data.startswith(b"%PDF")


def test_admin_corrections_are_audited(client, repos):
    _, records, audit = repos
    _login(client, "admin", "admin123")

    resp = client.post(
        "/api/admin/time-records",
        json={"employeeId": 1, "type": "in", "timestamp": "2025-01-07T08:00", "justification": "Esqueceu"},
    )
    assert resp.status_code == 201
    record_id = resp.get_json()["id"]
    assert records.by_id[record_id].corrected

    missing = client.post("/api/admin/time-records", json={"employeeId": 1, "type": "in", "timestamp": "2025-01-07T08:00"})
    assert missing.status_code == 400

    logs = client.get(f"/api/admin/audit-logs/time_record/{record_id}").get_json()
    assert [e["action"] for e in logs] == ["create"]


def test_admin_csv_export(client):
    _login(client, "admin", "admin123")

    resp = client.get("/api/admin/export-time-records", query_string=PERIOD)

    assert resp.status_code == 200
    text = resp.data.decode("utf-8-sig")
    assert text.splitlines()[0].startswith("ID,Funcionário,Data,Hora,Tipo")


def test_admin_general_report_xlsx(client):
    import io

    from openpyxl import load_workbook

    _login(client, "admin", "admin123")

    resp = client.get("/api/admin/reports/general.xlsx", query_string=PERIOD)

    assert resp.status_code == 200
    assert SHEET_NAME in load_workbook(io.BytesIO(resp.data)).sheetnames


def test_admin_cannot_delete_self(client):
    _login(client, "admin", "admin123")

    assert client.delete("/api/admin/employees/9").status_code == 403


def test_session_lifetime_comes_from_settings(repos):
    from datetime import timedelta

    employees, records, audit = repos
    container = build_services(
        employees_repo=employees,
        time_records_repo=records,
        audit_repo=audit,
        salaries_repo=InMemorySalaries(),
        transactions_repo=InMemoryTransactions(),
    )
    app = create_app(container=container, settings_module="config.testing")

    assert app.permanent_session_lifetime == timedelta(days=1)


def test_admin_salary_routes(client, repos):
    _, _, audit = repos
    _login(client, "admin", "admin123")

    resp = client.post(
        "/api/admin/salaries",
        json={"userId": 1, "amount": "3500.00", "effectiveDate": "2025-01-01", "notes": "contratação"},
    )
    assert resp.status_code == 201, resp.get_json()
    salary_id = resp.get_json()["id"]
    assert resp.get_json()["display"]["amount"] == "R$ 3.500,00"

    current = client.get("/api/admin/salaries/current/1").get_json()
    assert (current["id"], current["amount"]) == (salary_id, 3500.0)

    resp = client.put(f"/api/admin/salaries/{salary_id}", json={"amount": "3700"})
    assert resp.get_json()["amount"] == 3700.0
    assert [e["amount"] for e in client.get("/api/admin/salaries/history/1").get_json()] == [3700.0]

    trail = client.get(f"/api/admin/audit-logs/salary/{salary_id}").get_json()
    assert sorted(e["action"] for e in trail) == ["create", "update"]

    csv_resp = client.get("/api/admin/export-salaries?userId=1")
    assert csv_resp.mimetype == "text/csv"
    assert "3700.00" in csv_resp.data.decode("utf-8-sig")

    assert client.delete(f"/api/admin/salaries/{salary_id}").status_code == 204
    assert client.get("/api/admin/salaries/current/1").status_code == 404
    assert [e.action.value for e in audit.entries if e.entity_type == "salary"] == ["create", "update", "delete"]


def test_admin_salary_rejects_bad_amount(client):
    _login(client, "admin", "admin123")

    resp = client.post("/api/admin/salaries", json={"userId": 1, "amount": "-1", "effectiveDate": "2025-01-01"})

    assert resp.status_code == 400


def test_admin_transaction_routes(client):
    _login(client, "admin", "admin123")

    for kind, amount, day in (("bonus", "500", "2025-01-10"), ("deduction", "120", "2025-01-20")):
        resp = client.post(
            "/api/admin/transactions",
            json={"userId": 1, "type": kind, "amount": amount, "description": f"Lançamento {kind}", "transactionDate": day},
        )
        assert resp.status_code == 201, resp.get_json()

    listed = client.get("/api/admin/transactions?userId=1&startDate=2025-01-01&endDate=2025-01-31").get_json()
    assert [t["type"] for t in listed] == ["deduction", "bonus"]

    summary = client.get("/api/admin/transactions/summary?userId=1").get_json()
    assert (summary["credits"], summary["deductions"], summary["net"]) == (500.0, 120.0, 380.0)

    bonus_id = listed[1]["id"]
    resp = client.put(f"/api/admin/transactions/{bonus_id}", json={"amount": "650"})
    assert resp.get_json()["amount"] == 650.0

    csv_text = client.get("/api/admin/export-transactions?type=deduction").data.decode("utf-8-sig")
    assert "-120.00" in csv_text
    assert "650.00" not in csv_text

    assert client.delete(f"/api/admin/transactions/{bonus_id}").status_code == 204
    assert client.delete(f"/api/admin/transactions/{bonus_id}").status_code == 404


def test_transaction_routes_are_admin_only(client):
    _login(client, "func1", "secret1")

    assert client.get("/api/admin/transactions").status_code == 403
    assert client.get("/api/admin/salaries/current/1").status_code == 403
