from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .employees.service import AuthService, EmployeeService
from .payroll.service import PayrollService
from .reports.service import ReportService
from .salaries.mysql_salary_repository import MySQLSalaryRepository
from .salaries.repository import SalaryRepository
from .salaries.service import SalaryService
from .time_records.mysql_audit_repository import MySQLAuditLogRepository
from .time_records.mysql_time_record_repository import MySQLTimeRecordRepository
from .time_records.repository import AuditLogRepository, TimeRecordRepository
from .time_records.service import TimeRecordService
from .transactions.mysql_transaction_repository import MySQLTransactionRepository
from .transactions.repository import TransactionRepository
from .transactions.service import TransactionService


@dataclass(frozen=True)
class Container:
    employees_repo: EmployeeRepository
    time_records_repo: TimeRecordRepository
    audit_repo: AuditLogRepository
    salaries_repo: SalaryRepository
    transactions_repo: TransactionRepository

    auth_service: AuthService
    employee_service: EmployeeService
    time_record_service: TimeRecordService
    report_service: ReportService
    payroll_service: PayrollService
    salary_service: SalaryService
    transaction_service: TransactionService

    conn: Optional[DatabaseConnection] = None


def build_services(
    *,
    employees_repo: EmployeeRepository,
    time_records_repo: TimeRecordRepository,
    audit_repo: AuditLogRepository,
    salaries_repo: SalaryRepository,
    transactions_repo: TransactionRepository,
    tz_name: Optional[str] = None,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services on top of any repository implementation (MySQL or in-memory)."""
    return Container(
        employees_repo=employees_repo,
        time_records_repo=time_records_repo,
        audit_repo=audit_repo,
        salaries_repo=salaries_repo,
        transactions_repo=transactions_repo,
        auth_service=AuthService(employees_repo),
        employee_service=EmployeeService(employees_repo),
        time_record_service=TimeRecordService(time_records_repo, employees_repo, audit_repo, tz_name=tz_name),
        report_service=ReportService(time_records_repo, employees_repo, tz_name=tz_name),
        payroll_service=PayrollService(time_records_repo, employees_repo, tz_name=tz_name),
        salary_service=SalaryService(salaries_repo, employees_repo, audit_repo, tz_name=tz_name),
        transaction_service=TransactionService(transactions_repo, employees_repo, audit_repo, tz_name=tz_name),
        conn=conn,
    )


def build_container(*, db_config: dict, tz_name: Optional[str] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return build_services(
        employees_repo=MySQLEmployeeRepository(conn),
        time_records_repo=MySQLTimeRecordRepository(conn),
        audit_repo=MySQLAuditLogRepository(conn),
        salaries_repo=MySQLSalaryRepository(conn),
        transactions_repo=MySQLTransactionRepository(conn),
        tz_name=tz_name,
        conn=conn,
    )
