from __future__ import annotations

import io

import pandas as pd
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter

from ..common.formatting import format_date, format_hours
from .service import DAY_COLUMNS, EmployeeReport, GeneralReport, day_rows

SHEET_NAME = "Relatório de Horas"
EMPLOYEE_COLUMNS = ["Nome", "Cargo", "Setor", "Total de Horas", "Dias Trabalhados", "Média Diária"]

_HEADER_FONT = Font(bold=True)
_HEADER_FILL = PatternFill(fill_type="solid", fgColor="FFD3D3D3")


def _style_sheet(ws, *, header_row: int) -> None:
    for cell in ws[header_row]:
        if cell.value is not None:
            cell.font = _HEADER_FONT
            cell.fill = _HEADER_FILL
    ws["A1"].font = Font(bold=True, size=14)

    for idx, column in enumerate(ws.columns, start=1):
        width = max((len(str(c.value)) for c in column if c.value is not None), default=0)
        ws.column_dimensions[get_column_letter(idx)].width = width + 2


def _write(info: list[list], table: pd.DataFrame) -> bytes:
    out = io.BytesIO()
    startrow = len(info) + 1
    with pd.ExcelWriter(out, engine="openpyxl") as writer:
        pd.DataFrame(info).to_excel(writer, index=False, header=False, sheet_name=SHEET_NAME)
        table.to_excel(writer, index=False, sheet_name=SHEET_NAME, startrow=startrow)
        # openpyxl rows are 1-based; the header lands right after the blank spacer row
        _style_sheet(writer.sheets[SHEET_NAME], header_row=startrow + 1)
    return out.getvalue()


def employee_report_xlsx(data: EmployeeReport) -> bytes:
    report = data.report
    info = [
        ["Relatório de Horas Trabalhadas", ""],
        ["Período:", f"{format_date(report.start_date)} a {format_date(report.end_date)}"],
        ["Funcionário:", data.employee.full_name],
        ["Cargo:", data.employee.role],
        ["Setor:", data.employee.department],
        ["Total de Horas:", format_hours(report.total_hours)],
        ["Dias Trabalhados:", report.days_worked],
        ["Média Diária:", format_hours(report.average_daily_hours)],
    ]
    table = pd.DataFrame(day_rows(report, data.tz_name), columns=DAY_COLUMNS)
    return _write(info, table)


def general_report_xlsx(data: GeneralReport) -> bytes:
    info = [
        ["Relatório de Horas Trabalhadas", ""],
        ["Período:", f"{format_date(data.start_date)} a {format_date(data.end_date)}"],
        ["Funcionários:", "Todos"],
        ["Total de Funcionários:", len(data.rows)],
        ["Total de Horas:", format_hours(data.total_hours)],
        ["Média por Funcionário:", format_hours(data.average_hours_per_employee)],
    ]
    table = pd.DataFrame(
        [
            [
                r.full_name,
                r.role,
                r.department,
                format_hours(r.total_hours),
                r.days_worked,
                format_hours(r.average_daily_hours),
            ]
            for r in data.rows
        ],
        columns=EMPLOYEE_COLUMNS,
    )
    return _write(info, table)
