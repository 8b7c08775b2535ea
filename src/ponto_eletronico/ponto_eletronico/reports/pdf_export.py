from __future__ import annotations

import io
from typing import Optional, Sequence

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ..common.datetime_utils import to_local
from ..common.formatting import format_brl, format_date, format_hours
from ..payroll.model import PayrollCalculation
from .excel_export import EMPLOYEE_COLUMNS
from .service import DAY_COLUMNS, EmployeeReport, GeneralReport, day_rows

_TABLE_STYLE = TableStyle(
    [
        ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
    ]
)


def _build(story: list) -> bytes:
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A4, leftMargin=50, rightMargin=50, topMargin=50, bottomMargin=50)
    doc.build(story)
    return buffer.getvalue()


def _table(header: Sequence[str], rows: Sequence[Sequence], col_widths: Optional[Sequence[float]] = None) -> Table:
    table = Table([list(header), *[list(r) for r in rows]], colWidths=col_widths, repeatRows=1)
    table.setStyle(_TABLE_STYLE)
    return table


def employee_report_pdf(data: EmployeeReport) -> bytes:
    styles = getSampleStyleSheet()
    report = data.report
    story = [
        Paragraph("Relatório de Horas Trabalhadas", styles["Title"]),
        Paragraph(f"Período: {format_date(report.start_date)} a {format_date(report.end_date)}", styles["Normal"]),
        Paragraph(f"Funcionário: {data.employee.full_name}", styles["Normal"]),
        Paragraph(f"Cargo: {data.employee.role}", styles["Normal"]),
        Paragraph(f"Setor: {data.employee.department}", styles["Normal"]),
        Spacer(1, 12),
        Paragraph("Resumo", styles["Heading2"]),
        Paragraph(f"Total de Horas: {format_hours(report.total_hours)}", styles["Normal"]),
        Paragraph(f"Dias Trabalhados: {report.days_worked}", styles["Normal"]),
        Paragraph(f"Média Diária: {format_hours(report.average_daily_hours)}", styles["Normal"]),
        Spacer(1, 12),
        Paragraph("Detalhamento por Dia", styles["Heading2"]),
    ]
    rows = [[row[c] for c in DAY_COLUMNS] for row in day_rows(report, data.tz_name)]
    story.append(_table(DAY_COLUMNS, rows, [1.0 * inch, 0.9 * inch, 0.9 * inch, 1.1 * inch, 2.6 * inch]))
    return _build(story)


def general_report_pdf(data: GeneralReport) -> bytes:
    styles = getSampleStyleSheet()
    story = [
        Paragraph("Relatório de Horas Trabalhadas", styles["Title"]),
        Paragraph(f"Período: {format_date(data.start_date)} a {format_date(data.end_date)}", styles["Normal"]),
        Paragraph("Funcionários: Todos", styles["Normal"]),
        Spacer(1, 12),
        Paragraph("Resumo Geral", styles["Heading2"]),
        Paragraph(f"Total de Funcionários: {len(data.rows)}", styles["Normal"]),
        Paragraph(f"Total de Horas: {format_hours(data.total_hours)}", styles["Normal"]),
        Paragraph(f"Média por Funcionário: {format_hours(data.average_hours_per_employee)}", styles["Normal"]),
        Spacer(1, 12),
        Paragraph("Detalhamento por Funcionário", styles["Heading2"]),
    ]
    rows = [
        [
            r.full_name,
            r.role,
            r.department,
            format_hours(r.total_hours),
            r.days_worked,
            format_hours(r.average_daily_hours),
        ]
        for r in data.rows
    ]
    story.append(_table(EMPLOYEE_COLUMNS, rows))
    return _build(story)


def payroll_record_rows(calc: PayrollCalculation, *, tz_name: Optional[str] = None) -> list[list[str]]:
    """Source records in the employee's own zone, falling back to ``tz_name``."""
    zone = calc.tz_name or tz_name
    rows = []
    for r in calc.source_records:
        local = to_local(r.timestamp, zone)
        rows.append([local.strftime("%d/%m/%Y"), local.strftime("%H:%M"), r.type.label, r.justification or "-"])
    return rows


def payroll_pdf(calculations: Sequence[PayrollCalculation], *, tz_name: Optional[str] = None) -> bytes:
    """Payment summary; a single calculation also lists its source records."""
    styles = getSampleStyleSheet()
    story: list = [Paragraph("Relatório de Pagamento", styles["Title"])]

    if calculations:
        first = calculations[0]
        story.append(
            Paragraph(f"Período: {format_date(first.start_date)} a {format_date(first.end_date)}", styles["Normal"])
        )
        story.append(Paragraph(f"Valor por Hora: {format_brl(first.hourly_rate)}", styles["Normal"]))
    story.append(Spacer(1, 12))

    summary = [
        [
            c.employee_name,
            format_hours(c.total_hours),
            format_brl(c.hourly_rate),
            format_brl(c.total_payment),
            c.error or "",
        ]
        for c in calculations
    ]
    story.append(_table(["Funcionário", "Total de Horas", "Valor por Hora", "Valor Total", "Observações"], summary))

    if len(calculations) == 1:
        story.append(Spacer(1, 12))
        story.append(Paragraph("Registros de Ponto", styles["Heading2"]))
        story.append(_table(["Data", "Hora", "Tipo", "Justificativa"], payroll_record_rows(calculations[0], tz_name=tz_name)))

    return _build(story)
