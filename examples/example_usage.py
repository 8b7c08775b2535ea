"""Exemplo: folha de pagamento pela camada de serviço (sem Flask).

Uso: python -m examples.example_usage 2025-01-01 2025-01-31 25.50
"""

import importlib
import sys

from config import get_settings_module

from src.ponto_eletronico.ponto_eletronico.common.datetime_utils import parse_iso_date
from src.ponto_eletronico.ponto_eletronico.common.formatting import format_brl, format_hours
from src.ponto_eletronico.ponto_eletronico.container import build_container


def main():
    start, end, rate = sys.argv[1:4]
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, tz_name=getattr(settings, "TIMEZONE", None))

    for calc in container.payroll_service.calculate_all(rate, parse_iso_date(start), parse_iso_date(end)):
        print(f"{calc.employee_name:<30} {format_hours(calc.total_hours):>10} {format_brl(calc.total_payment):>14}")


if __name__ == "__main__":
    main()
