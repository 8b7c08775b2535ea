from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation

from ..core.exceptions import ValidationError

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} é obrigatório")
    return str(value).strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} deve ter pelo menos {min_len} caracteres")
    return value


def require_email(value: str) -> str:
    value = require_non_empty(value, "Email")
    if not _EMAIL_RE.match(value):
        raise ValidationError("Email inválido")
    return value


def normalize_cpf(value: str) -> str:
    """Strip punctuation and validate the two CPF check digits."""
    digits = re.sub(r"\D", "", value or "")
    if len(digits) != 11 or digits == digits[0] * 11:
        raise ValidationError("CPF inválido")

    for pos in (9, 10):
        total = sum(int(digits[i]) * (pos + 1 - i) for i in range(pos))
        check = (total * 10) % 11 % 10
        if check != int(digits[pos]):
            raise ValidationError("CPF inválido")
    return digits


def require_coordinates(latitude, longitude) -> tuple[float, float]:
    try:
        lat = float(latitude)
        lon = float(longitude)
    except (TypeError, ValueError):
        raise ValidationError("Localização inválida")
    if not (-90 <= lat <= 90 and -180 <= lon <= 180):
        raise ValidationError("Localização inválida")
    return lat, lon


def require_amount(value, field_name: str) -> Decimal:
    """Money in reais: ``1500``, ``"1500.00"`` or ``"1500,00"``; must be > 0."""
    if isinstance(value, bool) or value is None or not str(value).strip():
        raise ValidationError(f"{field_name} é obrigatório")
    try:
        amount = Decimal(str(value).strip().replace(",", "."))
    except InvalidOperation:
        raise ValidationError(f"{field_name} inválido: {value!r}")
    if not amount.is_finite() or amount <= 0:
        raise ValidationError(f"{field_name} deve ser maior que zero")
    return amount
