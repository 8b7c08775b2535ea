from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Any, Mapping, Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import get_zone, parse_iso_date
from ..common.validators import normalize_cpf, require_email, require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import AccessLevel, EmployeeStatus
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from .model import Employee
from .repository import EmployeeRepository

logger = logging.getLogger(__name__)


def _password_matches(password_hash: str, password: str) -> bool:
    try:
        return check_password_hash(password_hash, password or "")
    except ValueError:
        # placeholder hashes like 'CHANGE_ME'
        return False


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    employee_id: int
    full_name: str
    access_level: AccessLevel
    first_login: bool


class AuthService:
    """Use case: authenticate employee (login) and change own password."""

    def __init__(self, employees: EmployeeRepository):
        self._employees = employees

    def _find_login(self, login: str) -> Optional[Employee]:
        login = (login or "").strip()
        employee = self._employees.get_by_username(login)
        if employee:
            return employee
        # CPF also works as login, with or without punctuation
        try:
            return self._employees.get_by_cpf(normalize_cpf(login))
        except ValidationError:
            return None

    def authenticate(self, login: str, password: str) -> SessionUser:
        employee = self._find_login(login)
        if not employee or not employee.is_active:
            raise AuthenticationError("Usuário ou senha inválidos")

        if not _password_matches(employee.password_hash, password):
            raise AuthenticationError("Usuário ou senha inválidos")

        return SessionUser(
            employee_id=employee.employee_id,
            full_name=employee.full_name,
            access_level=employee.access_level,
            first_login=employee.first_login,
        )

    def change_password(self, employee_id: int, *, old_password: str, new_password: str) -> None:
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError("Funcionário não encontrado")

        require_non_empty(old_password, "Senha atual")
        require_min_length(new_password, "Nova senha", MIN_PASSWORD_LENGTH)

        if not _password_matches(employee.password_hash, old_password):
            raise AuthenticationError("Senha atual incorreta")

        self._employees.update_password(
            employee_id,
            password_hash=generate_password_hash(new_password),
            first_login=False,
        )


class EmployeeService:
    """Use case: manage employees (admin)."""

    def __init__(self, employees: EmployeeRepository):
        self._employees = employees

    def get(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError("Funcionário não encontrado")
        return employee

    def list_all(self) -> Sequence[Employee]:
        return self._employees.list_all()

    def list_active(self) -> Sequence[Employee]:
        return self._employees.list_active()

    def _validated_fields(self, data: Mapping[str, Any], *, current: Optional[Employee] = None) -> dict:
        def pick(key: str, default: Any = None) -> Any:
            if key in data and data[key] is not None:
                return data[key]
            if current is not None:
                return getattr(current, key)
            return default

        fields: dict[str, Any] = {
            "full_name": require_non_empty(pick("full_name"), "Nome completo"),
            "cpf": normalize_cpf(pick("cpf")),
            "email": require_email(pick("email")),
            "phone": (pick("phone") or None),
            "username": require_non_empty(pick("username"), "Usuário"),
            "role": require_non_empty(pick("role"), "Cargo"),
            "department": require_non_empty(pick("department"), "Setor"),
        }

        for key, label in (("admission_date", "Data de admissão"), ("birth_date", "Data de nascimento")):
            value = pick(key)
            if value is None:
                raise ValidationError(f"{label} é obrigatório")
            fields[key] = value if isinstance(value, date) else parse_iso_date(str(value))

        try:
            fields["status"] = EmployeeStatus(pick("status", EmployeeStatus.ACTIVE))
            fields["access_level"] = AccessLevel(pick("access_level", AccessLevel.EMPLOYEE))
        except ValueError:
            raise ValidationError("Status ou nível de acesso inválido")

        tz_name = pick("timezone")
        if tz_name:
            get_zone(tz_name)
        fields["timezone"] = tz_name or None
        return fields

    def _ensure_unique(self, *, username: str, cpf: str, employee_id: Optional[int] = None) -> None:
        other = self._employees.get_by_username(username)
        if other and other.employee_id != employee_id:
            raise ValidationError("Nome de usuário já está em uso")
        other = self._employees.get_by_cpf(cpf)
        if other and other.employee_id != employee_id:
            raise ValidationError("CPF já cadastrado")

    def create_employee(self, data: Mapping[str, Any]) -> Employee:
        fields = self._validated_fields(data)
        password = require_min_length(data.get("password") or "", "Senha", MIN_PASSWORD_LENGTH)
        self._ensure_unique(username=fields["username"], cpf=fields["cpf"])

        employee = Employee(
            employee_id=0,
            password_hash=generate_password_hash(password),
            first_login=True,
            **fields,
        )
        employee_id = self._employees.create(employee)
        logger.info("Employee %s created (username=%s)", employee_id, employee.username)
        return replace(employee, employee_id=employee_id)

    def update_employee(self, employee_id: int, data: Mapping[str, Any]) -> Employee:
        current = self.get(employee_id)
        fields = self._validated_fields(data, current=current)
        password = data.get("password")
        if password:
            require_min_length(password, "Senha", MIN_PASSWORD_LENGTH)
        self._ensure_unique(username=fields["username"], cpf=fields["cpf"], employee_id=employee_id)

        updated = replace(current, **fields)
        self._employees.update(updated)

        if password:
            self._employees.update_password(
                employee_id,
                password_hash=generate_password_hash(password),
                first_login=True,
            )
        return updated

    def delete_employee(self, *, current_employee_id: int, employee_id: int) -> None:
        if int(current_employee_id) == int(employee_id):
            raise AuthorizationError("Você não pode excluir a própria conta")

        self.get(employee_id)
        if not self._employees.delete_by_id(employee_id):
            raise ValidationError("Falha ao excluir funcionário")
        logger.info("Employee %s deleted by %s", employee_id, current_employee_id)
