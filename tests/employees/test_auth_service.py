import pytest
from werkzeug.security import check_password_hash

from tests.fakes import InMemoryEmployees, make_employee

from src.ponto_eletronico.ponto_eletronico.core.enums import AccessLevel, EmployeeStatus
from src.ponto_eletronico.ponto_eletronico.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from src.ponto_eletronico.ponto_eletronico.employees.service import AuthService, EmployeeService


def test_login_with_username_or_cpf():
    svc = AuthService(InMemoryEmployees(make_employee(1)))

    assert svc.authenticate("func1", "secret1").employee_id == 1
    assert svc.authenticate("529.982.247-25", "secret1").access_level == AccessLevel.EMPLOYEE


def test_login_rejects_wrong_password_and_inactive():
    svc = AuthService(InMemoryEmployees(make_employee(1), make_employee(2, status=EmployeeStatus.INACTIVE)))

    with pytest.raises(AuthenticationError):
        svc.authenticate("func1", "wrong")
    with pytest.raises(AuthenticationError):
        svc.authenticate("func2", "secret1")
    with pytest.raises(AuthenticationError):
        svc.authenticate("nobody", "secret1")


def test_placeholder_hash_never_matches():
    svc = AuthService(InMemoryEmployees(make_employee(1, password_hash="CHANGE_ME")))

    with pytest.raises(AuthenticationError):
        svc.authenticate("func1", "CHANGE_ME")


def test_change_password_clears_first_login():
    repo = InMemoryEmployees(make_employee(1, first_login=True))
    svc = AuthService(repo)

    with pytest.raises(ValidationError):
        svc.change_password(1, old_password="secret1", new_password="123")
    with pytest.raises(AuthenticationError):
        svc.change_password(1, old_password="wrong", new_password="novasenha")

    svc.change_password(1, old_password="secret1", new_password="novasenha")

    assert check_password_hash(repo.by_id[1].password_hash, "novasenha")
    assert repo.by_id[1].first_login is False


NEW_EMPLOYEE = {
    "full_name": "Maria Souza",
    "cpf": "529.982.247-25",
    "email": "maria@empresa.com.br",
    "username": "maria",
    "password": "segredo",
    "role": "Analista",
    "department": "Financeiro",
    "admission_date": "2024-03-01",
    "birth_date": "1992-07-15",
}


def test_create_employee_validates_and_normalizes():
    repo = InMemoryEmployees()
    svc = EmployeeService(repo)

    employee = svc.create_employee(NEW_EMPLOYEE)

    assert employee.employee_id == 1
    assert employee.cpf == "52998224725"
    assert employee.first_login
    assert repo.by_id[1].username == "maria"


@pytest.mark.parametrize(
    "override",
    [
        {"cpf": "111.111.111-11"},
        {"email": "maria"},
        {"password": "123"},
        {"full_name": ""},
        {"admission_date": "01/03/2024"},
        {"timezone": "Nowhere/City"},
    ],
)
def test_create_employee_rejects_bad_fields(override):
    svc = EmployeeService(InMemoryEmployees())

    with pytest.raises(ValidationError):
        svc.create_employee({**NEW_EMPLOYEE, **override})


def test_duplicate_username_or_cpf():
    svc = EmployeeService(InMemoryEmployees(make_employee(1)))

    with pytest.raises(ValidationError):
        svc.create_employee({**NEW_EMPLOYEE, "username": "func1", "cpf": "390.533.447-05"})
    with pytest.raises(ValidationError):
        svc.create_employee(NEW_EMPLOYEE)


def test_update_keeps_unspecified_fields():
    repo = InMemoryEmployees(make_employee(1))
    svc = EmployeeService(repo)

    updated = svc.update_employee(1, {"department": "RH"})

    assert updated.department == "RH"
    assert updated.username == "func1"
    assert repo.by_id[1].department == "RH"


def test_delete_rules():
    repo = InMemoryEmployees(make_employee(1), make_employee(2))
    svc = EmployeeService(repo)

    with pytest.raises(AuthorizationError):
        svc.delete_employee(current_employee_id=1, employee_id=1)
    with pytest.raises(NotFoundError):
        svc.delete_employee(current_employee_id=1, employee_id=42)

    svc.delete_employee(current_employee_id=1, employee_id=2)
    assert 2 not in repo.by_id


def test_rejected_update_changes_nothing():
    repo = InMemoryEmployees(make_employee(1))
    svc = EmployeeService(repo)

    with pytest.raises(ValidationError):
        svc.update_employee(1, {"full_name": "Nome Novo", "password": "123"})

    assert repo.get_by_id(1).full_name == "Funcionário 1"


def test_update_with_password_resets_first_login():
    repo = InMemoryEmployees(make_employee(1))
    svc = EmployeeService(repo)

    svc.update_employee(1, {"full_name": "Nome Novo", "password": "outrasenha"})

    assert repo.by_id[1].full_name == "Nome Novo"
    assert check_password_hash(repo.by_id[1].password_hash, "outrasenha")
    assert repo.by_id[1].first_login is True


def test_change_password_with_placeholder_hash_is_rejected():
    svc = AuthService(InMemoryEmployees(make_employee(1, password_hash="CHANGE_ME")))

    with pytest.raises(AuthenticationError):
        svc.change_password(1, old_password="CHANGE_ME", new_password="novasenha")
