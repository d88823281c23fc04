# Overview: Service-layer operations for store administration; encapsulates business logic and database work.

"""
Admin Service

Staff accounts, providers, categories and catalog entries. Everything here
runs on the admin pool.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from ..data_access import role_session
from ..models import App, Category, Employee, Position, Provider, User
from ..time_utils import utcnow
from ..validation import ServiceError
from .auth_service import hash_password, resolve_employee_role


class AdminError(ServiceError):
    """Raised for admin operation errors."""


def _employee_dict(employee: Employee) -> dict:
    data = employee.to_dict()
    data["role"] = resolve_employee_role(data["position"], employee.username)
    return data


def list_employees() -> list[dict]:
    with role_session("admin") as session:
        employees = session.query(Employee).order_by(Employee.id).all()
        return [_employee_dict(e) for e in employees]


def get_or_create_position(session, title: str) -> Position:
    position = session.query(Position).filter(Position.title == title).first()
    if position is None:
        position = Position(title=title)
        session.add(position)
        session.flush()
    return position


def create_employee(username: str, password: str, position_title: str) -> dict:
    """
    Create a staff account. The position decides the application role.

    Employees are checked before customers at login, so a username already
    used by either kind of account is rejected.
    """
    with role_session("admin") as session:
        if session.query(Employee.id).filter(Employee.username == username).first():
            raise AdminError("Username is already taken")
        if session.query(User.id).filter(User.username == username).first():
            raise AdminError("Username is already taken")

        position = get_or_create_position(session, position_title.strip())
        employee = Employee(
            username=username,
            password_hash=hash_password(password),
            position_id=position.id,
            hire_date=utcnow().date(),
        )
        session.add(employee)
        session.flush()
        session.refresh(employee)
        return _employee_dict(employee)


def set_employee_password(employee_id: int, password: str) -> dict:
    with role_session("admin") as session:
        employee = session.get(Employee, employee_id)
        if employee is None:
            raise AdminError("Employee not found", status_code=404)
        employee.password_hash = hash_password(password)
        session.flush()
        return _employee_dict(employee)


def list_providers() -> list[dict]:
    with role_session("admin") as session:
        return [p.to_dict() for p in session.query(Provider).order_by(Provider.name).all()]


def create_provider(
    provider_name: str,
    provider_type: str,
    country: str,
    founded_date: date,
    web: str | None = None,
    description: str | None = None,
) -> dict:
    with role_session("admin") as session:
        provider = Provider(
            name=provider_name,
            provider_type=provider_type,
            country=country,
            founded_date=founded_date,
            web=web or None,
            description=description or None,
        )
        session.add(provider)
        session.flush()
        return provider.to_dict()


def list_categories() -> list[dict]:
    with role_session("admin") as session:
        return [c.to_dict() for c in session.query(Category).order_by(Category.title).all()]


def create_app(
    provider_id: int,
    category_id: int,
    title: str,
    description: str,
    cost_price: Decimal,
    price: Decimal,
    release_date: date,
) -> dict:
    """Add an app to the catalog; provider and category must exist (404)."""
    with role_session("admin") as session:
        if session.get(Provider, provider_id) is None:
            raise AdminError("Provider not found", status_code=404)
        if session.get(Category, category_id) is None:
            raise AdminError("Category not found", status_code=404)

        app = App(
            provider_id=provider_id,
            category_id=category_id,
            title=title,
            description=description,
            cost_price=cost_price,
            price=price,
            release_date=release_date,
        )
        session.add(app)
        session.flush()
        session.refresh(app)
        return app.to_dict()
