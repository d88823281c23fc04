# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Authentication Service

Two kinds of accounts log in through the same form:
- employees (staff), whose application role is derived from their position
- users (customers), who always get the "user" role

Employees are checked first, so a staff username shadows a customer
username. Lookups run on the admin pool: the acting user is not known yet.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor 10)
- Accounts without a password hash cannot log in
"""

from __future__ import annotations

from dataclasses import dataclass

import bcrypt
from sqlalchemy import or_

from ..data_access import role_session
from ..models import User, Employee
from ..time_utils import utcnow
from ..validation import ServiceError
from . import token_service


BCRYPT_ROUNDS = 10
CUSTOMER_ROLE = "user"

# (role, keywords) checked in order against position title and username
_ROLE_KEYWORDS = (
    ("admin", ("admin", "director", "администратор", "директор")),
    ("moderator", ("moderator", "модератор")),
    ("support", ("support", "поддержк")),
    ("analyst", ("analyst", "аналитик")),
)


class AuthError(ServiceError):
    """Raised for registration and login failures."""


@dataclass
class LoginResult:
    token: str
    user: dict
    is_employee: bool


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str | None) -> bool:
    """
    Verify password against bcrypt hash.

    A missing or blank hash never verifies. Malformed hashes are treated
    as a mismatch.
    """
    if not password_hash or not password_hash.strip():
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def resolve_employee_role(position_title: str | None, username: str) -> str:
    """
    Map an employee to an application role from position title or username.

    Falls back to the customer role when nothing matches.
    """
    position = (position_title or "").lower()
    name = username.lower()
    for role, keywords in _ROLE_KEYWORDS:
        if any(k in position or k in name for k in keywords):
            return role
    return CUSTOMER_ROLE


def is_username_available(username: str) -> bool:
    if not username or len(username) < 3:
        return False
    with role_session("admin") as session:
        return session.query(User.id).filter(User.username == username).first() is None


def register_customer(email: str, username: str, password: str) -> LoginResult:
    """
    Create a customer account and issue a token for it.

    Raises AuthError (400) when the email or username is taken.
    """
    with role_session("admin") as session:
        existing = session.query(User).filter(or_(User.email == email, User.username == username)).all()
        if any(u.email == email for u in existing):
            raise AuthError("Email is already in use")
        if existing:
            raise AuthError("Username is already taken")

        user = User(
            username=username,
            email=email,
            password_hash=hash_password(password),
            reg_date=utcnow().date(),
        )
        session.add(user)
        session.flush()
        user_data = user.to_dict()

    token = token_service.issue_customer_token(user_data["id"], user_data["username"], user_data["email"])
    return LoginResult(token=token, user=user_data, is_employee=False)


def authenticate(username: str, password: str) -> LoginResult:
    """
    Log in an employee or a customer.

    Raises AuthError (401) on bad credentials.
    """
    with role_session("admin") as session:
        employee = session.query(Employee).filter(Employee.username == username).first()
        if employee is not None:
            if not verify_password(password, employee.password_hash):
                raise AuthError("Invalid username or password", status_code=401)
            position_title = employee.position.title if employee.position else None
            role = resolve_employee_role(position_title, employee.username)
            employee_id, employee_name = employee.id, employee.username
            user_data = None
        else:
            user = session.query(User).filter(User.username == username).first()
            if user is None:
                raise AuthError("Invalid username or password", status_code=401)
            if not user.password_hash or not user.password_hash.strip():
                raise AuthError("Password is not set. Contact an administrator.", status_code=401)
            if not verify_password(password, user.password_hash):
                raise AuthError("Invalid username or password", status_code=401)
            user_data = user.to_dict()

    if user_data is None:
        token = token_service.issue_employee_token(employee_id, employee_name, role)
        return LoginResult(
            token=token,
            user={"id": employee_id, "username": employee_name, "role": role},
            is_employee=True,
        )

    token = token_service.issue_customer_token(user_data["id"], user_data["username"], user_data["email"])
    user_data["role"] = CUSTOMER_ROLE
    return LoginResult(token=token, user=user_data, is_employee=False)
