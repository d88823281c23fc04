# Overview: Service-layer operations for access tokens; issues and verifies JWTs.

"""
Access Token Service

Stateless HS256 JWTs signed with JWT_SECRET. Customer tokens carry user_id;
employee tokens carry employee_id. Both carry username and role.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

import jwt
from flask import current_app

from ..time_utils import utcnow


class TokenError(Exception):
    """Raised when a token is missing claims, expired or forged."""


@dataclass(frozen=True)
class Principal:
    """The caller identity carried by a verified token."""
    username: str
    role: str
    user_id: int | None = None
    employee_id: int | None = None
    email: str | None = None

    @property
    def is_customer(self) -> bool:
        return self.role == "user" and self.user_id is not None

    @property
    def is_employee(self) -> bool:
        return self.employee_id is not None


def _encode(claims: dict) -> str:
    now = utcnow()
    payload = dict(claims)
    payload["iat"] = now
    payload["exp"] = now + timedelta(days=current_app.config["JWT_EXPIRES_DAYS"])
    return jwt.encode(payload, current_app.config["JWT_SECRET"], algorithm=current_app.config["JWT_ALGORITHM"])


def issue_customer_token(user_id: int, username: str, email: str) -> str:
    return _encode({"user_id": user_id, "username": username, "email": email, "role": "user"})


def issue_employee_token(employee_id: int, username: str, role: str) -> str:
    return _encode({"employee_id": employee_id, "username": username, "role": role})


def decode_token(token: str) -> Principal:
    try:
        claims = jwt.decode(
            token,
            current_app.config["JWT_SECRET"],
            algorithms=[current_app.config["JWT_ALGORITHM"]],
        )
    except jwt.PyJWTError as exc:
        raise TokenError(str(exc)) from exc

    if "username" not in claims or ("user_id" not in claims and "employee_id" not in claims):
        raise TokenError("Token is missing identity claims")

    return Principal(
        username=claims["username"],
        role=claims.get("role") or "user",
        user_id=claims.get("user_id"),
        employee_id=claims.get("employee_id"),
        email=claims.get("email"),
    )
