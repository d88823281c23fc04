# Overview: Role-scoped connection pools and acting-user transactions.

"""
Role-Scoped Data Access

Every application role talks to the database through its own pooled engine,
authenticated as a dedicated database login (admin_user, analyst_user, ...).
The pools are Flask-SQLAlchemy binds keyed by role name.

Row-level security: PostgreSQL policies on sales, reviews and support tables
read `current_setting('app.current_user_id', true)`. role_session() sets that
value with set_config(..., is_local => true), which is SET LOCAL: it lives
until the surrounding transaction ends, so every unit of work runs inside
exactly one transaction.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, Mapping

from flask import current_app
from sqlalchemy import text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session

from .extensions import db


ROLES = ("admin", "analyst", "moderator", "support", "user")

ACTING_USER_SETTING = "app.current_user_id"


class UnknownRoleError(ValueError):
    """Raised when a caller asks for a pool that does not exist."""


def build_role_binds(
    database_url: str,
    role_users: Mapping[str, str],
    role_passwords: Mapping[str, str],
) -> dict[str, str]:
    """
    Derive one connection URL per role from the base DATABASE_URL by swapping
    in the role's database credentials.

    SQLite has no logins, so every role shares the base URL there.
    """
    base = make_url(database_url)
    binds: dict[str, str] = {}
    for role in ROLES:
        if base.get_backend_name() == "sqlite":
            binds[role] = database_url
            continue
        url = base.set(username=role_users[role], password=role_passwords[role])
        binds[role] = url.render_as_string(hide_password=False)
    return binds


def engine_for_role(role: str) -> Engine:
    """Return the pooled engine for an application role."""
    if role not in ROLES:
        raise UnknownRoleError(f"Unknown database role: {role!r}")
    return db.engines[role]


def _set_acting_user(session: Session, acting_user_id: int) -> None:
    if session.get_bind().dialect.name != "postgresql":
        return

    session.execute(
        text("SELECT set_config(:name, :value, true)"),
        {"name": ACTING_USER_SETTING, "value": str(int(acting_user_id))},
    )
    applied = session.execute(
        text("SELECT current_setting(:name, true)"),
        {"name": ACTING_USER_SETTING},
    ).scalar()
    if applied != str(acting_user_id):
        current_app.logger.error(
            "RLS acting user mismatch: expected %s, got %s", acting_user_id, applied
        )
    else:
        current_app.logger.debug("RLS acting user set to %s", acting_user_id)


@contextmanager
def role_session(role: str, acting_user_id: int | None = None) -> Iterator[Session]:
    """
    Open a transaction on the role's pool, optionally scoped to an acting user.

    Commits when the block exits normally. Any exception rolls the
    transaction back and propagates to the caller. The connection always
    goes back to the pool.
    """
    session = Session(bind=engine_for_role(role), expire_on_commit=False)
    try:
        if acting_user_id is not None:
            _set_acting_user(session, acting_user_id)
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def execute(
    role: str,
    acting_user_id: int | None,
    statement: Any,
    params: Mapping[str, Any] | None = None,
) -> list[Mapping[str, Any]]:
    """
    Run one statement on the role's pool and return its rows as mappings.

    `statement` may be a SQL string (wrapped with text()) or any executable
    SQLAlchemy construct.
    """
    if isinstance(statement, str):
        statement = text(statement)
    with role_session(role, acting_user_id) as session:
        result = session.execute(statement, dict(params or {}))
        if not result.returns_rows:
            return []
        return [dict(row) for row in result.mappings()]
