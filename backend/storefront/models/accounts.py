from __future__ import annotations

from ..extensions import db
from ..time_utils import to_iso_date


class User(db.Model):
    """
    Storefront customer account.

    Column names match the PostgreSQL schema the row-level security
    policies are written against (user_id, reg_date, ...).
    """
    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column("user_id", db.Integer, primary_key=True)
    username = db.Column(db.String(50), nullable=False, unique=True, index=True)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)
    password_hash = db.Column(db.Text, nullable=True)
    reg_date = db.Column(db.Date, nullable=False, server_default=db.func.current_date())

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "regDate": to_iso_date(self.reg_date),
        }


class Position(db.Model):
    """Job title; the title drives which application role an employee gets."""
    __tablename__ = "positions"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column("position_id", db.Integer, primary_key=True)
    title = db.Column(db.String(120), nullable=False, unique=True)

    def to_dict(self) -> dict:
        return {"id": self.id, "title": self.title}


class Employee(db.Model):
    """Staff account: admins, moderators, support agents and analysts."""
    __tablename__ = "employees"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column("employee_id", db.Integer, primary_key=True)
    username = db.Column(db.String(50), nullable=False, unique=True, index=True)
    password_hash = db.Column(db.Text, nullable=True)
    position_id = db.Column(db.Integer, db.ForeignKey("positions.position_id"), nullable=True)
    hire_date = db.Column(db.Date, nullable=False, server_default=db.func.current_date())

    position = db.relationship("Position", lazy="joined")

    def __repr__(self) -> str:
        return f"<Employee id={self.id} username={self.username!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "position": self.position.title if self.position else None,
            "hireDate": to_iso_date(self.hire_date),
        }
