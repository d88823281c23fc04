from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


REQUEST_CREATED = "CREATED"
REQUEST_PROCESSING = "PROCESSING"
REQUEST_COMPLETED = "COMPLETED"

REQUEST_STATUSES = (REQUEST_CREATED, REQUEST_PROCESSING, REQUEST_COMPLETED)
PRIORITIES = ("low", "normal", "high")

SENDER_USER = "user"
SENDER_EMPLOYEE = "employee"


class SupportRequest(db.Model):
    """
    Support ticket opened by a customer about one of their orders.

    CREATED -> PROCESSING when an agent takes it, -> COMPLETED when an
    admin closes it.
    """
    __tablename__ = "support_requests"
    __table_args__ = (
        db.CheckConstraint("priority IN ('low', 'normal', 'high')", name="priority"),
        db.CheckConstraint(f"status IN ({', '.join(repr(s) for s in REQUEST_STATUSES)})", name="status"),
        db.Index("ix_support_requests_status_created", "status", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column("request_id", db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    subject = db.Column(db.String(120), nullable=False)
    message = db.Column(db.Text, nullable=False)
    priority = db.Column(db.String(16), nullable=False, default="normal")
    status = db.Column(db.String(16), nullable=False, default=REQUEST_CREATED)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.employee_id", ondelete="SET NULL"), nullable=True)
    taken_at = db.Column(db.DateTime(timezone=True), nullable=True)
    order_id = db.Column(db.Integer, db.ForeignKey("sales.sale_id", ondelete="SET NULL"), nullable=True)
    closed_at = db.Column(db.DateTime(timezone=True), nullable=True)

    # Loaded on demand: the customer pool may not read employee rows
    user = db.relationship("User")
    employee = db.relationship("Employee")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "subject": self.subject,
            "message": self.message,
            "priority": self.priority,
            "status": self.status,
            "orderId": self.order_id,
            "createdAt": to_utc_z(self.created_at),
            "takenAt": to_utc_z(self.taken_at),
            "closedAt": to_utc_z(self.closed_at),
        }

    def to_employee_dict(self) -> dict:
        data = self.to_dict()
        data.update({
            "userId": self.user_id,
            "userUsername": self.user.username if self.user else None,
            "userEmail": self.user.email if self.user else None,
            "employeeId": self.employee_id,
            "employeeUsername": self.employee.username if self.employee else None,
        })
        return data


class SupportMessage(db.Model):
    """One chat line in a support request, from the customer or an employee."""
    __tablename__ = "support_messages"
    __table_args__ = (
        db.CheckConstraint("sender_type IN ('user', 'employee')", name="sender_type"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column("message_id", db.Integer, primary_key=True)
    request_id = db.Column(
        db.Integer, db.ForeignKey("support_requests.request_id", ondelete="CASCADE"), nullable=False, index=True
    )
    sender_type = db.Column(db.String(16), nullable=False)
    sender_id = db.Column(db.Integer, nullable=False)
    message = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self, sender_username: str | None = None) -> dict:
        data = {
            "id": self.id,
            "requestId": self.request_id,
            "senderType": self.sender_type,
            "senderId": self.sender_id,
            "message": self.message,
            "createdAt": to_utc_z(self.created_at),
        }
        if sender_username is not None:
            data["senderUsername"] = sender_username
        return data
