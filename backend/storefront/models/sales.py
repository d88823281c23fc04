from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


# Order lifecycle
ORDER_CREATED = "CREATED"
ORDER_PROCESSING = "PROCESSING"
ORDER_COMPLETED = "COMPLETED"
ORDER_CANCELLED = "CANCELLED"

ORDER_STATUSES = (ORDER_CREATED, ORDER_PROCESSING, ORDER_COMPLETED, ORDER_CANCELLED)


class Sale(db.Model):
    """
    One purchased app (an "order").

    CREATED -> PROCESSING -> COMPLETED is advanced by the status updater;
    CANCELLED is set by the customer. COMPLETED and CANCELLED are terminal.
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.CheckConstraint(f"status IN ({', '.join(repr(s) for s in ORDER_STATUSES)})", name="status"),
        db.Index("ix_sales_status_date", "status", "sale_date"),
        db.Index("ix_sales_user_app", "user_id", "app_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column("sale_id", db.Integer, primary_key=True)
    sale_date = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    amount = db.Column(db.Numeric(10, 2), nullable=False)
    status = db.Column(db.String(16), nullable=False, default=ORDER_CREATED)
    user_id = db.Column(db.Integer, db.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    app_id = db.Column(db.Integer, db.ForeignKey("apps.app_id"), nullable=False)

    user = db.relationship("User")
    app = db.relationship("App")

    def __repr__(self) -> str:
        return f"<Sale id={self.id} status={self.status}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "amount": float(self.amount),
            "saleDate": to_utc_z(self.sale_date),
            "status": self.status,
            "appId": self.app_id,
        }
