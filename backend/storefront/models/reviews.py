from __future__ import annotations

from ..extensions import db
from ..time_utils import to_iso_date, to_utc_z


REVIEW_PENDING = "PENDING"
REVIEW_APPROVED = "APPROVED"
REVIEW_REJECTED = "REJECTED"

REVIEW_STATUSES = (REVIEW_PENDING, REVIEW_APPROVED, REVIEW_REJECTED)


class Review(db.Model):
    """
    Customer review of an owned app.

    Goes through moderation: PENDING -> APPROVED | REJECTED. A rejected review
    is deleted when the customer resubmits.
    """
    __tablename__ = "reviews"
    __table_args__ = (
        db.CheckConstraint(f"status IN ({', '.join(repr(s) for s in REVIEW_STATUSES)})", name="status"),
        db.Index("ix_reviews_app_status", "app_id", "status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column("review_id", db.Integer, primary_key=True)
    app_id = db.Column(db.Integer, db.ForeignKey("apps.app_id", ondelete="CASCADE"), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    evaluation = db.Column(db.Integer, nullable=False)
    comment = db.Column(db.Text, nullable=False)
    status = db.Column(db.String(16), nullable=False, default=REVIEW_PENDING)
    review_date = db.Column(db.Date, nullable=False, server_default=db.func.current_date())
    moderated_at = db.Column(db.DateTime(timezone=True), nullable=True)
    moderator_id = db.Column(db.Integer, db.ForeignKey("employees.employee_id", ondelete="SET NULL"), nullable=True)

    app = db.relationship("App")
    user = db.relationship("User", lazy="joined")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "appId": self.app_id,
            "userId": self.user_id,
            "userUsername": self.user.username if self.user else None,
            "evaluation": self.evaluation,
            "comment": self.comment,
            "status": self.status,
            "reviewDate": to_iso_date(self.review_date),
        }

    def to_moderation_dict(self) -> dict:
        data = self.to_dict()
        data.update({
            "appTitle": self.app.title if self.app else None,
            "moderatedAt": to_utc_z(self.moderated_at),
            "moderatorId": self.moderator_id,
        })
        return data
