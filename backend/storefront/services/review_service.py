# Overview: Service-layer operations for reviews and moderation; encapsulates business logic and database work.

"""
Review Service

Lifecycle of a customer's review of one app:

    (none) -> PENDING -> APPROVED
                      -> REJECTED -> (deleted on resubmit) -> PENDING

Only owners of the app may review it. Only APPROVED reviews are public.
"""

from __future__ import annotations

from ..data_access import role_session
from ..models import Review, Sale
from ..models.reviews import REVIEW_APPROVED, REVIEW_PENDING, REVIEW_REJECTED
from ..models.sales import ORDER_CANCELLED
from ..time_utils import utcnow
from ..validation import ServiceError


class ReviewError(ServiceError):
    """Raised for review submission and moderation errors."""


def submit_review(user_id: int, app_id: int, evaluation: int, comment: str) -> dict:
    """
    Submit a review as PENDING.

    Raises ReviewError 403 when the customer does not own the app, and 400
    while an earlier review is pending or published.
    """
    with role_session("user", user_id) as session:
        purchased = session.query(Sale.id).filter(
            Sale.user_id == user_id,
            Sale.app_id == app_id,
            Sale.status != ORDER_CANCELLED,
        ).first()
    if purchased is None:
        raise ReviewError("You can only review apps you have purchased", status_code=403)

    # Admin pool: the customer's own pool may not see rejected rows
    with role_session("admin") as session:
        existing = session.query(Review).filter(
            Review.app_id == app_id,
            Review.user_id == user_id,
        ).first()
        if existing is not None:
            if existing.status == REVIEW_PENDING:
                raise ReviewError("Your review is already awaiting moderation")
            if existing.status == REVIEW_APPROVED:
                raise ReviewError("Your review is already published")
            if existing.status != REVIEW_REJECTED:
                raise ReviewError("You have already reviewed this app")
            session.delete(existing)

    with role_session("user", user_id) as session:
        review = Review(
            app_id=app_id,
            user_id=user_id,
            evaluation=evaluation,
            comment=comment,
            status=REVIEW_PENDING,
            review_date=utcnow().date(),
        )
        session.add(review)
        session.flush()
        session.refresh(review)
        return review.to_dict()


def list_app_reviews(app_id: int, viewer_user_id: int | None = None) -> dict:
    """Published reviews of an app, plus the viewer's own review in any state."""
    with role_session("admin") as session:
        published = (
            session.query(Review)
            .filter(Review.app_id == app_id, Review.status == REVIEW_APPROVED)
            .order_by(Review.review_date.desc(), Review.id.desc())
            .all()
        )
        own = None
        if viewer_user_id is not None:
            own = (
                session.query(Review)
                .filter(Review.app_id == app_id, Review.user_id == viewer_user_id)
                .order_by(Review.review_date.desc(), Review.id.desc())
                .first()
            )
        return {
            "reviews": [r.to_dict() for r in published],
            "userReview": own.to_dict() if own else None,
        }


def list_for_moderation(employee_id: int | None, status: str | None = None) -> list[dict]:
    with role_session("moderator", employee_id) as session:
        query = session.query(Review)
        if status:
            query = query.filter(Review.status == status)
        reviews = query.order_by(Review.review_date.desc(), Review.id.desc()).all()
        return [r.to_moderation_dict() for r in reviews]


def moderate_review(review_id: int, employee_id: int, approve: bool) -> dict:
    """Move a PENDING review to APPROVED or REJECTED, stamping the moderator."""
    with role_session("moderator", employee_id) as session:
        review = (
            session.query(Review)
            .filter(Review.id == review_id)
            .with_for_update(of=Review)
            .first()
        )
        if review is None:
            raise ReviewError("Review not found", status_code=404)
        if review.status != REVIEW_PENDING:
            raise ReviewError(f"Review has already been moderated ({review.status})")

        review.status = REVIEW_APPROVED if approve else REVIEW_REJECTED
        review.moderated_at = utcnow()
        review.moderator_id = employee_id
        session.flush()
        return review.to_moderation_dict()
