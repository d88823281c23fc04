# Overview: Flask API routes for review moderation; parses input and returns JSON responses.

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import require_auth, require_employee, require_role
from ..schemas import ReviewStatusQuery
from ..services import review_service
from ..services.review_service import ReviewError
from ..validation import parse_query


moderation_bp = Blueprint("moderation", __name__, url_prefix="/api/moderation")


@moderation_bp.get("/reviews")
@require_auth
@require_role("moderator", "admin")
def list_reviews_route():
    query = parse_query(ReviewStatusQuery, request.args)

    try:
        return jsonify(review_service.list_for_moderation(g.principal.employee_id, query.status))
    except Exception:
        current_app.logger.exception("Failed to list reviews for moderation")
        return jsonify({"error": "Internal server error"}), 500


def _moderate(review_id: int, approve: bool):
    try:
        review = review_service.moderate_review(review_id, g.principal.employee_id, approve)
        message = "Review approved" if approve else "Review rejected"
        return jsonify({"message": message, "review": review})
    except ReviewError as e:
        return jsonify({"error": str(e)}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to moderate review")
        return jsonify({"error": "Internal server error"}), 500


@moderation_bp.patch("/reviews/<int:review_id>/approve")
@require_auth
@require_role("moderator", "admin")
@require_employee
def approve_review_route(review_id: int):
    return _moderate(review_id, approve=True)


@moderation_bp.patch("/reviews/<int:review_id>/reject")
@require_auth
@require_role("moderator", "admin")
@require_employee
def reject_review_route(review_id: int):
    return _moderate(review_id, approve=False)
