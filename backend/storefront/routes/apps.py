# Overview: Flask API routes for the app catalog and reviews; parses input and returns JSON responses.

"""
Catalog Routes

Browsing is public. Ownership and review submission need a customer token;
the review listing personalises itself when a token is sent.
"""

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import optional_auth, require_auth, require_customer
from ..schemas import AppSearchQuery, ReviewCreate
from ..services import catalog_service, review_service
from ..services.catalog_service import CatalogError
from ..services.review_service import ReviewError
from ..validation import parse_payload, parse_query


apps_bp = Blueprint("apps", __name__, url_prefix="/api/apps")


@apps_bp.get("")
def list_apps_route():
    """
    Query parameters:
    - search: matched case-insensitively against title and description
    - categoryId: restrict to one category
    """
    query = parse_query(AppSearchQuery, request.args, message="Invalid filter")

    try:
        return jsonify(catalog_service.list_apps(query.search, query.category_id))
    except Exception:
        current_app.logger.exception("Failed to list apps")
        return jsonify({"error": "Internal server error"}), 500


@apps_bp.get("/categories")
def list_categories_route():
    try:
        return jsonify(catalog_service.list_categories())
    except Exception:
        current_app.logger.exception("Failed to list categories")
        return jsonify({"error": "Internal server error"}), 500


@apps_bp.get("/owned")
@require_auth
@require_customer
def owned_apps_route():
    try:
        return jsonify(catalog_service.list_owned_apps(g.principal.user_id))
    except Exception:
        current_app.logger.exception("Failed to list owned apps")
        return jsonify({"error": "Internal server error"}), 500


@apps_bp.get("/<int:app_id>")
def get_app_route(app_id: int):
    try:
        return jsonify(catalog_service.get_app(app_id))
    except CatalogError as e:
        return jsonify({"error": str(e)}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to get app")
        return jsonify({"error": "Internal server error"}), 500


@apps_bp.get("/<int:app_id>/owned")
@require_auth
def app_owned_route(app_id: int):
    """Staff never own apps; they get {owned: false}."""
    if not g.principal.is_customer:
        return jsonify({"owned": False})

    try:
        return jsonify({"owned": catalog_service.owns_app(g.principal.user_id, app_id)})
    except Exception:
        current_app.logger.exception("Failed to check app ownership")
        return jsonify({"error": "Internal server error"}), 500


@apps_bp.post("/<int:app_id>/reviews")
@require_auth
@require_customer
def create_review_route(app_id: int):
    data = parse_payload(ReviewCreate, request.get_json(silent=True))

    try:
        review = review_service.submit_review(g.principal.user_id, app_id, data.evaluation, data.comment)
        return jsonify({
            "message": "Review submitted for moderation",
            "review": review,
        }), 201
    except ReviewError as e:
        return jsonify({"error": str(e)}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create review")
        return jsonify({"error": "Internal server error"}), 500


@apps_bp.get("/<int:app_id>/reviews")
@optional_auth
def list_reviews_route(app_id: int):
    """Approved reviews; with a customer token also the caller's own review."""
    principal = g.principal
    viewer_id = principal.user_id if principal is not None and principal.is_customer else None

    try:
        return jsonify(review_service.list_app_reviews(app_id, viewer_id))
    except Exception:
        current_app.logger.exception("Failed to list reviews")
        return jsonify({"error": "Internal server error"}), 500
