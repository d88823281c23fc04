# Overview: Flask API routes for the customer profile; parses input and returns JSON responses.

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import require_auth, require_customer
from ..schemas import PasswordUpdate, UsernameUpdate
from ..services import profile_service
from ..services.profile_service import ProfileError
from ..validation import parse_payload


profile_bp = Blueprint("profile", __name__, url_prefix="/api/profile")


@profile_bp.patch("/username")
@require_auth
@require_customer
def change_username_route():
    """Returns {user, token}; the old token still carries the old username."""
    data = parse_payload(UsernameUpdate, request.get_json(silent=True))

    try:
        return jsonify(profile_service.change_username(g.principal.user_id, data.username))
    except ProfileError as e:
        return jsonify({"error": str(e)}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to change username")
        return jsonify({"error": "Internal server error"}), 500


@profile_bp.patch("/password")
@require_auth
@require_customer
def change_password_route():
    data = parse_payload(PasswordUpdate, request.get_json(silent=True))

    try:
        profile_service.change_password(g.principal.user_id, data.old_password, data.new_password)
        return jsonify({"message": "Password changed"})
    except ProfileError as e:
        return jsonify({"error": str(e)}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to change password")
        return jsonify({"error": "Internal server error"}), 500
