# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

"""
Authentication API routes

One login form serves customers and staff; employees are matched first.
Tokens are stateless JWTs, so there is no logout endpoint.
"""

from flask import Blueprint, current_app, jsonify, request

from ..schemas import LoginRequest, RegisterRequest
from ..services import auth_service
from ..services.auth_service import AuthError
from ..validation import parse_payload


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/register")
def register_route():
    data = parse_payload(RegisterRequest, request.get_json(silent=True))

    try:
        result = auth_service.register_customer(data.email, data.username, data.password)
        return jsonify({"token": result.token, "user": result.user}), 201
    except AuthError as e:
        return jsonify({"error": str(e)}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to register user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.get("/check-username")
def check_username_route():
    username = (request.args.get("username") or "").strip()

    try:
        return jsonify({"available": auth_service.is_username_available(username)})
    except Exception:
        current_app.logger.exception("Failed to check username")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/login")
def login_route():
    """
    Authenticate a customer or an employee.

    Returns {token, user, isEmployee}. Bad credentials give 401.
    """
    data = parse_payload(LoginRequest, request.get_json(silent=True))

    try:
        result = auth_service.authenticate(data.username, data.password)
        return jsonify({
            "token": result.token,
            "user": result.user,
            "isEmployee": result.is_employee,
        })
    except AuthError as e:
        return jsonify({"error": str(e)}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500
