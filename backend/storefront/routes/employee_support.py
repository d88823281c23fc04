# Overview: Flask API routes for the staff side of support; parses input and returns JSON responses.

"""
Employee Support Routes

SECURITY: support agents and admins only. Closing a request is admin only.
"""

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import require_auth, require_employee, require_role
from ..schemas import ChatMessageCreate, SupportStatusQuery
from ..services import support_service
from ..services.support_service import SupportError
from ..validation import parse_payload, parse_query


employee_support_bp = Blueprint("employee_support", __name__, url_prefix="/api/employee-support")


@employee_support_bp.get("/requests")
@require_auth
@require_role("support", "admin")
def list_requests_route():
    query = parse_query(SupportStatusQuery, request.args)

    try:
        return jsonify(support_service.list_requests(g.principal.employee_id, query.status))
    except Exception:
        current_app.logger.exception("Failed to list support requests")
        return jsonify({"error": "Internal server error"}), 500


@employee_support_bp.patch("/requests/<int:request_id>/take")
@require_auth
@require_role("support", "admin")
@require_employee
def take_request_route(request_id: int):
    try:
        taken = support_service.take_request(g.principal.employee_id, request_id)
        return jsonify({"message": "Request taken into work", "request": taken})
    except SupportError as e:
        return jsonify({"error": str(e)}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to take support request")
        return jsonify({"error": "Internal server error"}), 500


@employee_support_bp.get("/requests/<int:request_id>/messages")
@require_auth
@require_role("support", "admin")
def list_messages_route(request_id: int):
    try:
        return jsonify(support_service.employee_messages(g.principal.employee_id, request_id))
    except SupportError as e:
        return jsonify({"error": str(e)}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to list support messages")
        return jsonify({"error": "Internal server error"}), 500


@employee_support_bp.post("/requests/<int:request_id>/messages")
@require_auth
@require_role("support", "admin")
@require_employee
def post_message_route(request_id: int):
    data = parse_payload(ChatMessageCreate, request.get_json(silent=True), message="Invalid message")

    try:
        message = support_service.post_employee_message(
            g.principal.employee_id, g.principal.role, request_id, data.message
        )
        return jsonify(message), 201
    except SupportError as e:
        return jsonify({"error": str(e)}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to post support message")
        return jsonify({"error": "Internal server error"}), 500


@employee_support_bp.patch("/requests/<int:request_id>/close")
@require_auth
@require_role("admin")
def close_request_route(request_id: int):
    try:
        closed = support_service.close_request(request_id)
        return jsonify({"message": "Request closed", "request": closed})
    except SupportError as e:
        return jsonify({"error": str(e)}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to close support request")
        return jsonify({"error": "Internal server error"}), 500
