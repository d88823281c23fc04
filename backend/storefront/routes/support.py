# Overview: Flask API routes for customer support requests; parses input and returns JSON responses.

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import require_auth, require_customer
from ..schemas import ChatMessageCreate, SupportRequestCreate
from ..services import support_service
from ..services.support_service import SupportError
from ..validation import parse_payload


support_bp = Blueprint("support", __name__, url_prefix="/api/support")


@support_bp.post("")
@require_auth
@require_customer
def create_request_route():
    """
    Request body:
    {
        "subject": "Cannot download",       // 5-120 chars
        "message": "The link returns 404",  // 10-1000 chars
        "priority": "normal",               // low | normal | high
        "orderId": 12                       // must be the caller's order
    }
    """
    data = parse_payload(SupportRequestCreate, request.get_json(silent=True), message="Invalid support request")

    try:
        created = support_service.create_request(
            g.principal.user_id,
            subject=data.subject,
            message=data.message,
            priority=data.priority,
            order_id=data.order_id,
        )
        return jsonify({"message": "Support request created", "request": created}), 201
    except SupportError as e:
        return jsonify({"error": str(e)}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create support request")
        return jsonify({"error": "Internal server error"}), 500


@support_bp.get("")
@require_auth
@require_customer
def list_requests_route():
    try:
        return jsonify(support_service.list_customer_requests(g.principal.user_id))
    except Exception:
        current_app.logger.exception("Failed to list support requests")
        return jsonify({"error": "Internal server error"}), 500


@support_bp.get("/<int:request_id>/messages")
@require_auth
@require_customer
def list_messages_route(request_id: int):
    try:
        return jsonify(support_service.customer_messages(g.principal.user_id, request_id))
    except SupportError as e:
        return jsonify({"error": str(e)}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to list support messages")
        return jsonify({"error": "Internal server error"}), 500


@support_bp.post("/<int:request_id>/messages")
@require_auth
@require_customer
def post_message_route(request_id: int):
    data = parse_payload(ChatMessageCreate, request.get_json(silent=True), message="Invalid message")

    try:
        message = support_service.post_customer_message(g.principal.user_id, request_id, data.message)
        return jsonify(message), 201
    except SupportError as e:
        return jsonify({"error": str(e)}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to post support message")
        return jsonify({"error": "Internal server error"}), 500
