# Overview: Flask API routes for order operations; parses input and returns JSON responses.

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import require_auth, require_customer
from ..schemas import CheckoutRequest
from ..services import order_service
from ..services.order_service import OrderError
from ..validation import parse_payload


orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


@orders_bp.get("")
@require_auth
def list_orders_route():
    """The caller's orders. Staff accounts have none."""
    if not g.principal.is_customer:
        return jsonify([])

    try:
        return jsonify(order_service.list_orders(g.principal.user_id))
    except Exception:
        current_app.logger.exception("Failed to list orders")
        return jsonify({"error": "Internal server error"}), 500


@orders_bp.post("/checkout")
@require_auth
@require_customer
def checkout_route():
    """
    Request body:
    {
        "items": [{"appId": 1, "price": 9.99, "quantity": 1}],
        "payment": {"method": "card", "cardLast4": "4242"}
    }

    Payment is mocked. Amounts come from the catalog, not from "price".
    """
    data = parse_payload(CheckoutRequest, request.get_json(silent=True), message="Invalid order")

    try:
        result = order_service.checkout(g.principal.user_id, data.items, data.payment)
        return jsonify(result), 201
    except OrderError as e:
        return jsonify({"error": str(e)}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to checkout")
        return jsonify({"error": "Internal server error"}), 500


@orders_bp.patch("/<int:order_id>/cancel")
@require_auth
@require_customer
def cancel_order_route(order_id: int):
    try:
        order = order_service.cancel_order(g.principal.user_id, order_id)
        return jsonify({"message": "Order cancelled", "order": order})
    except OrderError as e:
        return jsonify({"error": str(e)}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to cancel order")
        return jsonify({"error": "Internal server error"}), 500
