# Overview: Flask API routes for sales analytics; parses input and returns JSON responses.

"""
Analytics Routes

SECURITY: analysts and admins only. All queries run on the analyst pool.
Cancelled orders are excluded from revenue and sales counts.
"""

from flask import Blueprint, current_app, jsonify, request

from ..decorators import require_auth, require_role
from ..schemas import DaysQuery, MetricsQuery, OrdersFilterQuery, TopAppsQuery
from ..services import reporting_service
from ..services.reporting_service import ReportError
from ..validation import parse_query


analytics_bp = Blueprint("analytics", __name__, url_prefix="/api/analytics")


@analytics_bp.get("/metrics")
@require_auth
@require_role("analyst", "admin")
def metrics_route():
    """
    Dashboard metrics for ?period=day|week|month.

    Returns:
        {ordersCount, revenue, newUsers, returns, avgCheck, supportRequests}
    """
    query = parse_query(MetricsQuery, request.args)

    try:
        return jsonify(reporting_service.dashboard_metrics(query.period))
    except ReportError as e:
        return jsonify({"error": str(e)}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to compute metrics")
        return jsonify({"error": "Internal server error"}), 500


@analytics_bp.get("/top-apps")
@require_auth
@require_role("analyst", "admin")
def top_apps_route():
    query = parse_query(TopAppsQuery, request.args)

    try:
        return jsonify(reporting_service.top_apps(query.limit))
    except Exception:
        current_app.logger.exception("Failed to compute top apps")
        return jsonify({"error": "Internal server error"}), 500


@analytics_bp.get("/sales-by-day")
@require_auth
@require_role("analyst", "admin")
def sales_by_day_route():
    query = parse_query(DaysQuery, request.args)

    try:
        return jsonify(reporting_service.sales_by_day(query.days))
    except Exception:
        current_app.logger.exception("Failed to compute sales by day")
        return jsonify({"error": "Internal server error"}), 500


@analytics_bp.get("/sales-by-category")
@require_auth
@require_role("analyst", "admin")
def sales_by_category_route():
    try:
        return jsonify(reporting_service.sales_by_category())
    except Exception:
        current_app.logger.exception("Failed to compute sales by category")
        return jsonify({"error": "Internal server error"}), 500


@analytics_bp.get("/users-growth")
@require_auth
@require_role("analyst", "admin")
def users_growth_route():
    query = parse_query(DaysQuery, request.args)

    try:
        return jsonify(reporting_service.users_growth(query.days))
    except Exception:
        current_app.logger.exception("Failed to compute users growth")
        return jsonify({"error": "Internal server error"}), 500


@analytics_bp.get("/orders")
@require_auth
@require_role("analyst", "admin")
def orders_route():
    """
    Query parameters:
    - startDate, endDate: ISO-8601 bounds on sale date (inclusive)
    - status, userId, appId: exact filters
    - limit (default 50), offset (default 0)

    Returns:
        {orders: [...], total: int, limit: int, offset: int}
    """
    query = parse_query(OrdersFilterQuery, request.args, message="Invalid filter parameters")

    try:
        return jsonify(reporting_service.list_orders(
            start_date=query.start_date,
            end_date=query.end_date,
            status=query.status,
            user_id=query.user_id,
            app_id=query.app_id,
            limit=query.limit,
            offset=query.offset,
        ))
    except Exception:
        current_app.logger.exception("Failed to list orders")
        return jsonify({"error": "Internal server error"}), 500


@analytics_bp.get("/users/<int:user_id>/purchases")
@require_auth
@require_role("analyst", "admin")
def user_purchases_route(user_id: int):
    try:
        return jsonify(reporting_service.user_purchases(user_id))
    except ReportError as e:
        return jsonify({"error": str(e)}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to get user purchases")
        return jsonify({"error": "Internal server error"}), 500
