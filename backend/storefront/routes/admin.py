# Overview: Flask API routes for administration; parses input and returns JSON responses.

"""
Admin Routes

SECURITY: every route requires the admin role.
"""

from flask import Blueprint, current_app, jsonify, request

from ..decorators import require_auth, require_role
from ..schemas import AppCreate, EmployeeCreate, EmployeePasswordSet, ProviderCreate
from ..services import admin_service
from ..services.admin_service import AdminError
from ..validation import parse_payload


admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")


@admin_bp.get("/employees")
@require_auth
@require_role("admin")
def list_employees_route():
    try:
        return jsonify(admin_service.list_employees())
    except Exception:
        current_app.logger.exception("Failed to list employees")
        return jsonify({"error": "Internal server error"}), 500


@admin_bp.post("/employees")
@require_auth
@require_role("admin")
def create_employee_route():
    """
    Request body:
    {
        "username": "jane",
        "password": "secret1",     // 6+ chars
        "position": "Moderator"    // created when missing
    }
    """
    data = parse_payload(EmployeeCreate, request.get_json(silent=True))

    try:
        employee = admin_service.create_employee(data.username, data.password, data.position)
        return jsonify(employee), 201
    except AdminError as e:
        return jsonify({"error": str(e)}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create employee")
        return jsonify({"error": "Internal server error"}), 500


@admin_bp.patch("/employees/<int:employee_id>/password")
@require_auth
@require_role("admin")
def set_employee_password_route(employee_id: int):
    data = parse_payload(EmployeePasswordSet, request.get_json(silent=True))

    try:
        employee = admin_service.set_employee_password(employee_id, data.password)
        return jsonify({"message": "Password updated", "employee": employee})
    except AdminError as e:
        return jsonify({"error": str(e)}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to set employee password")
        return jsonify({"error": "Internal server error"}), 500


@admin_bp.get("/providers")
@require_auth
@require_role("admin")
def list_providers_route():
    try:
        return jsonify(admin_service.list_providers())
    except Exception:
        current_app.logger.exception("Failed to list providers")
        return jsonify({"error": "Internal server error"}), 500


@admin_bp.post("/providers")
@require_auth
@require_role("admin")
def create_provider_route():
    data = parse_payload(ProviderCreate, request.get_json(silent=True))

    try:
        provider = admin_service.create_provider(
            provider_name=data.provider_name,
            provider_type=data.provider_type,
            country=data.country,
            founded_date=data.founded_date,
            web=data.web,
            description=data.description,
        )
        return jsonify(provider), 201
    except Exception:
        current_app.logger.exception("Failed to create provider")
        return jsonify({"error": "Internal server error"}), 500


@admin_bp.get("/categories")
@require_auth
@require_role("admin")
def list_categories_route():
    try:
        return jsonify(admin_service.list_categories())
    except Exception:
        current_app.logger.exception("Failed to list categories")
        return jsonify({"error": "Internal server error"}), 500


@admin_bp.post("/apps")
@require_auth
@require_role("admin")
def create_app_route():
    data = parse_payload(AppCreate, request.get_json(silent=True))

    try:
        app = admin_service.create_app(
            provider_id=data.provider_id,
            category_id=data.category_id,
            title=data.title,
            description=data.description,
            cost_price=data.cost_price,
            price=data.price,
            release_date=data.release_date,
        )
        return jsonify(app), 201
    except AdminError as e:
        return jsonify({"error": str(e)}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create app")
        return jsonify({"error": "Internal server error"}), 500
