# Overview: Flask API routes for provider pages; parses input and returns JSON responses.

from flask import Blueprint, current_app, jsonify

from ..services import catalog_service
from ..services.catalog_service import CatalogError


providers_bp = Blueprint("providers", __name__, url_prefix="/api/providers")


@providers_bp.get("/<int:provider_id>")
def get_provider_route(provider_id: int):
    try:
        return jsonify(catalog_service.get_provider(provider_id))
    except CatalogError as e:
        return jsonify({"error": str(e)}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to get provider")
        return jsonify({"error": "Internal server error"}), 500


@providers_bp.get("/<int:provider_id>/apps")
def list_provider_apps_route(provider_id: int):
    try:
        return jsonify(catalog_service.list_provider_apps(provider_id))
    except Exception:
        current_app.logger.exception("Failed to list provider apps")
        return jsonify({"error": "Internal server error"}), 500
