# Overview: Flask API routes for service health; parses input and returns JSON responses.

from flask import Blueprint, current_app, jsonify
from sqlalchemy import text

from ..data_access import role_session


system_bp = Blueprint("system", __name__, url_prefix="/api")


@system_bp.get("/health")
def health():
    """Liveness plus a round trip to the database on the admin pool."""
    try:
        with role_session("admin") as session:
            session.execute(text("SELECT 1"))
    except Exception:
        current_app.logger.exception("Database health check failed")
        return jsonify({"status": "unhealthy", "database": "error"}), 503

    return jsonify({"status": "ok", "database": "ok"})
