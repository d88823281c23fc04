# backend/storefront/__init__.py
from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from .config import Config
from .data_access import build_role_binds
from .extensions import db, migrate
from .validation import ValidationError


def create_app(config_overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    # One bind per application role; the default engine is the superuser URL
    if not app.config.get("SQLALCHEMY_BINDS"):
        app.config["SQLALCHEMY_BINDS"] = build_role_binds(
            app.config["SQLALCHEMY_DATABASE_URI"],
            app.config["ROLE_DB_USERS"],
            app.config["ROLE_DB_PASSWORDS"],
        )

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.apps import apps_bp
    from .routes.orders import orders_bp
    from .routes.support import support_bp
    from .routes.employee_support import employee_support_bp
    from .routes.moderation import moderation_bp
    from .routes.analytics import analytics_bp
    from .routes.admin import admin_bp
    from .routes.providers import providers_bp
    from .routes.profile import profile_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(apps_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(support_bp)
    app.register_blueprint(employee_support_bp)
    app.register_blueprint(moderation_bp)
    app.register_blueprint(analytics_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(providers_bp)
    app.register_blueprint(profile_bp)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin and origin == app.config["CLIENT_URL"]:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Credentials"] = "true"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,PATCH,OPTIONS"
        return response

    @app.errorhandler(ValidationError)
    def handle_validation_error(e):
        return jsonify({"error": str(e), "details": e.details}), 400

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        if e.code is None or e.code < 400:
            return e
        return jsonify({"error": e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"error": "Internal server error"}), 500

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
