# Overview: Request authentication and role decorators for API routes.

from functools import wraps
from flask import request, jsonify, g

from .services import token_service
from .services.token_service import TokenError


def _bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1].strip() or None


def _is_authenticated() -> bool:
    return getattr(g, "principal", None) is not None


def require_auth(f):
    """
    Require a valid bearer token.

    Sets g.principal to the token's Principal (user_id or employee_id,
    username, role). Returns 401 when the header is missing or the token
    does not verify.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = _bearer_token()
        if not token:
            return jsonify({"error": "Authentication required"}), 401

        try:
            g.principal = token_service.decode_token(token)
        except TokenError:
            return jsonify({"error": "Invalid or expired token"}), 401

        return f(*args, **kwargs)

    return decorated_function


def optional_auth(f):
    """
    Attach g.principal when a valid token is sent; never blocks the request.

    Public endpoints use this to personalise responses.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        g.principal = None
        token = _bearer_token()
        if token:
            try:
                g.principal = token_service.decode_token(token)
            except TokenError:
                g.principal = None
        return f(*args, **kwargs)

    return decorated_function


def require_role(*roles: str):
    """Require the authenticated principal to hold one of the given roles."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not _is_authenticated():
                return jsonify({"error": "Authentication required"}), 401

            if g.principal.role not in roles:
                return jsonify({
                    "error": "Insufficient permissions",
                    "required_roles": list(roles),
                }), 403

            return f(*args, **kwargs)

        return decorated_function
    return decorator


def require_customer(f):
    """Require a customer (role "user" with a user_id); staff get 403."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not _is_authenticated():
            return jsonify({"error": "Authentication required"}), 401
        if not g.principal.is_customer:
            return jsonify({"error": "Available to customers only"}), 403
        return f(*args, **kwargs)
    return decorated_function


def require_employee(f):
    """Require a staff token (carries employee_id)."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not _is_authenticated():
            return jsonify({"error": "Authentication required"}), 401
        if not g.principal.is_employee:
            return jsonify({"error": "Available to employees only"}), 403
        return f(*args, **kwargs)
    return decorated_function
