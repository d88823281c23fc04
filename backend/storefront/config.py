# backend/storefront/config.py
from __future__ import annotations
import os

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).strip().lower() in {"1", "true", "yes", "on"}


_DB_PASSWORD = os.environ.get("DB_PASSWORD", "secure_pass")


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # Superuser connection; also the base URL the role binds are derived from
    DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///storefront.sqlite3")
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = (
        {"connect_args": {"sslmode": "require"}} if _env_flag("DATABASE_SSL") else {}
    )

    # Application role -> database login role
    ROLE_DB_USERS = {
        "admin": "admin_user",
        "analyst": "analyst_user",
        "moderator": "moderator_user",
        "support": "support_user",
        "user": "normal_user",
    }
    ROLE_DB_PASSWORDS = {
        role: os.environ.get(f"DB_{role.upper()}_PASSWORD", _DB_PASSWORD)
        for role in ("admin", "analyst", "moderator", "support", "user")
    }

    JWT_SECRET = os.environ.get("JWT_SECRET", "secret")
    JWT_ALGORITHM = "HS256"
    JWT_EXPIRES_DAYS = int(os.environ.get("JWT_EXPIRES_DAYS", "7"))

    CLIENT_URL = os.environ.get("CLIENT_URL", "http://localhost:5173")

    ORDER_STATUS_UPDATER_ENABLED = _env_flag("ORDER_STATUS_UPDATER_ENABLED", "true")
    ORDER_STATUS_POLL_SECONDS = float(os.environ.get("ORDER_STATUS_POLL_SECONDS", "5"))
    ORDER_PROCESSING_AFTER_SECONDS = int(os.environ.get("ORDER_PROCESSING_AFTER_SECONDS", "15"))
    ORDER_COMPLETED_AFTER_SECONDS = int(os.environ.get("ORDER_COMPLETED_AFTER_SECONDS", "25"))

    DOWNLOAD_BASE_URL = os.environ.get("DOWNLOAD_BASE_URL", "https://digitaldistributor.com")
