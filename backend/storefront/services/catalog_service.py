# Overview: Service-layer operations for the app catalog; encapsulates business logic and database work.

from __future__ import annotations

from sqlalchemy import or_, select

from ..data_access import role_session
from ..models import App, Category, Provider, Sale
from ..models.sales import ORDER_CANCELLED
from ..validation import ServiceError


class CatalogError(ServiceError):
    """Raised for catalog lookups that fail (missing app/provider)."""


def _catalog_order(query):
    return query.order_by(App.release_date.desc().nulls_last(), App.title.asc())


def list_apps(search: str = "", category_id: int | None = None) -> list[dict]:
    """Browse the catalog, optionally filtered by text and category."""
    search = (search or "").strip()
    with role_session("user") as session:
        query = session.query(App)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(App.title.ilike(pattern), App.description.ilike(pattern)))
        if category_id is not None:
            query = query.filter(App.category_id == category_id)
        return [app.to_dict() for app in _catalog_order(query).all()]


def list_categories() -> list[dict]:
    with role_session("user") as session:
        return [c.to_dict() for c in session.query(Category).order_by(Category.title).all()]


def get_app(app_id: int) -> dict:
    with role_session("user") as session:
        app = session.get(App, app_id)
        if app is None:
            raise CatalogError("App not found", status_code=404)
        return app.to_dict()


def list_owned_apps(user_id: int) -> list[dict]:
    """Apps the customer holds a non-cancelled order for."""
    with role_session("user", user_id) as session:
        owned_ids = select(Sale.app_id).where(
            Sale.user_id == user_id,
            Sale.status != ORDER_CANCELLED,
        )
        apps = session.query(App).filter(App.id.in_(owned_ids)).order_by(App.id).all()
        return [app.to_dict() for app in apps]


def owns_app(user_id: int, app_id: int) -> bool:
    with role_session("user", user_id) as session:
        hit = session.query(Sale.id).filter(
            Sale.user_id == user_id,
            Sale.app_id == app_id,
            Sale.status != ORDER_CANCELLED,
        ).first()
        return hit is not None


def get_provider(provider_id: int) -> dict:
    with role_session("user") as session:
        provider = session.get(Provider, provider_id)
        if provider is None:
            raise CatalogError("Provider not found", status_code=404)
        return provider.to_dict()


def list_provider_apps(provider_id: int) -> list[dict]:
    with role_session("user") as session:
        query = session.query(App).filter(App.provider_id == provider_id)
        return [app.to_dict() for app in _catalog_order(query).all()]
