# Overview: Service-layer operations for orders; encapsulates business logic and database work.

"""
Order Service

Checkout creates one sale per purchased app in CREATED status. From there:

    CREATED --(15s)--> PROCESSING --(25s)--> COMPLETED     (status updater)
    CREATED | PROCESSING --(customer)--> CANCELLED

COMPLETED and CANCELLED are terminal. Both timed steps are measured from
sale_date. A customer may own each app at most once; cancelled orders do
not count as ownership.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from flask import current_app

from ..data_access import role_session
from ..models import App, Sale
from ..models.sales import (
    ORDER_CANCELLED,
    ORDER_COMPLETED,
    ORDER_CREATED,
    ORDER_PROCESSING,
)
from ..time_utils import to_utc_z, utcnow
from ..validation import ServiceError


class OrderError(ServiceError):
    """Raised for order operation errors."""


def _download_link(app_id: int) -> str:
    base = current_app.config["DOWNLOAD_BASE_URL"].rstrip("/")
    return f"{base}/app/id={app_id}"


def list_orders(user_id: int) -> list[dict]:
    """The customer's orders, newest first; completed ones carry a download link."""
    with role_session("user", user_id) as session:
        rows = (
            session.query(Sale, App)
            .join(App, App.id == Sale.app_id)
            .filter(Sale.user_id == user_id)
            .order_by(Sale.sale_date.desc(), Sale.id.desc())
            .all()
        )
        return [
            {
                "id": sale.id,
                "status": sale.status,
                "amount": float(sale.amount),
                "saleDate": to_utc_z(sale.sale_date),
                "downloadLink": _download_link(app.id) if sale.status == ORDER_COMPLETED else None,
                "app": {"id": app.id, "title": app.title, "price": float(app.price)},
            }
            for sale, app in rows
        ]


def checkout(user_id: int, items: list, payment) -> dict:
    """
    Create one order per cart item, charged at the catalog price.

    Rejects carts listing an app twice and apps the customer already owns.
    The ownership pre-check runs before the insert transaction and is not
    re-verified inside it.
    """
    app_ids = [item.app_id for item in items]
    duplicates = sorted({a for a in app_ids if app_ids.count(a) > 1})
    if duplicates:
        raise OrderError(f"App with ID {duplicates[0]} appears more than once in the cart")

    with role_session("user", user_id) as session:
        for app_id in app_ids:
            existing = session.query(Sale.id).filter(
                Sale.user_id == user_id,
                Sale.app_id == app_id,
                Sale.status != ORDER_CANCELLED,
            ).first()
            if existing is not None:
                raise OrderError(f"App with ID {app_id} is already purchased")

    with role_session("user", user_id) as session:
        created = []
        now = utcnow()
        for item in items:
            app = session.get(App, item.app_id)
            if app is None:
                raise OrderError(f"App with ID {item.app_id} not found", status_code=404)

            sale = Sale(
                sale_date=now,
                amount=app.price * item.quantity,
                status=ORDER_CREATED,
                user_id=user_id,
                app_id=app.id,
            )
            session.add(sale)
            session.flush()
            created.append(sale.to_dict())

    return {
        "orders": created,
        "payment": {
            "status": "mocked",
            "method": payment.method,
            "cardLast4": payment.card_last4,
        },
    }


def cancel_order(user_id: int, order_id: int) -> dict:
    """Cancel a CREATED or PROCESSING order owned by the customer."""
    with role_session("user", user_id) as session:
        sale = (
            session.query(Sale)
            .filter(Sale.id == order_id, Sale.user_id == user_id)
            .with_for_update()
            .first()
        )
        if sale is None:
            raise OrderError("Order not found", status_code=404)
        if sale.status == ORDER_COMPLETED:
            raise OrderError("Cannot cancel a completed order")
        if sale.status == ORDER_CANCELLED:
            raise OrderError("Order is already cancelled")

        sale.status = ORDER_CANCELLED
        session.flush()
        return sale.to_dict()


def advance_order_statuses(
    now: datetime | None = None,
    *,
    processing_after: int | None = None,
    completed_after: int | None = None,
) -> dict:
    """
    Bulk-advance orders whose age crossed a threshold.

    Runs on the admin pool without an acting user: it must see every
    customer's orders. Both steps share one transaction, so an order older
    than both thresholds moves straight through to COMPLETED.

    Returns how many orders each step moved.
    """
    now = now or utcnow()
    if processing_after is None:
        processing_after = current_app.config["ORDER_PROCESSING_AFTER_SECONDS"]
    if completed_after is None:
        completed_after = current_app.config["ORDER_COMPLETED_AFTER_SECONDS"]

    with role_session("admin") as session:
        processing = (
            session.query(Sale)
            .filter(
                Sale.status == ORDER_CREATED,
                Sale.sale_date < now - timedelta(seconds=processing_after),
            )
            .update({Sale.status: ORDER_PROCESSING}, synchronize_session=False)
        )
        completed = (
            session.query(Sale)
            .filter(
                Sale.status == ORDER_PROCESSING,
                Sale.sale_date < now - timedelta(seconds=completed_after),
            )
            .update({Sale.status: ORDER_COMPLETED}, synchronize_session=False)
        )

    return {"processing": processing, "completed": completed}
