# Overview: Service-layer operations for sales analytics; encapsulates business logic and database work.

from __future__ import annotations

from datetime import datetime, timedelta

from sqlalchemy import func

from ..data_access import role_session
from ..models import App, Category, Sale, SupportRequest, User
from ..models.sales import ORDER_CANCELLED
from ..time_utils import days_ago, start_of_day, to_iso_date, to_utc_z, utcnow
from ..validation import ServiceError


PERIOD_DAYS = {"day": 1, "week": 7, "month": 30}


class ReportError(ServiceError):
    """Raised when report generation fails."""


def _period_start(period: str, now: datetime) -> datetime:
    if period not in PERIOD_DAYS:
        raise ReportError("period must be day, week, or month")
    if period == "day":
        return start_of_day(now)
    return days_ago(PERIOD_DAYS[period], now=now)


def dashboard_metrics(period: str = "day", *, now: datetime | None = None) -> dict:
    """
    Headline numbers for the analytics dashboard.

    Orders, revenue and average check count non-cancelled sales since the
    start of the period; returns counts the cancelled ones.
    """
    now = now or utcnow()
    since = _period_start(period, now)
    signup_since = (start_of_day(now) - timedelta(days=PERIOD_DAYS[period])).date()

    with role_session("analyst") as session:
        active = session.query(
            func.count(Sale.id),
            func.coalesce(func.sum(Sale.amount), 0),
            func.coalesce(func.avg(Sale.amount), 0),
        ).filter(Sale.status != ORDER_CANCELLED, Sale.sale_date >= since).one()

        returns = session.query(func.count(Sale.id)).filter(
            Sale.status == ORDER_CANCELLED,
            Sale.sale_date >= since,
        ).scalar()

        new_users = session.query(func.count(User.id)).filter(User.reg_date >= signup_since).scalar()

        support_requests = session.query(func.count(SupportRequest.id)).filter(
            SupportRequest.created_at >= days_ago(PERIOD_DAYS[period], now=now),
        ).scalar()

    orders_count, revenue, avg_check = active
    return {
        "ordersCount": int(orders_count or 0),
        "revenue": float(revenue or 0),
        "newUsers": int(new_users or 0),
        "returns": int(returns or 0),
        "avgCheck": round(float(avg_check or 0), 2),
        "supportRequests": int(support_requests or 0),
    }


def top_apps(limit: int = 10) -> list[dict]:
    with role_session("analyst") as session:
        sales_count = func.count(Sale.id).label("sales_count")
        rows = (
            session.query(
                App.id,
                App.title,
                sales_count,
                func.coalesce(func.sum(Sale.amount), 0).label("total_revenue"),
            )
            .join(Sale, Sale.app_id == App.id)
            .filter(Sale.status != ORDER_CANCELLED)
            .group_by(App.id, App.title)
            .order_by(sales_count.desc(), App.title.asc())
            .limit(limit)
            .all()
        )
    return [
        {
            "appId": row.id,
            "title": row.title,
            "salesCount": int(row.sales_count),
            "totalRevenue": float(row.total_revenue),
        }
        for row in rows
    ]


def sales_by_day(days: int = 30, *, now: datetime | None = None) -> list[dict]:
    since = days_ago(days, now=now)
    sale_day = func.date(Sale.sale_date)

    with role_session("analyst") as session:
        rows = (
            session.query(
                sale_day.label("day"),
                func.count(Sale.id).label("orders_count"),
                func.coalesce(func.sum(Sale.amount), 0).label("revenue"),
            )
            .filter(Sale.status != ORDER_CANCELLED, Sale.sale_date >= since)
            .group_by(sale_day)
            .order_by(sale_day.asc())
            .all()
        )
    return [
        {
            "date": to_iso_date(row.day),
            "ordersCount": int(row.orders_count),
            "revenue": float(row.revenue),
        }
        for row in rows
    ]


def sales_by_category() -> list[dict]:
    with role_session("analyst") as session:
        revenue = func.coalesce(func.sum(Sale.amount), 0).label("revenue")
        rows = (
            session.query(
                Category.id,
                Category.title,
                func.count(Sale.id).label("sales_count"),
                revenue,
            )
            .join(App, App.category_id == Category.id)
            .join(Sale, Sale.app_id == App.id)
            .filter(Sale.status != ORDER_CANCELLED)
            .group_by(Category.id, Category.title)
            .order_by(revenue.desc(), Category.title.asc())
            .all()
        )
    return [
        {
            "categoryId": row.id,
            "categoryTitle": row.title,
            "salesCount": int(row.sales_count),
            "revenue": float(row.revenue),
        }
        for row in rows
    ]


def users_growth(days: int = 30, *, now: datetime | None = None) -> list[dict]:
    since = days_ago(days, now=now).date()

    with role_session("analyst") as session:
        rows = (
            session.query(User.reg_date, func.count(User.id).label("count"))
            .filter(User.reg_date >= since)
            .group_by(User.reg_date)
            .order_by(User.reg_date.asc())
            .all()
        )
    return [{"date": to_iso_date(row.reg_date), "count": int(row.count)} for row in rows]


def _order_row(sale: Sale, app: App, user: User | None = None) -> dict:
    row = {
        "id": sale.id,
        "saleDate": to_utc_z(sale.sale_date),
        "amount": float(sale.amount),
        "status": sale.status,
        "app": {"id": app.id, "title": app.title, "price": float(app.price)},
    }
    if user is not None:
        row["user"] = {"id": user.id, "username": user.username, "email": user.email}
    return row


def list_orders(
    *,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    status: str | None = None,
    user_id: int | None = None,
    app_id: int | None = None,
    limit: int = 50,
    offset: int = 0,
) -> dict:
    """Every customer's orders, newest first, with the unpaginated total."""
    filters = []
    if start_date is not None:
        filters.append(Sale.sale_date >= start_date)
    if end_date is not None:
        filters.append(Sale.sale_date <= end_date)
    if status:
        filters.append(Sale.status == status)
    if user_id is not None:
        filters.append(Sale.user_id == user_id)
    if app_id is not None:
        filters.append(Sale.app_id == app_id)

    with role_session("analyst") as session:
        rows = (
            session.query(Sale, User, App)
            .join(User, User.id == Sale.user_id)
            .join(App, App.id == Sale.app_id)
            .filter(*filters)
            .order_by(Sale.sale_date.desc(), Sale.id.desc())
            .limit(limit)
            .offset(offset)
            .all()
        )
        total = session.query(func.count(Sale.id)).filter(*filters).scalar()

        orders = [_order_row(sale, app, user) for sale, user, app in rows]

    return {"orders": orders, "total": int(total or 0), "limit": limit, "offset": offset}


def user_purchases(user_id: int) -> dict:
    with role_session("analyst") as session:
        user = session.get(User, user_id)
        if user is None:
            raise ReportError("User not found", status_code=404)

        rows = (
            session.query(Sale, App)
            .join(App, App.id == Sale.app_id)
            .filter(Sale.user_id == user_id)
            .order_by(Sale.sale_date.desc(), Sale.id.desc())
            .all()
        )
        return {
            "user": user.to_dict(),
            "purchases": [_order_row(sale, app) for sale, app in rows],
        }
