"""
Order status auto-progression.

CREATED -> PROCESSING after 15s, PROCESSING -> COMPLETED after 25s, both
measured from sale_date. The clock is fast-forwarded by passing `now`.
"""

from datetime import timedelta

from storefront.models import Sale
from storefront.models.sales import (
    ORDER_CANCELLED,
    ORDER_COMPLETED,
    ORDER_CREATED,
    ORDER_PROCESSING,
)
from storefront.services import order_service
from storefront.services.order_status_updater import OrderStatusUpdater
from storefront.time_utils import utcnow


def _status(db_session, sale_id):
    db_session.expire_all()
    return db_session.get(Sale, sale_id).status


def _sale_date(db_session, sale_id):
    db_session.expire_all()
    return db_session.get(Sale, sale_id).sale_date


class TestAdvanceOrderStatuses:

    def test_fresh_order_stays_created(self, app, catalog, customer_id, make_order, db_session):
        sale_id = make_order(customer_id, catalog["star_drift_id"])
        moved = order_service.advance_order_statuses()
        assert moved == {"processing": 0, "completed": 0}
        assert _status(db_session, sale_id) == ORDER_CREATED

    def test_created_to_processing_after_15_seconds(self, app, catalog, customer_id, make_order, db_session):
        sale_id = make_order(customer_id, catalog["star_drift_id"])
        sold_at = _sale_date(db_session, sale_id)

        order_service.advance_order_statuses(now=sold_at + timedelta(seconds=14))
        assert _status(db_session, sale_id) == ORDER_CREATED

        moved = order_service.advance_order_statuses(now=sold_at + timedelta(seconds=16))
        assert moved == {"processing": 1, "completed": 0}
        assert _status(db_session, sale_id) == ORDER_PROCESSING

    def test_processing_to_completed_after_25_seconds(self, app, catalog, customer_id, make_order, db_session):
        sale_id = make_order(customer_id, catalog["star_drift_id"])
        sold_at = _sale_date(db_session, sale_id)

        order_service.advance_order_statuses(now=sold_at + timedelta(seconds=16))
        order_service.advance_order_statuses(now=sold_at + timedelta(seconds=24))
        assert _status(db_session, sale_id) == ORDER_PROCESSING

        moved = order_service.advance_order_statuses(now=sold_at + timedelta(seconds=26))
        assert moved == {"processing": 0, "completed": 1}
        assert _status(db_session, sale_id) == ORDER_COMPLETED

    def test_old_created_order_moves_straight_to_completed(
        self, app, catalog, customer_id, make_order, db_session
    ):
        sale_id = make_order(customer_id, catalog["star_drift_id"], age_seconds=60)
        moved = order_service.advance_order_statuses()
        assert moved == {"processing": 1, "completed": 1}
        assert _status(db_session, sale_id) == ORDER_COMPLETED

    def test_terminal_orders_are_untouched(self, app, catalog, customer_id, make_order, db_session):
        cancelled = make_order(customer_id, catalog["star_drift_id"], status=ORDER_CANCELLED, age_seconds=60)
        order_service.advance_order_statuses(now=utcnow() + timedelta(hours=1))
        assert _status(db_session, cancelled) == ORDER_CANCELLED

    def test_custom_thresholds(self, app, catalog, customer_id, make_order, db_session):
        sale_id = make_order(customer_id, catalog["star_drift_id"], age_seconds=3)
        order_service.advance_order_statuses(processing_after=1, completed_after=100)
        assert _status(db_session, sale_id) == ORDER_PROCESSING

    def test_completed_order_shows_download_link(
        self, client, catalog, customer_id, customer_headers, make_order
    ):
        make_order(customer_id, catalog["star_drift_id"], age_seconds=30)
        order_service.advance_order_statuses()

        orders = client.get("/api/orders", headers=customer_headers).get_json()
        assert orders[0]["status"] == ORDER_COMPLETED
        assert orders[0]["downloadLink"]


class TestOrderStatusUpdater:

    def test_run_once_reports_moves(self, app, catalog, customer_id, make_order):
        make_order(customer_id, catalog["star_drift_id"], age_seconds=20)
        updater = OrderStatusUpdater(app, interval=60)
        assert updater.run_once() == {"processing": 1, "completed": 0}

    def test_run_once_swallows_and_logs_errors(self, app, monkeypatch, caplog):
        def boom(*args, **kwargs):
            raise RuntimeError("database went away")

        monkeypatch.setattr(order_service, "advance_order_statuses", boom)
        updater = OrderStatusUpdater(app, interval=60)
        assert updater.run_once() is None
        assert "Order status update failed" in caplog.text

    def test_start_and_stop(self, app):
        updater = OrderStatusUpdater(app, interval=60)
        updater.start()
        assert updater.running
        updater.stop(timeout=2)
        assert not updater.running

    def test_interval_defaults_to_config(self, app):
        assert OrderStatusUpdater(app).interval == app.config["ORDER_STATUS_POLL_SECONDS"]
