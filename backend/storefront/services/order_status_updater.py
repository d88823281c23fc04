# Overview: Background poller that advances order statuses on a fixed interval.

from __future__ import annotations

import threading

from flask import Flask

from . import order_service


class OrderStatusUpdater:
    """
    Daemon thread calling order_service.advance_order_statuses every
    `interval` seconds inside an application context.

    A failing pass is logged and the loop keeps going.
    """

    def __init__(self, app: Flask, interval: float | None = None):
        self.app = app
        self.interval = interval if interval is not None else app.config["ORDER_STATUS_POLL_SECONDS"]
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self) -> dict | None:
        with self.app.app_context():
            try:
                moved = order_service.advance_order_statuses()
            except Exception:
                self.app.logger.exception("Order status update failed")
                return None
            if moved["processing"] or moved["completed"]:
                self.app.logger.info(
                    "Order statuses advanced: %s to PROCESSING, %s to COMPLETED",
                    moved["processing"], moved["completed"],
                )
            return moved

    def _loop(self) -> None:
        while not self._stop.wait(self.interval):
            self.run_once()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="order-status-updater", daemon=True)
        self._thread.start()
        self.app.logger.info("Order status updater started (every %ss)", self.interval)

    def stop(self, timeout: float | None = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def run_forever(self) -> None:
        """Foreground loop for the CLI; returns on KeyboardInterrupt."""
        try:
            while True:
                self.run_once()
                if self._stop.wait(self.interval):
                    break
        except KeyboardInterrupt:
            self._stop.set()
