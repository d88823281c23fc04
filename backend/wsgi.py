# backend/wsgi.py
import logging
import os

from storefront import create_app
from storefront.services.order_status_updater import OrderStatusUpdater


logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

app = create_app()

# `flask <group> <command>` imports this module too; those runs use
# `flask orders run-updater` instead of the background thread.
order_status_updater = OrderStatusUpdater(app)
if app.config["ORDER_STATUS_UPDATER_ENABLED"] and os.environ.get("FLASK_RUN_FROM_CLI") != "true":
    order_status_updater.start()


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.environ.get("PORT", "5001")))
