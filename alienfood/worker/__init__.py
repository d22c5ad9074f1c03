"""Service worker side: push delivery and notification clicks."""

from alienfood.worker.delivery_handler import (
    ServiceWorkerHandler,
    build_notification,
    handle_notification_click,
    handle_push,
    parse_push_payload,
)

__all__ = [
    "ServiceWorkerHandler",
    "build_notification",
    "handle_notification_click",
    "handle_push",
    "parse_push_payload",
]
