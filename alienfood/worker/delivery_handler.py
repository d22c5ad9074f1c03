"""
Tool: Service Worker Delivery Handler
Purpose: Render push payloads as notifications and route notification clicks

Runs in the service worker context, independent of the subscription
manager. Every push must produce a visible notification, so malformed or
empty payloads fall back to default text instead of being dropped.

Usage:
    handler = ServiceWorkerHandler(registration, clients)
    await handler.on_push(event_data)
    await handler.on_notification_click(notification)
"""

import json
from abc import ABC, abstractmethod
from typing import Any

from alienfood.client.platform import ServiceWorkerRegistration
from alienfood.logging_config import get_logger
from alienfood.models import (
    DEFAULT_BADGE,
    DEFAULT_BODY,
    DEFAULT_ICON,
    DEFAULT_TAG,
    DEFAULT_TITLE,
    DEFAULT_URL,
    NotificationPayload,
)


logger = get_logger(__name__)


class DisplayedNotification(ABC):
    """A notification the user clicked."""

    @property
    @abstractmethod
    def data(self) -> dict[str, Any] | None:
        ...

    @abstractmethod
    def close(self) -> None:
        ...


class WindowClient(ABC):
    """An open window of the storefront."""

    @property
    @abstractmethod
    def url(self) -> str:
        ...

    @abstractmethod
    async def focus(self) -> "WindowClient":
        ...


class Clients(ABC):
    """The service worker's ``clients`` global."""

    @abstractmethod
    async def match_all(
        self,
        *,
        type: str = "window",
        include_uncontrolled: bool = False,
    ) -> list[WindowClient]:
        ...

    @abstractmethod
    async def open_window(self, url: str) -> WindowClient | None:
        ...


def parse_push_payload(data: bytes | str | None) -> NotificationPayload:
    """
    Decode the data attached to a push event.

    Args:
        data: Raw push data, or None when the push carried no payload

    Returns:
        Parsed payload. Non-JSON (or non-object JSON) data becomes the body.
    """
    if data is None:
        return NotificationPayload(title=DEFAULT_TITLE, body=DEFAULT_BODY)

    text = data.decode("utf-8", errors="replace") if isinstance(data, bytes) else data

    try:
        decoded = json.loads(text)
    except ValueError:
        decoded = None

    if isinstance(decoded, dict):
        return NotificationPayload.from_dict(decoded)

    logger.debug("push_payload_not_json", length=len(text))
    return NotificationPayload(title=DEFAULT_TITLE, body=text or DEFAULT_BODY)


def build_notification(payload: NotificationPayload) -> tuple[str, dict[str, Any]]:
    """
    Map a payload onto ``showNotification`` arguments.

    Returns:
        (title, options)
    """
    title = payload.title or DEFAULT_TITLE
    options = {
        "body": payload.body or payload.message or DEFAULT_BODY,
        "icon": payload.icon or DEFAULT_ICON,
        "badge": payload.badge or DEFAULT_BADGE,
        "data": payload.data or {"url": DEFAULT_URL},
        "tag": payload.tag or DEFAULT_TAG,
        "requireInteraction": False,
    }
    return title, options


async def handle_push(
    registration: ServiceWorkerRegistration,
    data: bytes | str | None,
) -> tuple[str, dict[str, Any]]:
    """Show the notification for one push event."""
    title, options = build_notification(parse_push_payload(data))
    await registration.show_notification(title, options)
    logger.info("push_notification_shown", tag=options["tag"])
    return title, options


async def handle_notification_click(
    notification: DisplayedNotification,
    clients: Clients,
) -> WindowClient | None:
    """
    Focus the window already showing the notification's URL, or open one.

    Returns:
        The focused or newly opened window client
    """
    notification.close()

    data = notification.data or {}
    url_to_open = data.get("url") or DEFAULT_URL

    client_list = await clients.match_all(type="window", include_uncontrolled=True)
    for client in client_list:
        if client.url == url_to_open:
            logger.debug("notification_click_focus", url=url_to_open)
            return await client.focus()

    logger.debug("notification_click_open", url=url_to_open)
    return await clients.open_window(url_to_open)


class ServiceWorkerHandler:
    """Binds the push and notification-click handlers to one worker."""

    def __init__(self, registration: ServiceWorkerRegistration, clients: Clients):
        self.registration = registration
        self.clients = clients

    async def on_push(self, data: bytes | str | None) -> tuple[str, dict[str, Any]]:
        return await handle_push(self.registration, data)

    async def on_notification_click(
        self, notification: DisplayedNotification
    ) -> WindowClient | None:
        return await handle_notification_click(notification, self.clients)
