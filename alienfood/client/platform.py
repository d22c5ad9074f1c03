"""
Browser platform interfaces used by the push client.

The subscription lifecycle never talks to a browser directly. A host
(browser bridge, test harness) implements these classes to expose the
Notification API, the service worker container and its PushManager.
"""

from abc import ABC, abstractmethod
from typing import Any

from alienfood.models import PermissionState


class NotificationCapability(ABC):
    """The ``Notification`` global: current permission and the prompt."""

    @property
    @abstractmethod
    def permission(self) -> PermissionState:
        """Current permission state."""
        ...

    @abstractmethod
    async def request_permission(self) -> PermissionState:
        """
        Show the interactive permission prompt.

        Returns:
            The state chosen by the user
        """
        ...


class PlatformSubscription(ABC):
    """A platform-issued push subscription (``PushSubscription``)."""

    @property
    @abstractmethod
    def endpoint(self) -> str:
        """Push service endpoint URL, unique per client installation."""
        ...

    @property
    @abstractmethod
    def keys(self) -> dict[str, str]:
        """Encryption material: ``p256dh`` and ``auth`` (base64url)."""
        ...

    @property
    def expiration_time(self) -> int | None:
        return None

    @abstractmethod
    async def unsubscribe(self) -> bool:
        """Drop this subscription from the push service."""
        ...

    def to_json(self) -> dict[str, Any]:
        """Serialize the way ``PushSubscription.toJSON()`` does."""
        return {
            "endpoint": self.endpoint,
            "expirationTime": self.expiration_time,
            "keys": dict(self.keys),
        }


class PushManager(ABC):
    """The ``PushManager`` of a service worker registration."""

    @abstractmethod
    async def get_subscription(self) -> PlatformSubscription | None:
        """Current subscription, or None when there is none."""
        ...

    @abstractmethod
    async def subscribe(
        self,
        *,
        user_visible_only: bool,
        application_server_key: bytes,
    ) -> PlatformSubscription:
        """Create (or return the existing) subscription for this registration."""
        ...


class ServiceWorkerRegistration(ABC):
    """An active service worker registration."""

    @property
    @abstractmethod
    def push_manager(self) -> PushManager | None:
        """None when the runtime has no Push API."""
        ...

    @abstractmethod
    async def show_notification(self, title: str, options: dict[str, Any]) -> None:
        """Display a system notification."""
        ...


class ServiceWorkerContainer(ABC):
    """``navigator.serviceWorker``."""

    @abstractmethod
    async def ready(self) -> ServiceWorkerRegistration:
        """Suspend until the worker is installed and active."""
        ...
