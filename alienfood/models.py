"""
Tool: Push Notification Models
Purpose: Data structures shared by the client, worker and backend

Usage:
    from alienfood.models import (
        CleanupPolicy,
        IdentityContext,
        NotificationPayload,
        PermissionState,
        SubscriptionRecord,
        UnsubscribeResult,
    )
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


DEFAULT_TITLE = "Alien Food"
DEFAULT_BODY = "Tienes una nueva notificación"
DEFAULT_ICON = "/img/favicons/android-chrome-192x192.png"
DEFAULT_BADGE = "/img/favicons/android-chrome-192x192.png"
DEFAULT_TAG = "alien-food-notification"
DEFAULT_URL = "/"


class PermissionState(str, Enum):
    """Browser notification permission states."""

    GRANTED = "granted"
    DENIED = "denied"
    DEFAULT = "default"


@dataclass(frozen=True)
class IdentityContext:
    """
    Who is subscribing.

    Passed explicitly to the subscription manager; both fields are optional
    because anonymous visitors can also receive notifications.
    """

    user_id: str | None = None
    username: str | None = None


@dataclass
class UnsubscribeResult:
    """
    Outcome of an unsubscribe call.

    Truthiness follows ``removed`` so the result can be used as a plain bool.
    ``backend_acknowledged`` is None when the backend was never contacted.
    """

    removed: bool
    backend_acknowledged: bool | None = None
    error: str | None = None

    def __bool__(self) -> bool:
        return self.removed


@dataclass(frozen=True)
class CleanupPolicy:
    """Attempt limit and stabilization waits used when resetting subscriptions."""

    max_attempts: int = 5
    cooldown_seconds: float = 1.0
    settle_seconds: float = 2.0

    @classmethod
    def from_config(cls, config: dict[str, Any] | None) -> "CleanupPolicy":
        config = config or {}
        return cls(
            max_attempts=int(config.get("max_attempts", cls.max_attempts)),
            cooldown_seconds=float(config.get("cooldown_seconds", cls.cooldown_seconds)),
            settle_seconds=float(config.get("settle_seconds", cls.settle_seconds)),
        )

    @property
    def max_wait_seconds(self) -> float:
        """Upper bound of time spent sleeping by one reset."""
        return self.max_attempts * self.cooldown_seconds + self.settle_seconds


@dataclass
class NotificationPayload:
    """
    Message delivered by the push service to the service worker.

    Every field is optional; ``message`` is an alias some senders use for
    ``body``.
    """

    title: str | None = None
    body: str | None = None
    message: str | None = None
    icon: str | None = None
    badge: str | None = None
    data: dict[str, Any] | None = None
    tag: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NotificationPayload":
        """Create from a decoded JSON object, ignoring unknown keys."""
        extra = data.get("data")
        return cls(
            title=data.get("title"),
            body=data.get("body"),
            message=data.get("message"),
            icon=data.get("icon"),
            badge=data.get("badge"),
            data=extra if isinstance(extra, dict) else None,
            tag=data.get("tag"),
        )


@dataclass
class SubscriptionRecord:
    """
    Stored Web Push subscription.

    One record per user; the endpoint is unique across users.
    """

    id: str
    user_id: str
    endpoint: str
    p256dh_key: str
    auth_key: str
    username: str | None = None
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SubscriptionRecord":
        """Create from a database row dict."""
        data = data.copy()
        for field_name in ["created_at", "updated_at"]:
            if isinstance(data.get(field_name), str):
                data[field_name] = datetime.fromisoformat(data[field_name])
        return cls(**data)

    @staticmethod
    def generate_id() -> str:
        """Generate a new subscription ID."""
        return f"sub_{uuid.uuid4().hex[:12]}"

    def get_subscription_info(self) -> dict:
        """Get subscription info for pywebpush."""
        return {
            "endpoint": self.endpoint,
            "keys": {
                "p256dh": self.p256dh_key,
                "auth": self.auth_key,
            },
        }
