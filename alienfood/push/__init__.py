"""Server-side push components: VAPID keys, subscription store, sender."""

from alienfood.push.vapid import (
    generate_vapid_keys,
    get_vapid_keys,
    get_vapid_public_key,
)
from alienfood.push.subscription_store import (
    register_subscription,
    unregister_subscription,
    get_user_subscriptions,
    get_all_subscriptions,
    validate_subscription,
)
from alienfood.push.web_push import (
    build_notification_payload,
    flush_pending,
    send_notification,
    send_push,
)

__all__ = [
    "generate_vapid_keys",
    "get_vapid_keys",
    "get_vapid_public_key",
    "register_subscription",
    "unregister_subscription",
    "get_user_subscriptions",
    "get_all_subscriptions",
    "validate_subscription",
    "build_notification_payload",
    "flush_pending",
    "send_notification",
    "send_push",
]
