"""Browser-side push subscription lifecycle."""

from alienfood.client.cleaner import reset_all
from alienfood.client.keys import (
    bytes_to_url_base64,
    resolve_public_key,
    url_base64_to_bytes,
)
from alienfood.client.permission import request_permission
from alienfood.client.subscription_manager import (
    SubscriptionManager,
    SubscriptionRegistrationError,
)

__all__ = [
    "reset_all",
    "bytes_to_url_base64",
    "resolve_public_key",
    "url_base64_to_bytes",
    "request_permission",
    "SubscriptionManager",
    "SubscriptionRegistrationError",
]
