"""
Tool: Push Subscription Manager (client side)
Purpose: Subscribe/unsubscribe this browser and keep the backend in sync

Usage:
    from alienfood.client import SubscriptionManager
    from alienfood.models import IdentityContext

    manager = SubscriptionManager(navigator_service_worker)
    identity = IdentityContext(user_id="ana@example.com", username="Ana")

    subscription = await manager.subscribe(identity)
    result = await manager.unsubscribe(identity)
    if not result.backend_acknowledged:
        ...  # backend still holds the record

    # On page load: re-subscribe if permission survived but the subscription did not
    await manager.check_and_renew(notification_api, identity)
"""

import httpx

from alienfood.client.keys import resolve_public_key
from alienfood.client.platform import (
    NotificationCapability,
    PlatformSubscription,
    PushManager,
    ServiceWorkerContainer,
)
from alienfood.config import get_api_base_url
from alienfood.logging_config import endpoint_fingerprint, get_logger
from alienfood.models import IdentityContext, PermissionState, UnsubscribeResult


logger = get_logger(__name__)

SUBSCRIBE_PATH = "/push/subscribe"
UNSUBSCRIBE_PATH = "/push/unsubscribe"


class SubscriptionRegistrationError(RuntimeError):
    """The backend refused to store a subscription the platform created."""

    def __init__(self, status_code: int, detail: str | None = None):
        self.status_code = status_code
        self.detail = detail
        message = f"Error saving push subscription (status: {status_code})"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class SubscriptionManager:
    """
    Orchestrates the platform push subscription and its backend record.

    No retries and no single-flighting: concurrent ``subscribe`` calls race
    on the platform's single subscription slot.
    """

    def __init__(
        self,
        container: ServiceWorkerContainer,
        http_client: httpx.AsyncClient | None = None,
        api_base_url: str | None = None,
        fallback_key: str | None = None,
    ):
        self.container = container
        self.http_client = http_client
        self.api_base_url = api_base_url
        self.fallback_key = fallback_key

    @property
    def base_url(self) -> str:
        return (self.api_base_url or get_api_base_url()).rstrip("/")

    async def _push_manager(self) -> PushManager:
        registration = await self.container.ready()
        push_manager = registration.push_manager
        if push_manager is None:
            raise RuntimeError("Push notifications are not available in this browser")
        return push_manager

    async def _post(self, path: str, payload: dict) -> httpx.Response:
        url = self.base_url + path
        if self.http_client is not None:
            return await self.http_client.post(url, json=payload)
        async with httpx.AsyncClient() as client:
            return await client.post(url, json=payload)

    async def subscribe(self, identity: IdentityContext | None = None) -> PlatformSubscription:
        """
        Subscribe this browser and register the subscription with the backend.

        Args:
            identity: Who the subscription belongs to (fields may be None)

        Returns:
            The platform subscription

        Raises:
            SubscriptionRegistrationError: Backend answered with a non-2xx
                status. The platform subscription is left in place.
        """
        identity = identity or IdentityContext()

        try:
            push_manager = await self._push_manager()

            application_server_key = await resolve_public_key(
                http_client=self.http_client,
                api_base_url=self.base_url,
                fallback_key=self.fallback_key,
            )

            subscription = await push_manager.subscribe(
                user_visible_only=True,
                application_server_key=application_server_key,
            )
            fingerprint = endpoint_fingerprint(subscription.endpoint)
            logger.info("push_subscription_created", endpoint=fingerprint)

            response = await self._post(
                SUBSCRIBE_PATH,
                {
                    "subscription": subscription.to_json(),
                    "userId": identity.user_id,
                    "username": identity.username,
                },
            )

            if not response.is_success:
                raise SubscriptionRegistrationError(
                    response.status_code, _error_detail(response)
                )

            logger.info(
                "push_subscription_registered",
                endpoint=fingerprint,
                user_id=identity.user_id,
            )
            return subscription

        except Exception:
            logger.exception("push_subscribe_failed", user_id=identity.user_id)
            raise

    async def unsubscribe(self, identity: IdentityContext | None = None) -> UnsubscribeResult:
        """
        Unsubscribe this browser and tell the backend to drop the record.

        Returns:
            UnsubscribeResult; ``removed`` is False (and the backend is not
            contacted) when there was no subscription. A backend failure is
            reported in the result, not raised.
        """
        identity = identity or IdentityContext()

        try:
            push_manager = await self._push_manager()
            subscription = await push_manager.get_subscription()
            if subscription is None:
                return UnsubscribeResult(removed=False)

            endpoint = subscription.endpoint
            await subscription.unsubscribe()
            logger.info("push_subscription_removed", endpoint=endpoint_fingerprint(endpoint))

        except Exception:
            logger.exception("push_unsubscribe_failed", user_id=identity.user_id)
            raise

        try:
            response = await self._post(
                UNSUBSCRIBE_PATH,
                {"endpoint": endpoint, "userId": identity.user_id},
            )
        except httpx.HTTPError as e:
            logger.warning("push_unsubscribe_backend_unreachable", error=str(e))
            return UnsubscribeResult(removed=True, backend_acknowledged=False, error=str(e))

        if not response.is_success:
            detail = _error_detail(response) or f"status {response.status_code}"
            logger.warning(
                "push_unsubscribe_backend_rejected",
                status=response.status_code,
                detail=detail,
            )
            return UnsubscribeResult(removed=True, backend_acknowledged=False, error=detail)

        return UnsubscribeResult(removed=True, backend_acknowledged=True)

    async def is_subscribed(self) -> bool:
        """Whether the platform currently holds a subscription for this worker."""
        try:
            push_manager = await self._push_manager()
            return await push_manager.get_subscription() is not None
        except Exception as e:
            logger.warning("push_status_check_failed", error=str(e))
            return False

    async def check_and_renew(
        self,
        notifications: NotificationCapability | None,
        identity: IdentityContext | None = None,
    ) -> PlatformSubscription | None:
        """
        Re-subscribe when permission is granted but the platform lost the subscription.

        Meant for page load. Never prompts and never raises: a failed renewal
        is logged and None is returned.

        Returns:
            The new subscription, or None when nothing was renewed
        """
        if notifications is None or notifications.permission != PermissionState.GRANTED:
            return None

        try:
            push_manager = await self._push_manager()
            if await push_manager.get_subscription() is not None:
                return None
        except Exception as e:
            logger.warning("push_renewal_check_failed", error=str(e))
            return None

        logger.info("push_subscription_renewing", user_id=identity.user_id if identity else None)
        try:
            return await self.subscribe(identity)
        except Exception as e:
            logger.warning("push_renewal_failed", error=str(e))
            return None


def _error_detail(response: httpx.Response) -> str | None:
    """Pull the ``message``/``detail`` field out of an error response, if any."""
    try:
        data = response.json()
    except ValueError:
        return None
    if isinstance(data, dict):
        detail = data.get("message") or data.get("detail")
        if isinstance(detail, str):
            return detail
    return None
