"""
Tool: Notification Permission Gate
Purpose: Ask for notification permission at most once

A denied permission is final until the user changes browser settings, so
the prompt is only shown while the state is still ``default``.
"""

from alienfood.client.platform import NotificationCapability
from alienfood.logging_config import get_logger
from alienfood.models import PermissionState


logger = get_logger(__name__)


async def request_permission(notifications: NotificationCapability | None) -> bool:
    """
    Make sure notifications may be shown.

    Args:
        notifications: The runtime's Notification API, or None if absent

    Returns:
        True if permission is granted
    """
    if notifications is None:
        logger.info("notifications_unsupported")
        return False

    current = PermissionState(notifications.permission)

    if current is PermissionState.GRANTED:
        return True

    if current is PermissionState.DENIED:
        logger.info("notification_permission_denied")
        return False

    result = PermissionState(await notifications.request_permission())
    logger.info("notification_permission_prompted", result=result.value)
    return result is PermissionState.GRANTED
