"""
Tool: Push Subscription Cleaner
Purpose: Clear stale or corrupted subscriptions before subscribing again

Some browsers keep a broken subscription around after a failed subscribe
(typically surfacing as an AbortError). Unsubscribing repeatedly, with a
short pause for the platform state to settle, clears it. This is a
best-effort routine: failures end the loop instead of propagating.

Usage:
    from alienfood.client.cleaner import reset_all

    if await reset_all(navigator_service_worker):
        await manager.subscribe(identity)
"""

import asyncio
from collections.abc import Awaitable, Callable

from alienfood.client.platform import ServiceWorkerContainer
from alienfood.config import load_config
from alienfood.logging_config import get_logger
from alienfood.models import CleanupPolicy


logger = get_logger(__name__)

Sleep = Callable[[float], Awaitable[None]]


def get_cleanup_policy() -> CleanupPolicy:
    """Cleanup policy from the ``cleanup`` config section."""
    return CleanupPolicy.from_config(load_config().get("cleanup"))


async def reset_all(
    container: ServiceWorkerContainer | None,
    policy: CleanupPolicy | None = None,
    sleep: Sleep = asyncio.sleep,
) -> bool:
    """
    Unsubscribe every subscription the platform still reports.

    Args:
        container: The service worker container, or None if unsupported
        policy: Attempt limit and waits (default: configured policy)
        sleep: Coroutine used for the waits

    Returns:
        True if at least one subscription was removed
    """
    if container is None:
        logger.warning("push_reset_unsupported", reason="no service worker")
        return False

    policy = policy or get_cleanup_policy()

    try:
        registration = await container.ready()
    except Exception as e:
        logger.error("push_reset_failed", error=str(e))
        return False

    push_manager = registration.push_manager
    if push_manager is None:
        logger.warning("push_reset_unsupported", reason="no push manager")
        return False

    cleaned = False
    for attempt in range(policy.max_attempts):
        try:
            subscription = await push_manager.get_subscription()
            if subscription is None:
                break
            logger.info("push_reset_unsubscribing", attempt=attempt + 1)
            await subscription.unsubscribe()
            cleaned = True
            await sleep(policy.cooldown_seconds)
        except Exception as e:
            logger.debug("push_reset_stopped", attempt=attempt + 1, error=str(e))
            break

    if cleaned:
        logger.info("push_reset_complete")
        await sleep(policy.settle_seconds)

    return cleaned
