"""
Tool: Web Push Notification Sender
Purpose: Send Web Push notifications using VAPID

Usage:
    # Send to one user (queued if the user has no subscription yet)
    python -m alienfood.push.web_push send --title "Pedido enviado" --message "Tu pedido va en camino" --user-id ana@example.com

    # Broadcast to every subscriber
    python -m alienfood.push.web_push send --title "Nuevo platillo" --message "Prueba el taco alienígena"

Delivery failures are classified by the push service's status code:
404/410 mean the endpoint is gone and the subscription is deleted; any
other failure keeps the payload in the pending queue so it is delivered
the next time the user subscribes.
"""

import asyncio
import json
import time
import uuid
from typing import Any

from pywebpush import WebPushException, webpush

from alienfood.logging_config import endpoint_fingerprint, get_logger
from alienfood.models import DEFAULT_BADGE, DEFAULT_ICON, DEFAULT_URL, SubscriptionRecord
from alienfood.push.pending import (
    delete_pending,
    enqueue_pending,
    get_pending,
    record_notification,
)
from alienfood.push.subscription_store import (
    get_all_subscriptions,
    get_user_subscriptions,
    remove_subscription,
    unregister_subscription,
)
from alienfood.push.vapid import get_vapid_claims, get_vapid_keys


logger = get_logger(__name__)

GONE_STATUS_CODES = {404, 410}
BROADCAST = "all"


def build_notification_payload(
    title: str,
    message: str,
    url: str = DEFAULT_URL,
) -> dict[str, Any]:
    """
    Build the payload the service worker renders.

    Each payload gets a unique tag so notifications do not replace each other.
    """
    tag = f"notification-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}"
    return {
        "title": title,
        "body": message,
        "message": message,
        "icon": DEFAULT_ICON,
        "badge": DEFAULT_BADGE,
        "data": {
            "url": url,
            "tag": tag,
        },
        "tag": tag,
        "timestamp": int(time.time() * 1000),
        "requireInteraction": False,
        "vibrate": [200, 100, 200],
    }


async def send_push(
    subscription_info: dict,
    payload: dict,
    ttl: int = 86400,
) -> dict:
    """
    Send one Web Push message.

    Args:
        subscription_info: {"endpoint": str, "keys": {"p256dh": str, "auth": str}}
        payload: JSON-serializable notification payload
        ttl: Time to live in seconds (default 24 hours)

    Returns:
        {"success": True, "status_code": int} or
        {"success": False, "error": str, "status_code": int | None,
         "should_unsubscribe": bool}
    """
    fingerprint = endpoint_fingerprint(subscription_info.get("endpoint", ""))

    try:
        vapid_keys = get_vapid_keys()
    except ValueError as e:
        return {
            "success": False,
            "error": str(e),
            "status_code": None,
            "should_unsubscribe": False,
        }

    try:
        response = await asyncio.to_thread(
            webpush,
            subscription_info=subscription_info,
            data=json.dumps(payload),
            vapid_private_key=vapid_keys["private_key"],
            vapid_claims=get_vapid_claims(),
            ttl=ttl,
        )
        logger.debug("webpush_delivered", endpoint=fingerprint)
        return {
            "success": True,
            "status_code": getattr(response, "status_code", 201),
        }

    except WebPushException as e:
        status_code = getattr(e.response, "status_code", None) if e.response is not None else None
        should_unsubscribe = status_code in GONE_STATUS_CODES
        logger.warning(
            "webpush_error",
            endpoint=fingerprint,
            status=status_code or "unknown",
            gone=should_unsubscribe,
        )
        error = str(e)
        if should_unsubscribe:
            error = f"Subscription expired or invalid ({status_code})"
        return {
            "success": False,
            "error": error,
            "status_code": status_code,
            "should_unsubscribe": should_unsubscribe,
        }

    except Exception as e:
        logger.warning("webpush_exception", endpoint=fingerprint, error=str(e)[:160])
        return {
            "success": False,
            "error": str(e),
            "status_code": None,
            "should_unsubscribe": False,
        }


async def flush_pending(user_id: str, subscription_info: dict) -> dict:
    """
    Deliver a user's queued payloads to their new subscription.

    Delivered payloads are removed from the queue; failed ones stay. A gone
    endpoint removes the subscription and stops the flush.

    Returns:
        {"sent": int, "remaining": int, "unsubscribed": bool}
    """
    pending = await get_pending(user_id)
    if not pending:
        return {"sent": 0, "remaining": 0, "unsubscribed": False}

    logger.info("pending_flush_started", user_id=user_id, count=len(pending))

    sent = 0
    unsubscribed = False
    for item in pending:
        result = await send_push(subscription_info, item["payload"])
        if result["success"]:
            await delete_pending(item["id"])
            sent += 1
        elif result.get("should_unsubscribe"):
            await unregister_subscription(user_id, subscription_info.get("endpoint"))
            unsubscribed = True
            break

    return {"sent": sent, "remaining": len(pending) - sent, "unsubscribed": unsubscribed}


async def _deliver_to_subscription(sub: dict, payload: dict) -> dict:
    """Send to one stored subscription and apply the failure policy."""
    user_id = sub["user_id"]

    if not sub.get("endpoint") or not sub.get("p256dh_key") or not sub.get("auth_key"):
        await remove_subscription(sub["id"])
        return {"success": False, "userId": user_id, "error": "Subscription missing keys"}

    subscription_info = SubscriptionRecord.from_dict(sub).get_subscription_info()
    result = await send_push(subscription_info, payload)

    if result["success"]:
        await record_notification(user_id, payload)
        return {"success": True, "userId": user_id}

    if result.get("should_unsubscribe"):
        await remove_subscription(sub["id"])
    else:
        # Temporary failure: keep it for the next subscribe and in the history
        await enqueue_pending(user_id, payload)
        await record_notification(user_id, payload)

    return {"success": False, "userId": user_id, "error": result.get("error")}


async def send_notification(
    title: str,
    message: str,
    user_id: str | None = BROADCAST,
    url: str = DEFAULT_URL,
) -> dict:
    """
    Send a notification to one user or to every subscriber.

    Args:
        title: Notification title
        message: Notification body
        user_id: Target user, or "all"/None to broadcast
        url: Page opened when the notification is clicked

    Returns:
        {"success": True, "sent": int, "failed": int, "results": list,
         "queued": bool} or {"success": False, "error": str, ...}
    """
    targeted = bool(user_id) and user_id != BROADCAST

    if targeted:
        subscriptions = await get_user_subscriptions(user_id)
    else:
        subscriptions = await get_all_subscriptions()

    payload = build_notification_payload(title, message, url=url)

    if not subscriptions:
        if targeted:
            await enqueue_pending(user_id, payload)
            await record_notification(user_id, payload)
            return {
                "success": True,
                "sent": 0,
                "failed": 0,
                "results": [],
                "queued": True,
            }
        return {
            "success": False,
            "error": "No subscriptions",
            "sent": 0,
            "failed": 0,
            "results": [],
            "queued": False,
        }

    logger.info("notification_send_started", targeted=targeted, subscriptions=len(subscriptions))

    results = []
    for sub in subscriptions:
        results.append(await _deliver_to_subscription(sub, payload))

    sent = sum(1 for r in results if r["success"])
    return {
        "success": True,
        "sent": sent,
        "failed": len(results) - sent,
        "results": results,
        "queued": False,
    }


# CLI interface
if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Web Push notification tools")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    send_parser = subparsers.add_parser("send", help="Send a notification")
    send_parser.add_argument("--title", "-t", required=True, help="Notification title")
    send_parser.add_argument("--message", "-m", required=True, help="Notification body")
    send_parser.add_argument("--user-id", "-u", default=BROADCAST, help="Target user (default: all)")
    send_parser.add_argument("--url", default=DEFAULT_URL, help="URL opened on click")

    args = parser.parse_args()

    if args.command == "send":
        result = asyncio.run(send_notification(
            title=args.title,
            message=args.message,
            user_id=args.user_id,
            url=args.url,
        ))
        if result["success"]:
            print(f"Sent: {result['sent']}, failed: {result['failed']}")
            if result.get("queued"):
                print("User has no subscription; notification saved for later")
        else:
            print(f"Failed to send: {result['error']}")

    else:
        parser.print_help()
