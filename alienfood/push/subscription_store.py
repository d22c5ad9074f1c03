"""
Tool: Push Subscription Store
Purpose: Store and manage Web Push subscriptions on the backend

Each user keeps a single subscription: subscribing again from another
browser replaces the stored endpoint and keys.

Usage:
    from alienfood.push.subscription_store import (
        register_subscription,
        unregister_subscription,
        get_user_subscriptions,
        get_all_subscriptions,
    )
"""

import asyncio
from datetime import datetime
from typing import Any
from urllib.parse import urlparse

from alienfood import get_connection
from alienfood.logging_config import endpoint_fingerprint, get_logger
from alienfood.models import SubscriptionRecord


logger = get_logger(__name__)


def validate_subscription(subscription: Any) -> str | None:
    """
    Check the shape of a subscription sent by a browser.

    Returns:
        Error message, or None if the subscription is usable
    """
    if not subscription or not isinstance(subscription, dict):
        return "Subscription is required"

    endpoint = subscription.get("endpoint")
    if not endpoint or not isinstance(endpoint, str):
        return "Subscription endpoint is required"

    keys = subscription.get("keys")
    if not keys or not isinstance(keys, dict):
        return "Subscription keys are required"

    if not keys.get("p256dh") or not isinstance(keys.get("p256dh"), str):
        return "Subscription p256dh key is required"

    if not keys.get("auth") or not isinstance(keys.get("auth"), str):
        return "Subscription auth key is required"

    parsed = urlparse(endpoint)
    if not parsed.scheme or not parsed.netloc:
        return "Subscription endpoint is not a valid URL"

    return None


async def register_subscription(
    user_id: str,
    subscription: dict,
    username: str | None = None,
) -> dict:
    """
    Store a user's push subscription, replacing any previous one.

    Args:
        user_id: The user ID (storefront email)
        subscription: Browser subscription JSON (endpoint + keys)
        username: Display name

    Returns:
        {"success": True, "subscription_id": str, "updated": bool}
        or {"success": False, "error": str}
    """
    error = validate_subscription(subscription)
    if error:
        return {"success": False, "error": error}

    endpoint = subscription["endpoint"]
    p256dh_key = subscription["keys"]["p256dh"]
    auth_key = subscription["keys"]["auth"]
    now = datetime.now().isoformat()

    conn = get_connection()
    cursor = conn.cursor()

    try:
        # An endpoint belongs to one browser; if another user held it, they no longer do
        cursor.execute(
            "DELETE FROM push_subscriptions WHERE endpoint = ? AND user_id != ?",
            (endpoint, user_id),
        )

        cursor.execute(
            "SELECT id FROM push_subscriptions WHERE user_id = ? ORDER BY created_at LIMIT 1",
            (user_id,),
        )
        existing = cursor.fetchone()

        if existing:
            subscription_id = existing["id"]
            cursor.execute(
                "DELETE FROM push_subscriptions WHERE user_id = ? AND id != ?",
                (user_id, subscription_id),
            )
            cursor.execute(
                """
                UPDATE push_subscriptions
                SET endpoint = ?,
                    p256dh_key = ?,
                    auth_key = ?,
                    username = ?,
                    updated_at = ?
                WHERE id = ?
                """,
                (endpoint, p256dh_key, auth_key, username, now, subscription_id),
            )
            updated = True
        else:
            subscription_id = SubscriptionRecord.generate_id()
            cursor.execute(
                """
                INSERT INTO push_subscriptions
                (id, user_id, username, endpoint, p256dh_key, auth_key, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (subscription_id, user_id, username, endpoint, p256dh_key, auth_key, now, now),
            )
            updated = False

        conn.commit()
        conn.close()

        logger.info(
            "subscription_stored",
            user_id=user_id,
            endpoint=endpoint_fingerprint(endpoint),
            updated=updated,
        )
        return {"success": True, "subscription_id": subscription_id, "updated": updated}

    except Exception as e:
        conn.close()
        logger.error("subscription_store_failed", user_id=user_id, error=str(e))
        return {"success": False, "error": str(e)}


async def unregister_subscription(user_id: str, endpoint: str | None = None) -> dict:
    """
    Delete a user's subscription.

    Args:
        user_id: The user ID
        endpoint: Only delete the record with this endpoint; all of the
            user's records when None

    Returns:
        {"success": True, "removed": int} or {"success": False, "error": str}
    """
    conn = get_connection()
    cursor = conn.cursor()

    try:
        if endpoint:
            cursor.execute(
                "DELETE FROM push_subscriptions WHERE user_id = ? AND endpoint = ?",
                (user_id, endpoint),
            )
        else:
            cursor.execute(
                "DELETE FROM push_subscriptions WHERE user_id = ?",
                (user_id,),
            )
        removed = cursor.rowcount
        conn.commit()
        conn.close()

        logger.info("subscription_removed", user_id=user_id, removed=removed)
        return {"success": True, "removed": removed}

    except Exception as e:
        conn.close()
        return {"success": False, "error": str(e)}


async def remove_subscription(subscription_id: str) -> dict:
    """
    Delete a subscription by ID.

    Used when the push service reports the endpoint as gone (404/410).
    """
    conn = get_connection()
    cursor = conn.cursor()

    try:
        cursor.execute(
            "DELETE FROM push_subscriptions WHERE id = ?",
            (subscription_id,),
        )
        removed = cursor.rowcount
        conn.commit()
        conn.close()
        return {"success": True, "removed": removed}

    except Exception as e:
        conn.close()
        return {"success": False, "error": str(e)}


async def get_user_subscriptions(user_id: str) -> list[dict]:
    """
    Get all subscriptions for a user.

    Returns:
        List of subscription dicts
    """
    conn = get_connection()
    cursor = conn.cursor()

    cursor.execute(
        """
        SELECT * FROM push_subscriptions
        WHERE user_id = ?
        ORDER BY created_at DESC
        """,
        (user_id,),
    )
    rows = cursor.fetchall()
    conn.close()

    return [dict(row) for row in rows]


async def get_all_subscriptions() -> list[dict]:
    """Get every stored subscription."""
    conn = get_connection()
    cursor = conn.cursor()

    cursor.execute("SELECT * FROM push_subscriptions ORDER BY created_at DESC")
    rows = cursor.fetchall()
    conn.close()

    return [dict(row) for row in rows]


async def get_subscription_stats() -> dict:
    """
    Get subscription statistics.

    Returns:
        {"total": int, "users": int, "pending": int}
    """
    conn = get_connection()
    cursor = conn.cursor()

    cursor.execute(
        """
        SELECT
            COUNT(*) as total,
            COUNT(DISTINCT user_id) as users
        FROM push_subscriptions
        """
    )
    row = cursor.fetchone()

    cursor.execute("SELECT COUNT(*) as pending FROM pending_notifications")
    pending = cursor.fetchone()
    conn.close()

    stats = dict(row) if row else {"total": 0, "users": 0}
    stats["pending"] = pending["pending"] if pending else 0
    return stats


# CLI interface
if __name__ == "__main__":
    import argparse
    import json

    parser = argparse.ArgumentParser(description="Push subscription management")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    list_parser = subparsers.add_parser("list", help="List subscriptions")
    list_parser.add_argument("--user-id", "-u", help="Only this user")

    subparsers.add_parser("stats", help="Get subscription statistics")

    args = parser.parse_args()

    if args.command == "list":
        if args.user_id:
            subs = asyncio.run(get_user_subscriptions(args.user_id))
        else:
            subs = asyncio.run(get_all_subscriptions())
        print(f"Found {len(subs)} subscriptions:")
        for sub in subs:
            print(f"  {sub['id']}: {sub['user_id']} ({endpoint_fingerprint(sub['endpoint'])})")

    elif args.command == "stats":
        print(json.dumps(asyncio.run(get_subscription_stats()), indent=2))

    else:
        parser.print_help()
