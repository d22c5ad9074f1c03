"""
Tool: Pending Notifications and History
Purpose: Keep payloads for users who could not be reached, and the
notification history shown in the storefront

Usage:
    from alienfood.push.pending import enqueue_pending, get_pending, record_notification
    from alienfood.push.pending import mark_notification_read, mark_all_read, delete_notification
"""

import json
import uuid
from datetime import datetime

from alienfood import get_connection
from alienfood.logging_config import get_logger


logger = get_logger(__name__)


async def enqueue_pending(user_id: str, payload: dict) -> dict:
    """
    Queue a payload until the user subscribes again.

    Returns:
        {"success": True, "pending_id": str}
    """
    pending_id = f"pend_{uuid.uuid4().hex[:12]}"

    conn = get_connection()
    cursor = conn.cursor()
    cursor.execute(
        "INSERT INTO pending_notifications (id, user_id, payload, created_at) VALUES (?, ?, ?, ?)",
        (pending_id, user_id, json.dumps(payload), datetime.now().isoformat()),
    )
    conn.commit()
    conn.close()

    logger.info("pending_notification_queued", user_id=user_id, pending_id=pending_id)
    return {"success": True, "pending_id": pending_id}


async def get_pending(user_id: str) -> list[dict]:
    """
    Get queued payloads for a user, oldest first.

    Returns:
        List of {"id", "user_id", "payload", "created_at"} with payload decoded
    """
    conn = get_connection()
    cursor = conn.cursor()
    cursor.execute(
        """
        SELECT * FROM pending_notifications
        WHERE user_id = ?
        ORDER BY created_at ASC
        """,
        (user_id,),
    )
    rows = cursor.fetchall()
    conn.close()

    pending = []
    for row in rows:
        item = dict(row)
        item["payload"] = json.loads(item["payload"]) if item["payload"] else {}
        pending.append(item)
    return pending


async def delete_pending(pending_id: str) -> None:
    conn = get_connection()
    cursor = conn.cursor()
    cursor.execute("DELETE FROM pending_notifications WHERE id = ?", (pending_id,))
    conn.commit()
    conn.close()


async def record_notification(user_id: str, payload: dict) -> str:
    """
    Save a notification to the user's history.

    Returns:
        The history entry ID
    """
    notification_id = f"notif_{uuid.uuid4().hex[:12]}"
    data = payload.get("data")

    conn = get_connection()
    cursor = conn.cursor()
    cursor.execute(
        """
        INSERT INTO notifications
        (id, user_id, title, body, icon, data, tag, read, created_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, 0, ?)
        """,
        (
            notification_id,
            user_id,
            payload.get("title", ""),
            payload.get("body"),
            payload.get("icon"),
            json.dumps(data) if data else None,
            payload.get("tag"),
            datetime.now().isoformat(),
        ),
    )
    conn.commit()
    conn.close()

    return notification_id


async def get_notification_history(user_id: str, limit: int = 50) -> list[dict]:
    """
    Get a user's notification history, newest first.

    Args:
        user_id: The user ID
        limit: Maximum results

    Returns:
        List of notification dicts
    """
    conn = get_connection()
    cursor = conn.cursor()
    cursor.execute(
        """
        SELECT * FROM notifications
        WHERE user_id = ?
        ORDER BY created_at DESC
        LIMIT ?
        """,
        (user_id, limit),
    )
    rows = cursor.fetchall()
    conn.close()

    history = []
    for row in rows:
        item = dict(row)
        item["data"] = json.loads(item["data"]) if item["data"] else {}
        item["read"] = bool(item["read"])
        history.append(item)
    return history


async def mark_notification_read(user_id: str, notification_id: str, read: bool = True) -> bool:
    """
    Mark one of a user's notifications as read or unread.

    Returns:
        False if the notification does not exist or belongs to another user
    """
    read_at = datetime.now().isoformat() if read else None

    conn = get_connection()
    cursor = conn.cursor()
    cursor.execute(
        "UPDATE notifications SET read = ?, read_at = ? WHERE id = ? AND user_id = ?",
        (1 if read else 0, read_at, notification_id, user_id),
    )
    updated = cursor.rowcount
    conn.commit()
    conn.close()

    return updated > 0


async def mark_all_read(user_id: str) -> int:
    """Mark every unread notification of a user as read; returns how many changed."""
    conn = get_connection()
    cursor = conn.cursor()
    cursor.execute(
        "UPDATE notifications SET read = 1, read_at = ? WHERE user_id = ? AND read = 0",
        (datetime.now().isoformat(), user_id),
    )
    updated = cursor.rowcount
    conn.commit()
    conn.close()

    logger.info("notifications_marked_read", user_id=user_id, updated=updated)
    return updated


async def delete_notification(user_id: str, notification_id: str) -> bool:
    conn = get_connection()
    cursor = conn.cursor()
    cursor.execute(
        "DELETE FROM notifications WHERE id = ? AND user_id = ?",
        (notification_id, user_id),
    )
    deleted = cursor.rowcount
    conn.commit()
    conn.close()

    return deleted > 0
