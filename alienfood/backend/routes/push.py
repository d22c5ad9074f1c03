"""
Push Notification Routes - Web Push API for the storefront

Provides endpoints for Web Push notification management:
- VAPID key retrieval for client subscription
- Subscription management (subscribe, unsubscribe, list)
- Notification history (list, mark read, delete)
"""

from typing import Any

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from alienfood.logging_config import get_logger
from alienfood.push.pending import (
    delete_notification,
    get_notification_history,
    mark_all_read,
    mark_notification_read,
)
from alienfood.push.subscription_store import (
    get_all_subscriptions,
    get_user_subscriptions,
    register_subscription,
    unregister_subscription,
    validate_subscription,
)
from alienfood.push.vapid import get_vapid_public_key
from alienfood.push.web_push import flush_pending


logger = get_logger(__name__)

router = APIRouter()


# =============================================================================
# Request/Response Models
# =============================================================================


class SubscribeRequest(BaseModel):
    """Browser subscription plus the identity it belongs to."""

    subscription: dict[str, Any] | None = Field(None, description="PushSubscription JSON")
    userId: str | None = Field(None, description="User ID (storefront email)")
    username: str | None = Field(None, description="Display name")


class UnsubscribeRequest(BaseModel):
    """Request to drop a stored subscription."""

    endpoint: str | None = Field(None, description="Web Push endpoint URL")
    userId: str | None = Field(None, description="User ID (storefront email)")


class MarkReadRequest(BaseModel):
    """Mark one notification read or unread."""

    userId: str = Field(..., min_length=1, description="User ID (storefront email)")
    notificationId: str = Field(..., min_length=1, description="History entry ID")
    read: bool = Field(True, description="False marks the notification unread")


class MarkAllReadRequest(BaseModel):
    userId: str = Field(..., min_length=1, description="User ID (storefront email)")


class SubscriptionResponse(BaseModel):
    """Stored push subscription."""

    id: str
    user_id: str
    username: str | None
    endpoint: str
    created_at: str | None
    updated_at: str | None


# =============================================================================
# VAPID Key Endpoint
# =============================================================================


@router.get("/vapid")
async def get_vapid_key():
    """
    Get the server's VAPID public key for client subscription.

    This key is needed by the browser to subscribe to push notifications.
    """
    try:
        public_key = get_vapid_public_key()
    except ValueError as e:
        logger.error("vapid_key_unavailable", error=str(e))
        raise HTTPException(status_code=500, detail=str(e))

    return {"publicKey": public_key}


# =============================================================================
# Subscription Endpoints
# =============================================================================


@router.post("/subscribe")
async def subscribe(request: SubscribeRequest):
    """
    Store a push subscription and deliver anything queued for the user.

    Called after the browser successfully subscribes to push notifications.
    """
    if not request.subscription or not request.userId:
        raise HTTPException(status_code=400, detail="subscription and userId required")

    error = validate_subscription(request.subscription)
    if error:
        raise HTTPException(status_code=400, detail=error)

    result = await register_subscription(
        user_id=request.userId,
        subscription=request.subscription,
        username=request.username,
    )
    if not result.get("success"):
        raise HTTPException(status_code=500, detail=result.get("error", "Failed to save subscription"))

    pending_sent = 0
    registered = True
    try:
        flushed = await flush_pending(request.userId, request.subscription)
        pending_sent = flushed["sent"]
        registered = not flushed["unsubscribed"]
    except Exception as e:
        # Queued notifications stay queued; the subscription itself is saved
        logger.error("pending_flush_failed", user_id=request.userId, error=str(e))

    if not registered:
        logger.warning("subscription_gone_during_flush", user_id=request.userId)

    return {
        "message": "subscribed" if registered else "subscription rejected by push service",
        "subscription": request.subscription,
        "pendingSent": pending_sent,
        "registered": registered,
    }


@router.post("/unsubscribe")
async def unsubscribe(request: UnsubscribeRequest):
    """
    Remove a user's stored subscription for an endpoint.
    """
    if not request.endpoint or not request.userId:
        raise HTTPException(status_code=400, detail="endpoint and userId required")

    result = await unregister_subscription(request.userId, request.endpoint)
    if not result.get("success"):
        raise HTTPException(status_code=500, detail=result.get("error", "Failed to unsubscribe"))

    return {"message": "unsubscribed", "removed": result["removed"]}


@router.get("/subscriptions", response_model=list[SubscriptionResponse])
async def list_subscriptions(
    user_id: str | None = Query(None, description="Only this user's subscriptions"),
):
    """
    List stored push subscriptions.
    """
    if user_id:
        subscriptions = await get_user_subscriptions(user_id)
    else:
        subscriptions = await get_all_subscriptions()

    return [
        SubscriptionResponse(
            id=sub["id"],
            user_id=sub["user_id"],
            username=sub.get("username"),
            endpoint=sub["endpoint"],
            created_at=sub.get("created_at"),
            updated_at=sub.get("updated_at"),
        )
        for sub in subscriptions
    ]


# =============================================================================
# History Endpoints
# =============================================================================


@router.get("/notifications")
async def get_push_history(
    user_id: str = Query(..., description="User ID"),
    limit: int = Query(50, ge=1, le=200, description="Maximum results"),
):
    """
    Get notification history for a user.
    """
    history = await get_notification_history(user_id=user_id, limit=limit)

    return {
        "notifications": history,
        "total": len(history),
    }


@router.post("/notifications")
async def mark_push_notification(request: MarkReadRequest):
    """
    Mark one notification as read (or unread with ``read: false``).
    """
    updated = await mark_notification_read(
        user_id=request.userId,
        notification_id=request.notificationId,
        read=request.read,
    )
    if not updated:
        raise HTTPException(status_code=404, detail="notification not found")

    return {"message": "notification updated"}


@router.put("/notifications")
async def mark_all_push_notifications(request: MarkAllReadRequest):
    """
    Mark all of a user's notifications as read.
    """
    updated = await mark_all_read(request.userId)
    return {"message": "all notifications marked read", "updated": updated}


@router.delete("/notifications")
async def delete_push_notification(
    user_id: str = Query(..., min_length=1, description="User ID"),
    notification_id: str = Query(..., min_length=1, description="History entry ID"),
):
    """
    Delete one notification from a user's history.
    """
    deleted = await delete_notification(user_id=user_id, notification_id=notification_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="notification not found")

    return {"message": "notification deleted"}
