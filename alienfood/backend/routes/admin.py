"""
Admin Routes - Notification broadcast

Protected by a shared secret sent in the ``x-admin-secret`` header (or the
``adminSecret`` body field). The secret is checked before the body is
validated, so unauthorized callers never see validation details.
"""

import secrets

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field

from alienfood.config import get_admin_secret
from alienfood.logging_config import get_logger
from alienfood.push.web_push import BROADCAST, send_notification


logger = get_logger(__name__)

router = APIRouter()


class SendNotificationRequest(BaseModel):
    """Request to send a notification to one user or everyone."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=3, max_length=100, description="Notification title")
    message: str = Field(..., min_length=3, max_length=500, description="Notification body")
    userId: str | None = Field(BROADCAST, max_length=100, description="Target user or 'all'")
    url: str = Field("/", description="Page opened when the notification is clicked")
    adminSecret: str | None = Field(None, description="Alternative to the x-admin-secret header")


async def require_admin_secret(
    request: Request,
    x_admin_secret: str | None = Header(None),
) -> None:
    """Dependency that rejects requests without the admin secret."""
    provided = x_admin_secret
    if not provided:
        try:
            body = await request.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            provided = body.get("adminSecret")

    if not isinstance(provided, str):
        provided = ""

    if not secrets.compare_digest(provided.encode(), get_admin_secret().encode()):
        logger.warning("admin_secret_rejected")
        raise HTTPException(status_code=401, detail="not authorized")


@router.post("/send-notification", dependencies=[Depends(require_admin_secret)])
async def send_admin_notification(request: SendNotificationRequest):
    """
    Send a push notification.

    Users without a subscription get the notification queued and delivered
    when they subscribe again.
    """
    result = await send_notification(
        title=request.title,
        message=request.message,
        user_id=request.userId or BROADCAST,
        url=request.url,
    )

    if not result["success"]:
        raise HTTPException(status_code=404, detail=result.get("error", "no subscriptions"))

    if result.get("queued"):
        message = "user offline: saved for later"
    else:
        message = f"Notifications sent: {result['sent']} successful, {result['failed']} failed"

    return {
        "message": message,
        "sent": result["sent"],
        "failed": result["failed"],
        "queued": result.get("queued", False),
        "results": result["results"],
    }
