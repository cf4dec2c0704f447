"""Webhook API routes for external service integrations."""

import json
import logging

from fastapi import APIRouter, HTTPException, Request, status
from svix.webhooks import Webhook, WebhookVerificationError

from src.core.config import get_settings
from src.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@router.post(
    "/identity",
    status_code=status.HTTP_200_OK,
    summary="Handle identity provider webhooks",
    description="Receives user lifecycle events from the identity provider. Requires valid signature.",
)
async def identity_webhook(request: Request) -> dict[str, str]:
    """Handle identity provider webhook events.

    The svix signature headers are verified against the shared secret
    before the payload is parsed.

    Handles:
    - user.created: Stores the user and accepts invitations sent to their email
    - user.updated: Refreshes the stored name, email and avatar
    - user.deleted: Marks the user FORMER in every company

    Args:
        request: FastAPI request object for reading raw body and headers.

    Returns:
        dict: Acknowledgment message.

    Raises:
        HTTPException: 400 if headers are missing or the signature is invalid.
    """
    payload = await request.body()

    headers = {
        "svix-id": request.headers.get("svix-id", ""),
        "svix-timestamp": request.headers.get("svix-timestamp", ""),
        "svix-signature": request.headers.get("svix-signature", ""),
    }
    if not all(headers.values()):
        logger.error("Missing svix headers in identity webhook request")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing webhook signature headers",
        )

    secret = get_settings().identity_webhook_secret
    if not secret:
        logger.error("Identity webhook secret is not configured")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Webhook secret not configured",
        )

    try:
        Webhook(secret).verify(payload, headers)
    except WebhookVerificationError as e:
        logger.error("Invalid identity webhook signature: %s", str(e))
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid signature",
        ) from e

    event = json.loads(payload)
    event_type = event.get("type", "")
    data = event.get("data") or {}
    logger.info("Processing identity webhook event: %s", event_type)

    service = UserService()
    if event_type == "user.created":
        await service.handle_user_created(data)
    elif event_type == "user.updated":
        await service.upsert_from_identity(data)
    elif event_type == "user.deleted":
        if data.get("id"):
            await service.handle_user_deleted(data["id"])
    else:
        logger.debug("Unhandled identity webhook event type: %s", event_type)

    return {"status": "received"}
