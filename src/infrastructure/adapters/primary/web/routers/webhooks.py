"""Inbound chat platform webhook endpoint."""

import json
import logging
from typing import Any

from fastapi import APIRouter, BackgroundTasks, Depends, Header, HTTPException, Request, status

from src.configuration.di_container import DIContainer
from src.infrastructure.adapters.primary.web.dependencies import get_container

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@router.post("/stream")
async def stream_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    x_signature: str | None = Header(default=None, alias="X-Signature"),
    container: DIContainer = Depends(get_container),
) -> dict[str, Any]:
    """Receive a Stream Chat event and hand it to the channel listeners.

    Listeners run after the response is sent so the platform's webhook
    timeout does not cover model latency.
    """
    body = await request.body()

    if container.settings.stream_verify_webhooks:
        if not x_signature or not container.chat_client().verify_webhook(body, x_signature):
            logger.warning("[Webhook] Rejected Stream Chat webhook with invalid signature")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid webhook signature"
            )

    try:
        event = json.loads(body)
    except (ValueError, UnicodeDecodeError) as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid JSON payload: {e}"
        ) from e
    if not isinstance(event, dict):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Event payload must be an object"
        )

    logger.debug(f"[Webhook] Received {event.get('type')} for {event.get('cid')}")
    background_tasks.add_task(container.event_hub().dispatch, event)
    return {"status": "ok"}
