"""Messaging platform webhook route."""

import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.config import Settings, get_settings
from app.db.dependencies import get_db
from app.schemas.telegram import WebhookAck
from app.services.responder import ResponseGenerator, get_default_responder
from app.services.telegram import MessageSender, build_telegram_client
from app.services.webhook import handle_update

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/telegram")


def get_message_sender(settings: Settings = Depends(get_settings)) -> MessageSender | None:
    """Return the platform client, or None when no bot token is configured."""

    if not settings.bot_token:
        return None
    return build_telegram_client(settings)


def get_responder(settings: Settings = Depends(get_settings)) -> ResponseGenerator:
    return get_default_responder(settings)


@router.post("/webhook", response_model=WebhookAck, response_model_exclude_none=True)
async def telegram_webhook(
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    sender: MessageSender | None = Depends(get_message_sender),
    responder: ResponseGenerator = Depends(get_responder),
):
    """Persist an inbound user message and deliver the chunked reply."""

    if not settings.bot_token or sender is None:
        return WebhookAck(skipped="no token")
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.warning("webhook.update_ignored reason=unparseable_body")
        return WebhookAck()

    try:
        await run_in_threadpool(
            handle_update,
            db,
            payload,
            settings=settings,
            sender=sender,
            responder=responder,
        )
    except Exception:
        logger.exception("webhook.processing_failed")
        return JSONResponse(
            status_code=500,
            content=WebhookAck(ok=False, error="webhook processing failed").model_dump(exclude_none=True),
        )
    return WebhookAck()
