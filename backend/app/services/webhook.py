"""Webhook ingestion: decode an update, persist the turn, deliver the chunked reply."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.config import Settings
from app.models.message import ROLE_ASSISTANT
from app.schemas.telegram import TelegramMessage
from app.services.chunking import split_into_chunks
from app.services.grouping import conversation_lock
from app.services.messages import create_message, create_user_message
from app.services.responder import ResponseGenerator
from app.services.telegram import MessageSender, send_with_fallback

logger = logging.getLogger(__name__)

USER_MESSAGE_TYPE = "user_message"


@dataclass(slots=True)
class DecodedUpdate:
    """Tagged view of an inbound update."""

    kind: Literal["message", "edited_message", "unrecognized"]
    message: TelegramMessage | None = None


@dataclass(slots=True)
class WebhookOutcome:
    """What happened to one update."""

    processed: bool
    conversation_id: str | None = None
    group_id: int | None = None
    chunks_sent: int = 0
    reason: str | None = None


def decode_update(payload: Any) -> DecodedUpdate:
    """Classify an update; unknown or invalid shapes decode as ``unrecognized``."""

    if not isinstance(payload, dict):
        return DecodedUpdate(kind="unrecognized")
    for kind in ("message", "edited_message"):
        raw = payload.get(kind)
        if raw is None:
            continue
        try:
            return DecodedUpdate(kind=kind, message=TelegramMessage.model_validate(raw))
        except ValidationError:
            logger.warning("webhook.update_invalid kind=%s", kind)
            return DecodedUpdate(kind="unrecognized")
    return DecodedUpdate(kind="unrecognized")


def extract_text(message: TelegramMessage) -> str | None:
    """Return the user's text, preferring a structured Web App payload."""

    web_app_data = message.web_app_data.data if message.web_app_data else None
    if web_app_data:
        try:
            parsed = json.loads(web_app_data)
        except json.JSONDecodeError:
            return web_app_data
        if isinstance(parsed, dict) and parsed.get("type") == USER_MESSAGE_TYPE:
            text = parsed.get("text")
            if text is not None and not isinstance(text, str):
                logger.warning(
                    "webhook.update_ignored reason=non_string_text text_type=%s",
                    type(text).__name__,
                )
                return None
            return text or None
        return web_app_data
    return message.text or None


def handle_update(
    db: Session,
    payload: Any,
    *,
    settings: Settings,
    sender: MessageSender,
    responder: ResponseGenerator,
) -> WebhookOutcome:
    """Process one webhook update end to end.

    Sends and inserts are not transactional: a chunk that was delivered but
    failed to persist (or the reverse) is logged and the error propagates.
    """

    update = decode_update(payload)
    if update.message is None:
        logger.info("webhook.update_ignored reason=unrecognized")
        return WebhookOutcome(processed=False, reason="unrecognized")

    conversation_id = str(update.message.chat.id)
    text = extract_text(update.message)
    if not text:
        logger.info("webhook.update_ignored reason=no_text conversation_id=%s", conversation_id)
        return WebhookOutcome(processed=False, conversation_id=conversation_id, reason="no_text")

    with conversation_lock(conversation_id):
        user_message = create_user_message(db, conversation_id, text)
        group_id = user_message.group_id
        chunks = split_into_chunks(responder.generate(text), settings.max_chunk_length)
        logger.info(
            "webhook.turn_started conversation_id=%s kind=%s group_id=%d chunks=%d",
            conversation_id,
            update.kind,
            group_id,
            len(chunks),
        )

        for index, chunk in enumerate(chunks):
            try:
                send_with_fallback(sender, conversation_id, chunk, parse_mode=settings.telegram_parse_mode)
            except Exception:
                logger.exception(
                    "webhook.chunk_send_failed conversation_id=%s group_id=%d chunk_index=%d",
                    conversation_id,
                    group_id,
                    index,
                )
                raise
            try:
                create_message(
                    db,
                    conversation_id,
                    role=ROLE_ASSISTANT,
                    content=chunk,
                    group_id=group_id,
                )
            except Exception:
                db.rollback()
                logger.exception(
                    "webhook.chunk_persist_failed conversation_id=%s group_id=%d chunk_index=%d delivered=true",
                    conversation_id,
                    group_id,
                    index,
                )
                raise

    return WebhookOutcome(
        processed=True,
        conversation_id=conversation_id,
        group_id=group_id,
        chunks_sent=len(chunks),
    )
