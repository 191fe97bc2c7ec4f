"""Messaging platform client used to deliver reply chunks."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Protocol
from urllib import error as urllib_error
from urllib import request as urllib_request

from app.config import Settings

logger = logging.getLogger(__name__)


class TelegramSendError(RuntimeError):
    """Raised when the platform rejects or fails a sendMessage call."""


class MessageSender(Protocol):
    """Protocol for clients that deliver text to a chat."""

    def send_message(self, chat_id: str, text: str, *, parse_mode: str | None = None) -> None:
        """Deliver ``text`` to ``chat_id``."""


@dataclass(slots=True)
class TelegramBotClient:
    """Minimal Bot API client for sendMessage."""

    bot_token: str
    base_url: str = "https://api.telegram.org"
    timeout_seconds: int = 30

    def send_message(self, chat_id: str, text: str, *, parse_mode: str | None = None) -> None:
        payload: dict[str, Any] = {"chat_id": chat_id, "text": text}
        if parse_mode:
            payload["parse_mode"] = parse_mode
        url = f"{self.base_url.rstrip('/')}/bot{self.bot_token}/sendMessage"
        req = urllib_request.Request(
            url=url,
            data=json.dumps(payload).encode("utf-8"),
            method="POST",
            headers={"Content-Type": "application/json"},
        )
        try:
            with urllib_request.urlopen(req, timeout=self.timeout_seconds) as resp:
                raw = resp.read().decode("utf-8")
        except urllib_error.HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="replace")
            raise TelegramSendError(f"sendMessage HTTP {exc.code}: {detail}") from exc
        except urllib_error.URLError as exc:
            raise TelegramSendError(f"sendMessage request failed: {exc.reason}") from exc

        try:
            decoded = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise TelegramSendError("sendMessage returned a non-JSON response") from exc
        if not isinstance(decoded, dict) or not decoded.get("ok"):
            description = decoded.get("description") if isinstance(decoded, dict) else None
            raise TelegramSendError(f"sendMessage rejected: {description or 'unknown error'}")


def build_telegram_client(settings: Settings) -> TelegramBotClient:
    """Return a client bound to the configured bot token."""

    if not settings.bot_token:
        raise TelegramSendError("BOT_TOKEN is not configured.")
    return TelegramBotClient(
        bot_token=settings.bot_token,
        base_url=settings.telegram_api_base_url,
        timeout_seconds=settings.telegram_timeout_seconds,
    )


def send_with_fallback(
    sender: MessageSender,
    chat_id: str,
    text: str,
    *,
    parse_mode: str | None,
) -> None:
    """Send ``text`` formatted; on failure retry once as plain text.

    The second failure propagates.
    """

    if not parse_mode:
        sender.send_message(chat_id, text)
        return
    try:
        sender.send_message(chat_id, text, parse_mode=parse_mode)
    except Exception as exc:
        logger.warning(
            "telegram.formatted_send_failed chat_id=%s parse_mode=%s error=%s; retrying as plain text",
            chat_id,
            parse_mode,
            exc,
        )
        sender.send_message(chat_id, text)
