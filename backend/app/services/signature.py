"""Verification of Web App ``initData`` payloads signed by the messaging platform."""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
import time
from urllib.parse import parse_qsl

logger = logging.getLogger(__name__)

HASH_FIELD = "hash"
_SECRET_PREFIX = b"WebAppData"


def parse_init_data(init_data: str) -> dict[str, str]:
    """Decode a query-string payload into a field map (last value wins)."""

    return dict(parse_qsl(init_data, keep_blank_values=True))


def build_data_check_string(fields: dict[str, str]) -> str:
    """Join every field except the signature as sorted ``key=value`` lines."""

    return "\n".join(f"{key}={fields[key]}" for key in sorted(fields) if key != HASH_FIELD)


def derive_secret_key(bot_token: str) -> bytes:
    return hashlib.sha256(_SECRET_PREFIX + bot_token.encode("utf-8")).digest()


def sign_init_data(bot_token: str, fields: dict[str, str]) -> str:
    """Return the hex HMAC-SHA256 signature for ``fields``."""

    return hmac.new(
        derive_secret_key(bot_token),
        build_data_check_string(fields).encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def check_webapp_signature(
    bot_token: str,
    init_data: str,
    *,
    max_age_seconds: int | None = None,
    now: float | None = None,
) -> bool:
    """Return True when ``init_data`` carries a valid signature for ``bot_token``.

    Any parsing problem counts as an invalid signature. When ``max_age_seconds``
    is set, payloads whose ``auth_date`` is older than that are rejected too.
    """

    try:
        fields = parse_init_data(init_data)
    except ValueError:
        return False
    received = fields.get(HASH_FIELD)
    if not received:
        return False

    computed = sign_init_data(bot_token, fields)
    if not hmac.compare_digest(computed.encode("utf-8"), received.encode("utf-8")):
        return False

    if max_age_seconds is not None:
        try:
            auth_date = int(fields["auth_date"])
        except (KeyError, ValueError):
            return False
        if (now if now is not None else time.time()) - auth_date > max_age_seconds:
            logger.info("signature.expired auth_date=%d max_age_seconds=%d", auth_date, max_age_seconds)
            return False
    return True


def resolve_conversation_id(fields: dict[str, str]) -> str | None:
    """Return the user id embedded in the payload, else the chat instance id.

    A malformed ``user`` field raises ``json.JSONDecodeError``.
    """

    raw_user = fields.get("user")
    user = json.loads(raw_user) if raw_user else None
    if isinstance(user, dict) and user.get("id"):
        return str(user["id"])
    return fields.get("chat_instance") or None
