"""Signed history read route for the Web App client."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.config import Settings, get_settings
from app.db.dependencies import get_db
from app.schemas.common import ApiResponse
from app.schemas.message import TurnRead
from app.services.history import load_history
from app.services.signature import check_webapp_signature, parse_init_data, resolve_conversation_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


@router.get("/history", response_model=ApiResponse[list[TurnRead]])
def get_history(
    init_data: str | None = Query(default=None, alias="initData"),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> ApiResponse[list[TurnRead]]:
    """Return the merged conversation history for the signed-in Web App user."""

    if not init_data:
        raise HTTPException(status_code=400, detail="payload required")
    if not settings.bot_token or not check_webapp_signature(
        settings.bot_token,
        init_data,
        max_age_seconds=settings.init_data_max_age_seconds,
    ):
        logger.info("history.rejected reason=bad_signature")
        raise HTTPException(status_code=401, detail="bad signature")

    conversation_id = resolve_conversation_id(parse_init_data(init_data))
    if not conversation_id:
        raise HTTPException(status_code=400, detail="conversation id missing")

    turns = load_history(db, conversation_id)
    return ApiResponse(data=[TurnRead.model_validate(turn) for turn in turns])
