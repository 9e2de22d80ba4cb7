from __future__ import annotations

from fastapi import APIRouter, HTTPException

from orchard_desk.application import InvalidModeError, get_services
from orchard_desk.core.logging import get_logger
from orchard_desk.infrastructure import LineMessagingError, PersistenceError

router = APIRouter(prefix="/admin/chats", tags=["admin"])

logger = get_logger(__name__)


@router.get("")
async def list_chats() -> dict:
    conversations = get_services().conversations
    return {"items": conversations.list_summaries()}


@router.get("/{user_id}")
async def get_chat(user_id: str) -> dict:
    conversation = get_services().conversations.find(user_id)
    if conversation is None:
        raise HTTPException(status_code=404, detail="conversation not found")
    return {"userId": user_id, **conversation.to_dict()}


@router.post("/{user_id}/mode")
async def set_chat_mode(user_id: str, payload: dict) -> dict:
    """Hand the conversation to an operator (``manual``) or back to ``ai``."""
    mode = payload.get("mode")
    if not mode:
        raise HTTPException(status_code=400, detail="mode is required")
    try:
        conversation = await get_services().conversations.set_mode(user_id, mode)
    except InvalidModeError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except PersistenceError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return {"success": True, "mode": conversation.mode.value}


@router.post("/{user_id}/reply")
async def reply_to_chat(user_id: str, payload: dict) -> dict:
    text = payload.get("text")
    if not isinstance(text, str) or not text.strip():
        raise HTTPException(status_code=400, detail="text is required")
    try:
        await get_services().orchestrator.operator_reply(user_id, text)
    except LineMessagingError as exc:
        logger.error("operator push failed user=%s: %s details=%s", user_id, exc, exc.details)
        raise HTTPException(
            status_code=502,
            detail={"message": str(exc), "statusCode": exc.status_code, "details": exc.details},
        ) from exc
    return {"success": True}
