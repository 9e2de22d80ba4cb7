from __future__ import annotations

from fastapi import APIRouter, HTTPException

from orchard_desk.application import get_services

router = APIRouter(tags=["chat"])


@router.post("/chat")
async def chat(payload: dict) -> dict:
    """Answer one web widget message using the history the widget sends."""
    message = payload.get("message")
    if not isinstance(message, str) or not message.strip():
        raise HTTPException(status_code=400, detail="message is required")
    history = payload.get("history") or []
    if not isinstance(history, list):
        raise HTTPException(status_code=400, detail="history must be a list")
    history = [item for item in history if isinstance(item, dict)]
    return await get_services().web_chat.chat(message, history)
