from __future__ import annotations

import json

from fastapi import APIRouter, BackgroundTasks, Header, HTTPException, Request

from orchard_desk.application import get_services
from orchard_desk.core.logging import get_logger

router = APIRouter(tags=["webhook"])

logger = get_logger(__name__)


@router.post("/webhook")
async def line_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    x_line_signature: str | None = Header(default=None),
) -> dict:
    """Verify a LINE batch, acknowledge it and process the events afterwards."""
    body = await request.body()
    adapter = get_services().line
    if not adapter.verify(body, x_line_signature):
        logger.warning("rejected webhook with invalid signature")
        raise HTTPException(status_code=401, detail="Invalid signature")

    try:
        payload = json.loads(body or b"{}")
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="body must be JSON") from exc
    events = payload.get("events") if isinstance(payload, dict) else None
    if not isinstance(events, list):
        events = []

    if events:
        background_tasks.add_task(adapter.dispatch, events)
    return {"status": "ok", "events": len(events)}
