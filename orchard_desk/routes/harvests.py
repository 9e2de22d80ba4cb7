from __future__ import annotations

from fastapi import APIRouter, Query

from orchard_desk.application import get_services

router = APIRouter(prefix="/harvests", tags=["harvests"])


@router.get("")
async def list_harvests() -> dict:
    records = get_services().harvests.list_records()
    return {"items": [record.to_dict() for record in records]}


@router.get("/stats")
async def harvest_stats(year: int | None = Query(default=None, ge=2000, le=2099)) -> dict:
    return get_services().harvests.get_harvest_stats(year).to_dict()
