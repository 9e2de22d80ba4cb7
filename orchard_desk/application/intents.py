"""Deterministic intent routing ahead of free-form generation.

Rules are evaluated in order and the first whose trigger matches handles the
message, so a text matching both the stats and the record triggers is always
answered with statistics.  Each rule keeps extraction (pure, regex based)
apart from its action (which may write to the harvest store).
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable

from orchard_desk.core.logging import get_logger

from .harvests import HarvestService

logger = get_logger(__name__)


CLARIFICATION_PROMPT = "กรุณาระบุจำนวนลูกและน้ำหนัก เช่น 120 ลูก 350 กิโล วันที่ 2026-02-03"
TOOL_APOLOGY = "ขออภัย ระบบเครื่องมือเกิดข้อผิดพลาดชั่วคราว"

STATS_TRIGGER = re.compile(r"สรุป|กราฟ|รายงาน|ยอด|summary|chart|report|total", re.IGNORECASE)
RECORD_VERB = re.compile(r"บันทึก|เก็บ|ได้|เก็บเกี่ยว|record|harvest", re.IGNORECASE)
RECORD_UNIT = re.compile(r"ลูก|กก\.?|กิโล|fruits?|kg", re.IGNORECASE)

COUNT_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*(?:ลูก|fruits?\b)", re.IGNORECASE)
WEIGHT_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*(?:กก\.?|กิโล(?:กรัม)?|kg\b|kilo(?:gram)?s?\b)", re.IGNORECASE)
ISO_DATE = re.compile(r"(\d{4})-(\d{1,2})-(\d{1,2})")
SLASH_DATE = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})")
TODAY_KEYWORD = re.compile(r"วันนี้|today", re.IGNORECASE)
YEAR_PATTERN = re.compile(r"(20\d{2})")


@dataclass
class IntentResult:
    intent: str
    text: str
    chart: dict[str, Any] | None = None


@dataclass
class RecordRequest:
    count: int | None
    weight: float | None
    date: date


@dataclass
class IntentRule:
    name: str
    matches: Callable[[str], bool]
    extract: Callable[[str], Any]
    act: Callable[[Any], IntentResult]


def parse_date(text: str, today: date | None = None) -> date | None:
    """ISO date first, then day/month/year, then the "today" keyword."""

    iso = ISO_DATE.search(text)
    if iso:
        year, month, day = (int(part) for part in iso.groups())
        return date(year, month, day)

    slash = SLASH_DATE.search(text)
    if slash:
        day, month, year = (int(part) for part in slash.groups())
        return date(year, month, day)

    if TODAY_KEYWORD.search(text):
        return today or date.today()
    return None


def parse_count_weight(text: str) -> tuple[int | None, float | None]:
    count_match = COUNT_PATTERN.search(text)
    weight_match = WEIGHT_PATTERN.search(text)
    count = int(float(count_match.group(1))) if count_match else None
    weight = float(weight_match.group(1)) if weight_match else None
    return count, weight


def parse_year(text: str) -> int | None:
    match = YEAR_PATTERN.search(text)
    return int(match.group(1)) if match else None


def wants_stats(text: str) -> bool:
    return bool(STATS_TRIGGER.search(text))


def wants_record(text: str) -> bool:
    if RECORD_VERB.search(text) and RECORD_UNIT.search(text):
        return True
    # "120 ลูก 350 กิโล" needs no verb
    return bool(COUNT_PATTERN.search(text)) and bool(WEIGHT_PATTERN.search(text))


class IntentRouter:
    """Matches a message against the structured harvest actions."""

    def __init__(self, harvests: HarvestService, *, today: Callable[[], date] = date.today) -> None:
        self._harvests = harvests
        self._today = today
        self.rules: list[IntentRule] = [
            IntentRule("stats", wants_stats, parse_year, self._stats),
            IntentRule("record", wants_record, self._extract_record, self._record),
        ]

    def _extract_record(self, text: str) -> RecordRequest:
        count, weight = parse_count_weight(text)
        harvest_date = parse_date(text, self._today()) or self._today()
        return RecordRequest(count=count, weight=weight, date=harvest_date)

    def _record(self, request: RecordRequest) -> IntentResult:
        if request.count is None or request.weight is None:
            return IntentResult(intent="record", text=CLARIFICATION_PROMPT)
        record = self._harvests.record_harvest(request.count, request.weight, request.date)
        return IntentResult(intent="record", text=HarvestService.recorded_message(record))

    def _stats(self, year: int | None) -> IntentResult:
        stats = self._harvests.get_harvest_stats(year or self._today().year)
        return IntentResult(intent="stats", text=stats.message, chart=stats.chart)

    def route(self, text: str) -> IntentResult | None:
        """Return the structured answer, or ``None`` when no rule matches."""

        lowered = text.lower()
        for rule in self.rules:
            try:
                if not rule.matches(lowered):
                    continue
                return rule.act(rule.extract(text))
            except Exception:
                logger.exception("intent rule %s failed", rule.name)
                return IntentResult(intent=rule.name, text=TOOL_APOLOGY)
        return None
