from __future__ import annotations

import json
import sys
from datetime import date
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from orchard_desk.application.harvests import HarvestService
from orchard_desk.application.intents import (
    CLARIFICATION_PROMPT,
    TOOL_APOLOGY,
    IntentRouter,
    parse_count_weight,
    parse_date,
    parse_year,
)
from orchard_desk.infrastructure import JsonHarvestRepository

TODAY = date(2026, 2, 3)


def _router(tmp_path: Path) -> tuple[IntentRouter, HarvestService, Path]:
    path = tmp_path / "harvests.json"
    service = HarvestService(JsonHarvestRepository(path))
    return IntentRouter(service, today=lambda: TODAY), service, path


def test_parse_date_precedence():
    assert parse_date("2026-3-9 และ 1/2/2025", TODAY) == date(2026, 3, 9)
    assert parse_date("เก็บ 1/2/2025", TODAY) == date(2025, 2, 1)
    assert parse_date("วันนี้ได้ 10 ลูก", TODAY) == TODAY
    assert parse_date("no date here", TODAY) is None


def test_parse_count_weight_and_year():
    assert parse_count_weight("เก็บได้ 120 ลูก 350 กิโล") == (120, 350.0)
    assert parse_count_weight("harvest 12 fruits 30.5 kg") == (12, 30.5)
    assert parse_count_weight("เก็บได้ 120 ลูก") == (120, None)
    assert parse_year("สรุปปี 2025") == 2025
    assert parse_year("สรุป") is None


def test_record_rule_writes_harvest(tmp_path):
    router, service, path = _router(tmp_path)

    result = router.route("บันทึก 120 ลูก 350 กิโล วันที่ 2026-02-03")

    assert result is not None
    assert result.intent == "record"
    assert result.text == "บันทึกข้อมูลทุเรียน 120 ลูก น้ำหนัก 350 กก. วันที่ 2026-02-03 เรียบร้อยแล้ว"
    records = service.list_records()
    assert [(item.count, item.weight, item.date) for item in records] == [(120, 350.0, "2026-02-03")]
    assert json.loads(path.read_text(encoding="utf-8"))[0]["count"] == 120


def test_record_without_verb_uses_today(tmp_path):
    router, service, _ = _router(tmp_path)

    result = router.route("120 ลูก 350 กิโล")

    assert result is not None and result.intent == "record"
    assert service.list_records()[0].date == "2026-02-03"


def test_missing_weight_asks_for_clarification(tmp_path):
    router, service, path = _router(tmp_path)

    result = router.route("วันนี้เก็บได้ 120 ลูก")

    assert result is not None
    assert result.text == CLARIFICATION_PROMPT
    assert service.list_records() == []
    assert not path.exists()


def test_stats_rule_wins_over_record(tmp_path):
    router, service, _ = _router(tmp_path)
    service.record_harvest(10, 20.0, date(2026, 1, 5))

    result = router.route("สรุปยอดเก็บ 50 ลูก 80 กก.")

    assert result is not None
    assert result.intent == "stats"
    assert result.chart is not None
    assert len(service.list_records()) == 1


def test_stats_defaults_to_current_year(tmp_path):
    router, service, _ = _router(tmp_path)
    service.record_harvest(10, 20.0, date(2025, 6, 1))

    result = router.route("ขอดูกราฟหน่อย")

    assert result is not None
    assert result.text == "ไม่พบข้อมูลการเก็บเกี่ยวในปี 2026"
    assert result.chart is None


def test_rule_failure_becomes_apology(tmp_path):
    router, service, _ = _router(tmp_path)

    result = router.route("บันทึก 10 ลูก 20 กก. วันที่ 2026-13-40")

    assert result is not None
    assert result.text == TOOL_APOLOGY
    assert service.list_records() == []


def test_plain_question_is_not_routed(tmp_path):
    router, _, _ = _router(tmp_path)

    assert router.route("How should durian trees be pruned?") is None
