from __future__ import annotations

import sys
from datetime import date
from pathlib import Path
from urllib.parse import unquote

sys.path.append(str(Path(__file__).resolve().parents[1]))

from orchard_desk.application.harvests import HarvestService, build_chart_url
from orchard_desk.infrastructure import JsonHarvestRepository


def _service(tmp_path: Path) -> HarvestService:
    return HarvestService(JsonHarvestRepository(tmp_path / "harvests.json"))


def test_stats_group_by_month(tmp_path):
    service = _service(tmp_path)
    service.record_harvest(100, 250.0, date(2026, 3, 2))
    service.record_harvest(20, 50.5, date(2026, 1, 15))
    service.record_harvest(30, 70.0, date(2026, 3, 20))
    service.record_harvest(999, 999.0, date(2025, 3, 20))

    stats = service.get_harvest_stats(2026)

    assert stats.status == "success"
    assert stats.labels == ["ม.ค.", "มี.ค."]
    assert stats.values == [50.5, 320.0]
    assert stats.total_weight == 370.5
    assert stats.total_count == 150
    assert stats.chart is not None
    assert stats.chart["type"] == "flex"
    hero_url = stats.chart["contents"]["hero"]["url"]
    assert hero_url.startswith("https://quickchart.io/chart?c=")
    assert '"data":[50.5,320.0]' in unquote(hero_url)

    payload = stats.to_dict()
    assert payload["totalWeight"] == 370.5
    assert payload["totalCount"] == 150


def test_empty_year_has_no_chart(tmp_path):
    service = _service(tmp_path)
    service.record_harvest(1, 2.0, date(2025, 5, 1))

    stats = service.get_harvest_stats(2024)

    assert stats.status == "empty"
    assert stats.message == "ไม่พบข้อมูลการเก็บเกี่ยวในปี 2024"
    assert stats.chart is None
    assert stats.total_count == 0


def test_records_survive_restart(tmp_path):
    service = _service(tmp_path)
    record = service.record_harvest(12, 30.0, date(2026, 2, 3))

    reloaded = _service(tmp_path)

    assert reloaded.list_records() == [record]


def test_chart_url_encodes_labels():
    url = build_chart_url(["ก.พ."], [1.0])

    assert "ก.พ." not in url
    assert "ก.พ." in unquote(url)
