"""Harvest recording and yearly statistics."""
from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from datetime import date
from typing import Any
from urllib.parse import quote

import pandas as pd

from orchard_desk.domain import HarvestRecord
from orchard_desk.infrastructure import HarvestRepository


THAI_SHORT_MONTHS = {
    1: "ม.ค.",
    2: "ก.พ.",
    3: "มี.ค.",
    4: "เม.ย.",
    5: "พ.ค.",
    6: "มิ.ย.",
    7: "ก.ค.",
    8: "ส.ค.",
    9: "ก.ย.",
    10: "ต.ค.",
    11: "พ.ย.",
    12: "ธ.ค.",
}

QUICKCHART_URL = "https://quickchart.io/chart"


@dataclass
class HarvestStats:
    status: str
    year: int
    message: str
    labels: list[str] = field(default_factory=list)
    values: list[float] = field(default_factory=list)
    total_weight: float = 0.0
    total_count: int = 0
    chart: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "year": self.year,
            "message": self.message,
            "labels": self.labels,
            "values": self.values,
            "totalWeight": self.total_weight,
            "totalCount": self.total_count,
            "chart": self.chart,
        }


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.2f}"


def build_chart_url(labels: list[str], values: list[float]) -> str:
    config = {
        "type": "bar",
        "data": {
            "labels": labels,
            "datasets": [
                {
                    "label": "น้ำหนัก (กก.)",
                    "data": values,
                    "backgroundColor": "rgba(54, 162, 235, 0.5)",
                    "borderColor": "rgb(54, 162, 235)",
                    "borderWidth": 1,
                }
            ],
        },
        "options": {"plugins": {"datalabels": {"display": True, "anchor": "end", "align": "top"}}},
    }
    encoded = quote(json.dumps(config, ensure_ascii=False, separators=(",", ":")), safe="")
    return f"{QUICKCHART_URL}?c={encoded}&w=500&h=300"


def _summary_row(label: str, value: str, *, margin: str | None = None) -> dict[str, Any]:
    row: dict[str, Any] = {
        "type": "box",
        "layout": "horizontal",
        "contents": [
            {"type": "text", "text": label, "size": "sm", "color": "#555555"},
            {"type": "text", "text": value, "size": "sm", "color": "#111111", "align": "end", "weight": "bold"},
        ],
    }
    if margin:
        row["margin"] = margin
    return row


def build_flex_chart(year: int, labels: list[str], values: list[float], total_weight: float, total_count: int) -> dict[str, Any]:
    """LINE flex bubble with the monthly weight chart and the yearly totals."""

    return {
        "type": "flex",
        "altText": f"สรุปยอดทุเรียนปี {year}",
        "contents": {
            "type": "bubble",
            "header": {
                "type": "box",
                "layout": "vertical",
                "contents": [
                    {"type": "text", "text": "สรุปผลผลิตทุเรียน", "weight": "bold", "size": "xl", "color": "#2c3e50"},
                    {"type": "text", "text": f"ประจำปี {year}", "size": "sm", "color": "#7f8c8d"},
                ],
            },
            "hero": {
                "type": "image",
                "url": build_chart_url(labels, values),
                "size": "full",
                "aspectRatio": "1.618:1",
                "aspectMode": "cover",
            },
            "body": {
                "type": "box",
                "layout": "vertical",
                "contents": [
                    _summary_row("น้ำหนักรวม", f"{_format_number(total_weight)} กก."),
                    _summary_row("จำนวนลูก", f"{_format_number(total_count)} ลูก", margin="md"),
                ],
            },
        },
    }


class HarvestService:
    """The two structured actions reachable from chat."""

    def __init__(self, repository: HarvestRepository) -> None:
        self._repository = repository

    def record_harvest(self, count: int, weight: float, harvest_date: date) -> HarvestRecord:
        record = HarvestRecord(
            id=str(time.time_ns()),
            count=int(count),
            weight=float(weight),
            date=harvest_date.isoformat(),
        )
        self._repository.add(record)
        return record

    @staticmethod
    def recorded_message(record: HarvestRecord) -> str:
        return (
            f"บันทึกข้อมูลทุเรียน {_format_number(record.count)} ลูก "
            f"น้ำหนัก {_format_number(record.weight)} กก. วันที่ {record.date} เรียบร้อยแล้ว"
        )

    def list_records(self) -> list[HarvestRecord]:
        return self._repository.list()

    def get_harvest_stats(self, year: int | None = None) -> HarvestStats:
        target_year = year or date.today().year
        records = [item.to_dict() for item in self._repository.list()]
        frame = pd.DataFrame(records, columns=["id", "count", "weight", "date", "recorded_at"])
        yearly = frame[frame["date"].astype(str).str.startswith(f"{target_year}-")]

        if yearly.empty:
            return HarvestStats(
                status="empty",
                year=target_year,
                message=f"ไม่พบข้อมูลการเก็บเกี่ยวในปี {target_year}",
            )

        monthly = (
            yearly.assign(month=yearly["date"].str.slice(5, 7))
            .groupby("month", sort=True)["weight"]
            .sum()
        )
        labels = [THAI_SHORT_MONTHS[int(month)] for month in monthly.index]
        values = [float(value) for value in monthly.to_list()]
        total_weight = float(yearly["weight"].sum())
        total_count = int(yearly["count"].sum())

        return HarvestStats(
            status="success",
            year=target_year,
            message="สร้างกราฟสรุปยอดเรียบร้อยแล้ว",
            labels=labels,
            values=values,
            total_weight=total_weight,
            total_count=total_count,
            chart=build_flex_chart(target_year, labels, values, total_weight, total_count),
        )
