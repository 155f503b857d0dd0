"""Dashboard payload assembly."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Sequence

from civic_requests.common.fs import write_json
from civic_requests.common.models import ServiceRequest
from civic_requests.common.time_utils import isoformat_or_none
from civic_requests.pipeline.aggregate import compute_kpis, turnaround_by_type, type_distribution, volume_by_month
from civic_requests.pipeline.filtering import filter_by_created_date


def build_dashboard(
    records: Sequence[ServiceRequest],
    date_range: tuple[datetime | None, datetime | None] | None = None,
) -> dict:
    start, end = date_range if date_range is not None else (None, None)
    filtered = filter_by_created_date(records, start, end)

    return {
        "record_count": len(records),
        "filtered_count": len(filtered),
        "date_range": {
            "from": isoformat_or_none(start),
            "to": isoformat_or_none(end),
        },
        "kpi": compute_kpis(filtered).to_dict(),
        "turnaround_by_type": [row.to_dict() for row in turnaround_by_type(filtered)],
        "type_distribution": [row.to_dict() for row in type_distribution(filtered)],
        "volume_by_month": [row.to_dict() for row in volume_by_month(filtered)],
    }


def write_dashboard(path: Path, payload: dict) -> Path:
    write_json(path, payload)
    return path
