"""Canonical record CSV export."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from civic_requests.common.fs import write_csv
from civic_requests.common.models import ServiceRequest

CANONICAL_HEADERS = [
    "unique_key",
    "request_type",
    "created_date",
    "closed_date",
    "latitude",
    "longitude",
    "turnaround_hours",
]


def _serialize_row(row: dict) -> dict:
    out = {}
    for key, value in row.items():
        if value is None:
            out[key] = ""
        elif isinstance(value, bool):
            out[key] = "true" if value else "false"
        else:
            out[key] = value
    return out


def _passthrough_headers(records: Sequence[ServiceRequest]) -> list[str]:
    seen: dict[str, None] = {}
    for record in records:
        for key in record.raw:
            if key not in CANONICAL_HEADERS:
                seen.setdefault(key, None)
    return list(seen)


def write_records_csv(path: Path, records: Sequence[ServiceRequest]) -> Path:
    headers = CANONICAL_HEADERS + _passthrough_headers(records)
    rows = [_serialize_row(record.to_dict()) for record in records]
    write_csv(path, headers, rows)
    return path
