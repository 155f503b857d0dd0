"""Data models used across the pipeline."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Union

from civic_requests.common.time_utils import isoformat_or_none

RawValue = Union[str, int, float, bool, None]
RawRecord = dict[str, RawValue]
ColumnMapping = dict[str, str]


@dataclass(frozen=True)
class DecodedTable:
    headers: list[str]
    rows: list[RawRecord]


@dataclass(frozen=True)
class ServiceRequest:
    unique_key: str
    request_type: str
    created_date: datetime
    closed_date: datetime | None
    latitude: float | None
    longitude: float | None
    turnaround_hours: int | None
    raw: RawRecord = field(default_factory=dict)

    @property
    def is_closed(self) -> bool:
        return self.turnaround_hours is not None

    def canonical(self) -> dict[str, Any]:
        return {
            "unique_key": self.unique_key,
            "request_type": self.request_type,
            "created_date": isoformat_or_none(self.created_date),
            "closed_date": isoformat_or_none(self.closed_date),
            "latitude": self.latitude,
            "longitude": self.longitude,
            "turnaround_hours": self.turnaround_hours,
        }

    def to_dict(self) -> dict[str, Any]:
        # Canonical fields shadow raw columns of the same name.
        out: dict[str, Any] = dict(self.raw)
        out.update(self.canonical())
        return out


@dataclass(frozen=True)
class Kpi:
    total_requests: int
    closed_requests: int
    open_requests: int
    avg_turnaround: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class TurnaroundByType:
    request_type: str
    average_turnaround: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class TypeCount:
    request_type: str
    count: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class MonthVolume:
    month: str
    label: str
    count: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
