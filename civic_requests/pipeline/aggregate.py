"""Aggregate views over canonical service requests.

Every function here is pure: it reads the records it is given and builds its
result from scratch. Filtering happens before these are called.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from typing import Sequence

from civic_requests.common.constants import TURNAROUND_TOP_N
from civic_requests.common.dates import month_bucket, month_key, month_label
from civic_requests.common.models import Kpi, MonthVolume, ServiceRequest, TurnaroundByType, TypeCount


def compute_kpis(records: Sequence[ServiceRequest]) -> Kpi:
    total = len(records)
    closed_hours = [record.turnaround_hours for record in records if record.turnaround_hours is not None]
    closed = len(closed_hours)
    avg = sum(closed_hours) / closed if closed else 0.0
    return Kpi(
        total_requests=total,
        closed_requests=closed,
        open_requests=total - closed,
        avg_turnaround=avg,
    )


def turnaround_by_type(records: Sequence[ServiceRequest], limit: int = TURNAROUND_TOP_N) -> list[TurnaroundByType]:
    totals: dict[str, list[int]] = defaultdict(lambda: [0, 0])
    for record in records:
        if record.turnaround_hours is None:
            continue
        bucket = totals[record.request_type]
        bucket[0] += record.turnaround_hours
        bucket[1] += 1

    rows = [
        TurnaroundByType(request_type=request_type, average_turnaround=round(hours / count, 1))
        for request_type, (hours, count) in totals.items()
    ]
    # sorted() is stable, so equal means keep first-seen order.
    rows = sorted(rows, key=lambda row: -row.average_turnaround)
    return rows[:limit]


def type_distribution(records: Sequence[ServiceRequest]) -> list[TypeCount]:
    counts = Counter(record.request_type for record in records)
    rows = [TypeCount(request_type=request_type, count=count) for request_type, count in counts.items()]
    return sorted(rows, key=lambda row: -row.count)


def volume_by_month(records: Sequence[ServiceRequest]) -> list[MonthVolume]:
    counts = Counter(month_bucket(record.created_date) for record in records)
    # Sort on (year, month), not on the display label.
    return [
        MonthVolume(month=month_key(bucket), label=month_label(bucket), count=counts[bucket])
        for bucket in sorted(counts)
    ]
