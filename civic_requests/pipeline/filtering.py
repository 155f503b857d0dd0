"""Created-date range filtering applied ahead of aggregation."""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from civic_requests.common.models import ServiceRequest


def filter_by_created_date(
    records: Sequence[ServiceRequest],
    start: datetime | None,
    end: datetime | None,
) -> list[ServiceRequest]:
    """Keep records created within ``[start, end]``, both ends inclusive.

    A range missing either bound means no filter.
    """
    if start is None or end is None:
        return list(records)
    return [record for record in records if start <= record.created_date <= end]


def default_date_range(records: Sequence[ServiceRequest]) -> tuple[datetime, datetime] | None:
    if not records:
        return None
    created = [record.created_date for record in records]
    return min(created), max(created)
