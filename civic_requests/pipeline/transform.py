"""Validate raw rows against a column mapping and build canonical records."""

from __future__ import annotations

import logging
import math
from typing import Iterable

from civic_requests.common.constants import ROW_NUMBER_OFFSET, UNKNOWN_REQUEST_TYPE
from civic_requests.common.dates import parse_date, whole_hours_between
from civic_requests.common.errors import RowValidationError
from civic_requests.common.ids import generated_unique_key
from civic_requests.common.models import ColumnMapping, RawRecord, RawValue, ServiceRequest
from civic_requests.pipeline.mapping import validate_mapping

logger = logging.getLogger(__name__)


def _lookup(raw: RawRecord, mapping: ColumnMapping, field: str) -> RawValue:
    column = mapping.get(field)
    if not column:
        return None
    return raw.get(column)


def _text(value: RawValue) -> str:
    if value is None:
        return ""
    return str(value)


def _safe_float(value: RawValue) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def transform_row(raw: RawRecord, mapping: ColumnMapping, index: int) -> ServiceRequest:
    created_raw = _lookup(raw, mapping, "created_date")
    created_date = parse_date(created_raw)
    if created_date is None:
        raise RowValidationError(index + ROW_NUMBER_OFFSET, created_raw, field="created_date")

    closed_date = parse_date(_lookup(raw, mapping, "closed_date"))

    turnaround_hours = None
    # Closed-before-created is treated as still open, even when under an hour.
    if closed_date is not None and closed_date >= created_date:
        turnaround_hours = whole_hours_between(created_date, closed_date)

    unique_key = _text(_lookup(raw, mapping, "unique_key"))
    request_type = _text(_lookup(raw, mapping, "request_type"))

    return ServiceRequest(
        unique_key=unique_key if unique_key.strip() else generated_unique_key(index),
        request_type=request_type if request_type.strip() else UNKNOWN_REQUEST_TYPE,
        created_date=created_date,
        closed_date=closed_date,
        latitude=_safe_float(_lookup(raw, mapping, "latitude")),
        longitude=_safe_float(_lookup(raw, mapping, "longitude")),
        turnaround_hours=turnaround_hours,
        raw=dict(raw),
    )


def transform(raw_rows: Iterable[RawRecord], mapping: ColumnMapping) -> list[ServiceRequest]:
    """Build canonical records for every row, or none at all.

    The first row whose ``created_date`` cannot be parsed aborts the batch with
    a :class:`RowValidationError` carrying its 1-based file line number.
    """
    mapping = validate_mapping(mapping)
    records = [transform_row(raw, mapping, index) for index, raw in enumerate(raw_rows)]
    logger.debug(
        "transformed rows",
        extra={"rows_out": len(records), "rows_closed": sum(1 for record in records if record.is_closed)},
    )
    return records
