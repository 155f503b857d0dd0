"""Upload lifecycle: decode, confirm a mapping, then serve metrics."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from civic_requests.common.errors import PipelineError
from civic_requests.common.models import ColumnMapping, DecodedTable, ServiceRequest
from civic_requests.pipeline.decode import decode, decode_file
from civic_requests.pipeline.filtering import default_date_range
from civic_requests.pipeline.mapping import suggest_mapping, validate_mapping
from civic_requests.pipeline.reports import build_dashboard
from civic_requests.pipeline.transform import transform

logger = logging.getLogger(__name__)


class RequestSession:
    """Transient, in-memory state for one uploaded file.

    Each step adopts its result only when it succeeds, so a failed upload or
    mapping leaves whatever was loaded before untouched.
    """

    def __init__(self) -> None:
        self.raw_text: str | None = None
        self.table: DecodedTable | None = None
        self.suggested_mapping: ColumnMapping = {}
        self.mapping: ColumnMapping | None = None
        self.records: tuple[ServiceRequest, ...] = ()
        self.date_range: tuple[datetime, datetime] | None = None

    @property
    def is_loaded(self) -> bool:
        return bool(self.records)

    def load(self, text: str, fmt: str) -> DecodedTable:
        table = decode(text, fmt)
        self._adopt(text, table)
        return table

    def load_file(self, path: Path, fmt: str | None = None) -> DecodedTable:
        text, table = decode_file(path, fmt=fmt)
        self._adopt(text, table)
        return table

    def apply_mapping(self, mapping: ColumnMapping) -> tuple[ServiceRequest, ...]:
        if self.table is None:
            raise PipelineError("No file has been loaded.")
        cleaned = validate_mapping(mapping, headers=self.table.headers)
        records = tuple(transform(self.table.rows, cleaned))
        self.mapping = cleaned
        self.records = records
        self.date_range = default_date_range(records)
        return records

    def set_date_range(self, start: datetime | None, end: datetime | None) -> None:
        self.date_range = (start, end) if start is not None and end is not None else None

    def metrics(self) -> dict:
        return build_dashboard(self.records, self.date_range)

    def _adopt(self, text: str, table: DecodedTable) -> None:
        self.reset()
        self.raw_text = text
        self.table = table
        self.suggested_mapping = suggest_mapping(table.headers)
        logger.debug("session loaded", extra={"rows_in": len(table.rows)})

    def reset(self) -> None:
        self.raw_text = None
        self.table = None
        self.suggested_mapping = {}
        self.mapping = None
        self.records = ()
        self.date_range = None
