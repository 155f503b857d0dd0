"""Decode uploaded CSV/JSON text into headers plus loosely typed rows."""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path

from civic_requests.common.errors import MalformedInputError
from civic_requests.common.fs import read_text
from civic_requests.common.models import DecodedTable, RawRecord, RawValue

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ("csv", "json")


def _clean_field(value: str) -> str:
    cleaned = value.strip()
    if cleaned.startswith('"'):
        cleaned = cleaned[1:]
    if cleaned.endswith('"'):
        cleaned = cleaned[:-1]
    return cleaned.strip()


def _split_line(line: str) -> list[str]:
    # One physical line per row; the csv module only handles the quoting.
    fields = next(csv.reader([line], skipinitialspace=True), [])
    return [_clean_field(field) for field in fields]


def decode_csv(text: str) -> DecodedTable:
    if text is None or not text.strip():
        raise MalformedInputError("CSV input is empty.")

    lines = text.strip().splitlines()
    try:
        headers = _split_line(lines[0])
        rows: list[RawRecord] = []
        for line in lines[1:]:
            values = _split_line(line)
            rows.append({header: values[idx] if idx < len(values) else "" for idx, header in enumerate(headers)})
    except csv.Error as exc:
        raise MalformedInputError(f"CSV input could not be parsed: {exc}") from exc

    if not any(headers):
        raise MalformedInputError("CSV input has no header row.")
    if not rows:
        raise MalformedInputError("CSV input has a header row but no data rows.")

    logger.debug("decoded csv", extra={"rows_out": len(rows)})
    return DecodedTable(headers=headers, rows=rows)


def _scalar(value: object) -> RawValue:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return json.dumps(value, ensure_ascii=False, sort_keys=True)


def decode_json(text: str) -> DecodedTable:
    if text is None or not text.strip():
        raise MalformedInputError("JSON input is empty.")

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedInputError(f"JSON input could not be parsed: {exc.msg} (line {exc.lineno})") from exc

    if not isinstance(payload, list) or not payload:
        raise MalformedInputError("JSON must be an array of objects.")
    for idx, item in enumerate(payload):
        if not isinstance(item, dict):
            raise MalformedInputError(f"JSON must be an array of objects; element {idx} is {type(item).__name__}.")

    headers = [str(key) for key in payload[0]]
    rows: list[RawRecord] = [{str(key): _scalar(value) for key, value in item.items()} for item in payload]

    logger.debug("decoded json", extra={"rows_out": len(rows)})
    return DecodedTable(headers=headers, rows=rows)


def detect_format(filename: str | None, content_type: str | None = None) -> str:
    if content_type and content_type.split(";")[0].strip().lower() == "application/json":
        return "json"
    if filename and Path(filename).suffix.lower() == ".json":
        return "json"
    return "csv"


def decode(text: str, fmt: str) -> DecodedTable:
    if fmt == "csv":
        return decode_csv(text)
    if fmt == "json":
        return decode_json(text)
    raise MalformedInputError(f"Unsupported input format: {fmt}")


def decode_file(path: Path, fmt: str | None = None) -> tuple[str, DecodedTable]:
    """Read ``path`` and decode it; returns the raw text alongside the table."""
    if not path.exists():
        raise MalformedInputError(f"Input file not found: {path}")
    text = read_text(path)
    return text, decode(text, fmt or detect_format(path.name))
