"""Bind source columns to the canonical service request fields."""

from __future__ import annotations

from typing import Iterable, Sequence

from civic_requests.common.constants import ALL_FIELDS, REQUIRED_FIELDS
from civic_requests.common.errors import MissingFieldsError
from civic_requests.common.models import ColumnMapping


def _match_key(name: str) -> str:
    return name.lower().replace("_", "")


def suggest_mapping(headers: Sequence[str], fields: Iterable[str] = ALL_FIELDS) -> ColumnMapping:
    """Pre-fill a mapping by case/underscore-insensitive name equality.

    Only a default for the user to confirm; fields without an exact match are
    left out rather than guessed.
    """
    suggested: ColumnMapping = {}
    for field in fields:
        wanted = _match_key(field)
        for header in headers:
            if _match_key(header) == wanted:
                suggested[field] = header
                break
    return suggested


def validate_mapping(
    mapping: ColumnMapping,
    required: Iterable[str] = REQUIRED_FIELDS,
    *,
    headers: Sequence[str] | None = None,
) -> ColumnMapping:
    missing = [field for field in required if not (mapping.get(field) or "").strip()]
    if missing:
        raise MissingFieldsError(missing)

    cleaned = {field: column for field, column in mapping.items() if column and column.strip()}

    if headers is not None:
        known = set(headers)
        unknown = [field for field in ALL_FIELDS if field in cleaned and cleaned[field] not in known]
        if unknown:
            details = ", ".join(f"{field}={cleaned[field]}" for field in unknown)
            raise MissingFieldsError(unknown, f"Mapped columns not found in file: {details}")

    return cleaned


def parse_mapping_args(values: Iterable[str]) -> ColumnMapping:
    mapping: ColumnMapping = {}
    for value in values:
        field, sep, column = value.partition("=")
        field = field.strip()
        if not sep or field not in ALL_FIELDS:
            raise ValueError(f"Invalid mapping '{value}'; expected <field>=<column> with field in {', '.join(ALL_FIELDS)}")
        mapping[field] = column.strip()
    return mapping
