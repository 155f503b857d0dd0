"""Free-form date normalisation for service request timestamps."""

from __future__ import annotations

from datetime import date, datetime, timezone

from dateutil import parser as dateparser

# Tried in order before the generic parser so a whole dataset resolves
# month/day consistently instead of being guessed per row.
EXPLICIT_FORMATS = (
    "%Y-%m-%dT%H:%M:%S.%fZ",
    "%m/%d/%Y %I:%M:%S %p",
    "%m/%d/%Y",
    "%Y-%m-%d",
)


def _with_zone(value: datetime) -> datetime:
    # Zone-less values are read as UTC wall time so every timestamp compares.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _parse_explicit(text: str) -> datetime | None:
    for fmt in EXPLICIT_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def _parse_generic(text: str) -> datetime | None:
    try:
        parsed = dateparser.parse(text)
        # Offsets of 24h or more parse but cannot be compared or subtracted.
        parsed.utcoffset()
    except (ValueError, OverflowError, TypeError):
        return None
    return parsed


def parse_date(raw: object) -> datetime | None:
    """Return a timezone-aware timestamp for ``raw`` or ``None``.

    Never raises: empty, unparseable and non-string inputs all give ``None``
    unless their text form parses.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, datetime):
        return _with_zone(raw)

    text = str(raw).strip()
    if not text:
        return None

    parsed = _parse_explicit(text)
    if parsed is None:
        parsed = _parse_generic(text)
    if parsed is None:
        return None
    return _with_zone(parsed)


def whole_hours_between(start: datetime, end: datetime) -> int:
    """Whole hours from ``start`` to ``end``, truncated toward zero."""
    seconds = (end - start).total_seconds()
    return int(seconds / 3600)


def month_bucket(value: datetime) -> tuple[int, int]:
    """Calendar month of ``value`` in its own zone."""
    return value.year, value.month


def month_key(bucket: tuple[int, int]) -> str:
    year, month = bucket
    return f"{year:04d}-{month:02d}"


def month_label(bucket: tuple[int, int]) -> str:
    year, month = bucket
    return date(year, month, 1).strftime("%b %y")
