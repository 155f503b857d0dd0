import csv
import json
from datetime import datetime, timezone
from pathlib import Path

from civic_requests.pipeline.export import write_records_csv
from civic_requests.pipeline.filtering import default_date_range, filter_by_created_date
from civic_requests.pipeline.reports import build_dashboard, write_dashboard
from civic_requests.pipeline.transform import transform

UTC = timezone.utc
MAPPING = {"unique_key": "id", "request_type": "type", "created_date": "created", "closed_date": "closed"}
ROWS = [
    {"id": "1", "type": "Noise", "created": "2024-01-01", "closed": "2024-01-02", "agency": "NYPD"},
    {"id": "2", "type": "Pothole", "created": "2024-01-15", "closed": "", "agency": "DOT"},
    {"id": "3", "type": "Pothole", "created": "2024-02-01", "closed": "2024-02-03", "agency": "DOT"},
]


def _records():
    return transform(ROWS, MAPPING)


def test_filter_is_inclusive_on_both_ends():
    records = _records()

    kept = filter_by_created_date(records, datetime(2024, 1, 1, tzinfo=UTC), datetime(2024, 1, 15, tzinfo=UTC))

    assert [record.unique_key for record in kept] == ["1", "2"]


def test_filter_without_both_bounds_keeps_everything():
    records = _records()

    assert filter_by_created_date(records, None, None) == records
    assert filter_by_created_date(records, datetime(2024, 2, 1, tzinfo=UTC), None) == records


def test_default_date_range_spans_created_dates():
    assert default_date_range(_records()) == (datetime(2024, 1, 1, tzinfo=UTC), datetime(2024, 2, 1, tzinfo=UTC))
    assert default_date_range([]) is None


def test_build_dashboard_applies_range_before_aggregating():
    payload = build_dashboard(_records(), (datetime(2024, 1, 10, tzinfo=UTC), datetime(2024, 3, 1, tzinfo=UTC)))

    assert payload["record_count"] == 3
    assert payload["filtered_count"] == 2
    assert payload["kpi"] == {"total_requests": 2, "closed_requests": 1, "open_requests": 1, "avg_turnaround": 48.0}
    assert payload["type_distribution"] == [{"request_type": "Pothole", "count": 2}]
    assert payload["turnaround_by_type"] == [{"request_type": "Pothole", "average_turnaround": 48.0}]
    assert [row["month"] for row in payload["volume_by_month"]] == ["2024-01", "2024-02"]
    assert payload["date_range"]["from"] == "2024-01-10T00:00:00+00:00"


def test_build_dashboard_empty_records():
    payload = build_dashboard([])

    assert payload["kpi"]["total_requests"] == 0
    assert payload["turnaround_by_type"] == []
    assert payload["date_range"] == {"from": None, "to": None}


def test_write_dashboard_round_trips_json(tmp_path: Path):
    path = write_dashboard(tmp_path / "out" / "dashboard.json", build_dashboard(_records()))

    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["kpi"]["closed_requests"] == 2


def test_write_records_csv_puts_canonical_columns_first(tmp_path: Path):
    path = write_records_csv(tmp_path / "records.csv", _records())

    with path.open("r", encoding="utf-8", newline="") as f:
        rows = list(csv.DictReader(f))

    assert list(rows[0])[:7] == [
        "unique_key",
        "request_type",
        "created_date",
        "closed_date",
        "latitude",
        "longitude",
        "turnaround_hours",
    ]
    assert rows[0]["agency"] == "NYPD"
    assert rows[1]["closed_date"] == ""
    assert rows[2]["turnaround_hours"] == "48"
