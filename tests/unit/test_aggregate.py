from datetime import datetime, timedelta, timezone

import pytest

from civic_requests.common.models import ServiceRequest
from civic_requests.pipeline.aggregate import compute_kpis, turnaround_by_type, type_distribution, volume_by_month

UTC = timezone.utc


def _record(key: str, request_type: str, created: datetime, hours: int | None) -> ServiceRequest:
    closed = created + timedelta(hours=hours) if hours is not None else None
    return ServiceRequest(
        unique_key=key,
        request_type=request_type,
        created_date=created,
        closed_date=closed,
        latitude=None,
        longitude=None,
        turnaround_hours=hours,
    )


@pytest.fixture
def records():
    return [
        _record("1", "Noise", datetime(2024, 1, 5, tzinfo=UTC), 4),
        _record("2", "Pothole", datetime(2024, 1, 15, tzinfo=UTC), 48),
        _record("3", "Noise", datetime(2023, 12, 30, tzinfo=UTC), None),
        _record("4", "Pothole", datetime(2024, 2, 10, tzinfo=UTC), 12),
        _record("5", "Graffiti", datetime(2024, 2, 11, tzinfo=UTC), 3),
    ]


def test_kpis_over_mixed_records(records):
    kpi = compute_kpis(records)

    assert kpi.total_requests == 5
    assert kpi.closed_requests == 4
    assert kpi.open_requests == 1
    assert kpi.avg_turnaround == pytest.approx((4 + 48 + 12 + 3) / 4)


def test_kpis_single_closed_record():
    kpi = compute_kpis([_record("1", "Pothole", datetime(2024, 1, 1, tzinfo=UTC), 48)])

    assert kpi.to_dict() == {"total_requests": 1, "closed_requests": 1, "open_requests": 0, "avg_turnaround": 48.0}


def test_kpis_with_nothing_closed_avoid_division_by_zero():
    kpi = compute_kpis([_record("1", "Noise", datetime(2024, 1, 1, tzinfo=UTC), None)])

    assert kpi.open_requests == 1
    assert kpi.avg_turnaround == 0


def test_turnaround_by_type_ranks_means_and_skips_open_only_types(records):
    records = records + [_record("6", "Sidewalk", datetime(2024, 3, 1, tzinfo=UTC), None)]

    rows = turnaround_by_type(records)

    assert [(row.request_type, row.average_turnaround) for row in rows] == [
        ("Pothole", 30.0),
        ("Noise", 4.0),
        ("Graffiti", 3.0),
    ]


def test_turnaround_by_type_rounds_to_one_decimal():
    start = datetime(2024, 1, 1, tzinfo=UTC)
    rows = turnaround_by_type([_record("1", "A", start, 1), _record("2", "A", start, 2), _record("3", "A", start, 2)])

    assert rows[0].average_turnaround == 1.7


def test_turnaround_by_type_keeps_top_ten():
    start = datetime(2024, 1, 1, tzinfo=UTC)
    records = [_record(str(i), f"type-{i}", start, i) for i in range(15)]

    rows = turnaround_by_type(records)

    assert len(rows) == 10
    assert rows[0].request_type == "type-14"
    assert rows[-1].request_type == "type-5"


def test_type_distribution_counts_open_requests_and_keeps_ties_stable(records):
    rows = type_distribution(records)

    assert [(row.request_type, row.count) for row in rows] == [("Noise", 2), ("Pothole", 2), ("Graffiti", 1)]


def test_volume_by_month_sorts_chronologically_across_years(records):
    rows = volume_by_month(records)

    assert [(row.month, row.label, row.count) for row in rows] == [
        ("2023-12", "Dec 23", 1),
        ("2024-01", "Jan 24", 2),
        ("2024-02", "Feb 24", 2),
    ]


def test_volume_by_month_same_month_single_bucket():
    rows = volume_by_month(
        [
            _record("1", "A", datetime(2024, 5, 1, tzinfo=UTC), None),
            _record("2", "B", datetime(2024, 5, 31, 23, tzinfo=UTC), 1),
        ]
    )

    assert [(row.month, row.count) for row in rows] == [("2024-05", 2)]


def test_volume_by_month_uses_the_records_own_zone():
    plus_five = timezone(timedelta(hours=5))
    rows = volume_by_month([_record("1", "A", datetime(2024, 2, 1, 2, tzinfo=plus_five), None)])

    assert rows[0].month == "2024-02"


def test_empty_input_gives_zero_values():
    assert compute_kpis([]).to_dict() == {
        "total_requests": 0,
        "closed_requests": 0,
        "open_requests": 0,
        "avg_turnaround": 0,
    }
    assert turnaround_by_type([]) == []
    assert type_distribution([]) == []
    assert volume_by_month([]) == []


def test_aggregation_is_repeatable(records):
    first = (compute_kpis(records), turnaround_by_type(records), type_distribution(records), volume_by_month(records))
    second = (compute_kpis(records), turnaround_by_type(records), type_distribution(records), volume_by_month(records))

    assert first == second


def test_kpi_counts_always_add_up(records):
    for end in range(len(records) + 1):
        kpi = compute_kpis(records[:end])
        assert kpi.open_requests + kpi.closed_requests == kpi.total_requests
