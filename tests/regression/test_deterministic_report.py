from pathlib import Path

import pytest

from civic_requests.cli import parse_args, run_command


def _run_once(out_path: Path, session_id: str) -> None:
    args = parse_args(
        [
            "report",
            "tests/fixtures/requests_sample.json",
            "--map",
            "unique_key=Unique Key",
            "--map",
            "request_type=Complaint Type",
            "--map",
            "created_date=Created Date",
            "--map",
            "closed_date=Closed Date",
            "--out",
            str(out_path),
            "--session-id",
            session_id,
        ]
    )
    assert run_command(args) == 0


@pytest.mark.regression
def test_dashboard_output_is_byte_stable_for_same_inputs(tmp_path: Path):
    first = tmp_path / "first.json"
    second = tmp_path / "second.json"

    _run_once(first, "session-a")
    _run_once(second, "session-b")

    assert first.read_bytes() == second.read_bytes()
