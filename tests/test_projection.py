import pytest

from locaudit.models import GroundTruthPoint, ReportedFix, ScoredRecord
from locaudit.projection import (
    SCORED_CSV_COLUMNS,
    failure_log_rows,
    project_table_rows,
    project_vectors,
    vector_label,
)

TRUTH = GroundTruthPoint(point_id="P1", lat=40.0, lon=-75.0, altitude_ellipsoid_m=10.0, floor="3")


def _matched(h: float, v: float, **fix_fields) -> ScoredRecord:
    fix = ReportedFix(point_id="P1", reported_lat=40.0001, reported_lon=-75.0, **fix_fields)
    return ScoredRecord(fix=fix, truth=TRUTH, horizontal_error_m=h, vertical_error_m=v, vertical_delta_m=v)


def test_table_rows_cover_every_record_and_column() -> None:
    records = [_matched(60.0, 1.0), ScoredRecord(fix=ReportedFix(point_id="X"))]
    rows = project_table_rows(records)

    assert len(rows) == 2
    assert all(list(row) == SCORED_CSV_COLUMNS for row in rows)
    assert rows[0]["status"] == "FAIL"
    assert rows[0]["floor"] == "3"
    assert rows[1]["status"] == "UNMATCHED"
    assert rows[1]["horizontal_error_m"] is None
    assert rows[1]["truth_lat"] is None


def test_failure_log_lists_failures_only() -> None:
    records = [
        _matched(60.0, 1.0, tech="WiFi"),
        _matched(10.0, 1.0),
        _matched(10.0, 7.25),
        ScoredRecord(fix=ReportedFix(point_id="X")),
    ]
    rows = failure_log_rows(records)

    assert len(rows) == 2
    assert rows[0] == {
        "Point ID": "P1",
        "Floor": "3",
        "Horizontal Error (m)": "60.00",
        "Vertical Error (m)": "1.00",
        "Technology": "WiFi",
        "Status": "FAIL",
    }
    assert rows[1]["Vertical Error (m)"] == "7.25"


def test_vector_label_format() -> None:
    record = _matched(12.345, 0.96, timestamp="2024-05-01 10:00")
    assert vector_label(record) == "Pt P1 | 2024-05-01 10:00 | H:12.3m V:1.0m"
    assert vector_label(_matched(1.0, 2.0)) == "Pt P1 | H:1.0m V:2.0m"


def test_vectors_grouped_by_participant_in_first_seen_order() -> None:
    records = [
        _matched(1.0, 0.0, participant="bob"),
        _matched(70.0, 0.0, participant="alice"),
        _matched(2.0, 0.0, participant="bob"),
        _matched(2.0, 0.0),
        ScoredRecord(fix=ReportedFix(point_id="X", participant="carol")),
    ]
    groups = project_vectors(records)

    assert list(groups) == ["bob", "alice", "Unknown"]
    assert len(groups["bob"]) == 2
    assert groups["bob"][0].passed
    assert not groups["alice"][0].passed
    assert groups["alice"][0].truth_lat == 40.0
    assert groups["alice"][0].reported_lat == pytest.approx(40.0001)


def test_vectors_single_group() -> None:
    groups = project_vectors([_matched(1.0, 0.0, participant="bob")], group_key=None)
    assert list(groups) == ["Vectors"]


def test_vector_altitudes_use_geoid_for_display() -> None:
    record = _matched(1.0, 2.0, altitude_hae_m=12.0, altitude_geoid_m=45.0, reported_altitude_m=45.0)
    (vector,) = project_vectors([record], group_key=None)["Vectors"]
    assert vector.truth_altitude_m == pytest.approx(43.0)
    assert vector.reported_altitude_m == pytest.approx(45.0)
