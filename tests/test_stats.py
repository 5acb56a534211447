import pytest

from locaudit.config import AuditConfig
from locaudit.models import GroundTruthPoint, ReportedFix, ScoredRecord
from locaudit.stats import (
    failure_summary,
    group_records,
    is_horizontal_failure,
    is_vertical_failure,
    percentile,
    record_status,
    stat_bucket,
    summarize,
)

TRUTH = GroundTruthPoint(point_id="P1", lat=40.0, lon=-75.0)


def _scored(h: float | None, v: float | None = 0.0, **fix_fields) -> ScoredRecord:
    fix = ReportedFix(point_id=fix_fields.pop("point_id", "P1"), **fix_fields)
    if h is None:
        return ScoredRecord(fix=fix)
    return ScoredRecord(fix=fix, truth=TRUTH, horizontal_error_m=h, vertical_error_m=abs(v), vertical_delta_m=v)


def test_percentile_interpolates_like_excel() -> None:
    assert percentile([10, 20, 30, 40, 50], 80) == pytest.approx(42.0)
    assert percentile([50, 10, 40, 20, 30], 80) == pytest.approx(42.0)


def test_percentile_degenerate_inputs() -> None:
    for p in (0, 50, 80, 100):
        assert percentile([], p) == 0.0
        assert percentile([7.5], p) == 7.5


def test_failure_thresholds_are_strict() -> None:
    assert not is_horizontal_failure(_scored(50.0))
    assert is_horizontal_failure(_scored(50.01))
    assert not is_vertical_failure(_scored(1.0, 5.0))
    assert is_vertical_failure(_scored(1.0, -5.01))


def test_unmatched_record_is_neither_pass_nor_fail() -> None:
    record = _scored(None)
    assert not is_horizontal_failure(record)
    assert not is_vertical_failure(record)
    assert record_status(record) == "UNMATCHED"


def test_failure_rates_use_scored_denominator() -> None:
    records = [_scored(60.0), _scored(10.0, 6.0), _scored(5.0), _scored(None), _scored(None)]
    summary = failure_summary(records)

    assert summary.total == 5
    assert summary.scored == 3
    assert summary.unmatched == 2
    assert summary.horizontal_failures == 1
    assert summary.vertical_failures == 1
    assert summary.any_failures == 2
    assert summary.horizontal_fail_rate == pytest.approx(1 / 3)
    assert summary.any_fail_rate == pytest.approx(2 / 3)


def test_failure_rates_are_not_applicable_without_scored_records() -> None:
    summary = failure_summary([_scored(None)])
    assert summary.horizontal_fail_rate is None
    assert summary.vertical_fail_rate is None


def test_custom_thresholds() -> None:
    cfg = AuditConfig(horizontal_fail_m=3.0, vertical_fail_m=1.0)
    assert record_status(_scored(4.0), cfg) == "FAIL"
    assert record_status(_scored(2.0, 0.5), cfg) == "PASS"


def test_stat_bucket_counts_all_but_samples_scored_only() -> None:
    bucket = stat_bucket([_scored(30.0, -2.0, tech="WiFi"), _scored(10.0, 1.0, tech="GNSS"), _scored(None, tech="WiFi")])

    assert bucket.count == 3
    assert bucket.horizontal_errors == (10.0, 30.0)
    assert bucket.vertical_errors == (1.0, 2.0)
    assert dict(bucket.categories) == {"WiFi": 2, "GNSS": 1}


def test_group_records_sorted_worst_first() -> None:
    records = [
        _scored(5.0, device="Pixel", tech="WiFi"),
        _scored(80.0, device="Galaxy", tech="GNSS"),
        _scored(70.0, device="Galaxy", tech="WiFi"),
        _scored(1.0, device=None, tech=None),
    ]
    groups = group_records(records, "device")

    assert [g.key for g in groups] == ["Galaxy", "Pixel", "Unknown"]
    galaxy = groups[0]
    assert galaxy.count == 2
    assert galaxy.p80_horizontal_m == pytest.approx(78.0)
    assert galaxy.horizontal_failures == 2
    assert galaxy.share("WiFi") == pytest.approx(0.5)
    assert galaxy.mean_horizontal_m == pytest.approx(75.0)


def test_group_records_ties_keep_first_seen_order() -> None:
    records = [_scored(5.0, device="B"), _scored(5.0, device="A")]
    assert [g.key for g in group_records(records, "device")] == ["B", "A"]


def test_group_records_accepts_callable_key() -> None:
    records = [_scored(5.0, participant="p1"), _scored(9.0, participant="p2")]
    groups = group_records(records, lambda r: r.fix.participant.upper())
    assert [g.key for g in groups] == ["P2", "P1"]


def test_group_with_only_unmatched_records_reports_zero_percentiles() -> None:
    (group,) = group_records([_scored(None, device="X")], "device")
    assert group.count == 1
    assert group.scored == 0
    assert group.p80_horizontal_m == 0.0
    assert group.mean_horizontal_m is None


def test_summarize_collects_kpis() -> None:
    records = [_scored(float(h), device="D", tech="WiFi", location_source="fused") for h in (10, 20, 30, 40, 50)]
    records.append(_scored(None, point_id="P404"))
    summary = summarize(records)

    assert summary.total == 6
    assert summary.matched == 5
    assert summary.unmatched == 1
    assert summary.p_horizontal_m == pytest.approx(42.0)
    assert summary.unmatched_point_ids == ["P404"]
    assert summary.by_device[0].key == "D"
    assert summary.by_source[0].key == "fused"
    assert summary.to_dict()["failures"]["scored"] == 5


def test_summarize_empty_input() -> None:
    summary = summarize([])
    assert summary.total == 0
    assert summary.p_horizontal_m == 0.0
    assert summary.bias is None
    assert summary.by_device == []
