import pytest

from locaudit.config import AuditConfig
from locaudit.correlation import correlate
from locaudit.models import GroundTruthPoint, ReportedFix, ScoredRecord
from locaudit.stats import compass_label, directional_bias
from locaudit.truth import build_ground_truth


def _record(d_lat: float, d_lon: float, *, lat: float = 40.0, lon: float = -75.0, dz: float | None = 0.0) -> ScoredRecord:
    truth = GroundTruthPoint(point_id="P", lat=lat, lon=lon)
    fix = ReportedFix(point_id="P", reported_lat=lat + d_lat, reported_lon=lon + d_lon)
    return ScoredRecord(
        fix=fix,
        truth=truth,
        horizontal_error_m=0.0,
        vertical_error_m=abs(dz) if dz is not None else None,
        vertical_delta_m=dz,
    )


def test_north_bias_of_one_millidegree() -> None:
    bias = directional_bias([_record(0.001, 0.0), _record(0.001, 0.0)])

    assert bias is not None
    assert bias.count == 2
    assert bias.magnitude_m == pytest.approx(111.0, rel=1e-3)
    assert bias.north_m == pytest.approx(111.0)
    assert bias.east_m == pytest.approx(0.0)
    assert bias.direction == "N"


def test_longitude_is_scaled_by_cosine_of_latitude() -> None:
    bias = directional_bias([_record(0.0, -0.001, lat=60.0)])
    assert bias is not None
    assert bias.east_m == pytest.approx(-55.5, rel=1e-3)
    assert bias.direction == "W"


def test_quadrant_labels() -> None:
    assert compass_label(3.0, 2.0) == "NE"
    assert compass_label(-3.0, -2.0) == "SW"
    assert compass_label(0.4, -0.4) == "centered"
    assert compass_label(0.4, 0.6) == "E"


def test_offsets_cancel_to_centered() -> None:
    bias = directional_bias([_record(0.001, 0.0), _record(-0.001, 0.0)])
    assert bias is not None
    assert bias.direction == "centered"


def test_vertical_bias_reported_separately() -> None:
    bias = directional_bias([_record(0.0, 0.0, dz=2.0), _record(0.0, 0.0, dz=1.0), _record(0.0, 0.0, dz=None)])
    assert bias is not None
    assert bias.vertical_count == 2
    assert bias.vertical_m == pytest.approx(1.5)
    assert bias.vertical_direction == "up"

    small = directional_bias([_record(0.0, 0.0, dz=-0.3)])
    assert small is not None
    assert small.vertical_direction == "centered"


def test_bias_not_applicable_without_matches() -> None:
    assert directional_bias([]) is None
    assert directional_bias([ScoredRecord(fix=ReportedFix(point_id="X"))]) is None


def test_bias_threshold_is_configurable() -> None:
    bias = directional_bias([_record(0.00001, 0.0)], AuditConfig(bias_threshold_m=2.0))
    assert bias is not None
    assert bias.direction == "centered"


def test_vertical_bias_uses_altitudes_when_error_column_is_present() -> None:
    truth = build_ground_truth(
        [{"Test Point ID": "P1", "Latitude": 40.0, "Longitude": -75.0, "Altitude (Ellipsoid) Meters": 10.0}]
    )
    fix = ReportedFix(
        point_id="P1",
        reported_lat=40.0,
        reported_lon=-75.0,
        reported_altitude_m=6.0,
        vertical_error_m=4.0,
    )
    snapshot = correlate([fix], truth)

    assert snapshot[0].vertical_error_m == pytest.approx(4.0)
    bias = directional_bias(snapshot)
    assert bias is not None
    assert bias.vertical_m == pytest.approx(-4.0)
    assert bias.vertical_direction == "down"
