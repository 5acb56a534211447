"""Reduce scored records into export-ready shapes.

The projections here carry no formatting decisions beyond field naming; CSV
and KML writers consume them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from locaudit.config import AuditConfig
from locaudit.models import ScoredRecord
from locaudit.stats import is_horizontal_failure, is_vertical_failure, record_status
from locaudit.utils.geodesy import display_altitudes_m

SCORED_CSV_COLUMNS = [
    "point_id",
    "timestamp",
    "device",
    "participant",
    "carrier",
    "stage",
    "building",
    "floor",
    "path",
    "tech",
    "location_source",
    "summary_pool_tech",
    "reported_lat",
    "reported_lon",
    "reported_altitude_m",
    "reported_datum",
    "altitude_hae_m",
    "altitude_geoid_m",
    "horizontal_uncertainty_m",
    "vertical_uncertainty_m",
    "completed_call",
    "correlated_call",
    "valid_horizontal",
    "valid_vertical",
    "truth_lat",
    "truth_lon",
    "truth_altitude_ellipsoid_m",
    "matched",
    "horizontal_error_m",
    "vertical_error_m",
    "vertical_delta_m",
    "within_horizontal_uncertainty",
    "horizontal_fail",
    "vertical_fail",
    "status",
]

FAILURE_LOG_COLUMNS = [
    "Point ID",
    "Floor",
    "Horizontal Error (m)",
    "Vertical Error (m)",
    "Technology",
    "Status",
]


def project_table_rows(records: Iterable[ScoredRecord], config: AuditConfig | None = None) -> list[dict[str, Any]]:
    """Flatten every record (matched or not) into a tabular export row."""

    cfg = config or AuditConfig()
    rows: list[dict[str, Any]] = []
    for record in records:
        fix = record.fix
        truth = record.truth
        rows.append(
            {
                "point_id": record.point_id,
                "timestamp": fix.timestamp,
                "device": fix.device,
                "participant": fix.participant,
                "carrier": fix.carrier,
                "stage": fix.stage,
                "building": record.building,
                "floor": record.floor,
                "path": fix.path,
                "tech": fix.tech,
                "location_source": fix.location_source,
                "summary_pool_tech": fix.summary_pool_tech,
                "reported_lat": fix.reported_lat,
                "reported_lon": fix.reported_lon,
                "reported_altitude_m": fix.reported_altitude_m,
                "reported_datum": fix.reported_datum.value,
                "altitude_hae_m": fix.altitude_hae_m,
                "altitude_geoid_m": fix.altitude_geoid_m,
                "horizontal_uncertainty_m": fix.horizontal_uncertainty_m,
                "vertical_uncertainty_m": fix.vertical_uncertainty_m,
                "completed_call": fix.completed_call,
                "correlated_call": fix.correlated_call,
                "valid_horizontal": fix.valid_horizontal,
                "valid_vertical": fix.valid_vertical,
                "truth_lat": truth.lat if truth is not None else None,
                "truth_lon": truth.lon if truth is not None else None,
                "truth_altitude_ellipsoid_m": truth.altitude_ellipsoid_m if truth is not None else None,
                "matched": record.matched,
                "horizontal_error_m": record.horizontal_error_m,
                "vertical_error_m": record.vertical_error_m,
                "vertical_delta_m": record.vertical_delta_m,
                "within_horizontal_uncertainty": record.within_horizontal_uncertainty,
                "horizontal_fail": is_horizontal_failure(record, cfg.horizontal_fail_m),
                "vertical_fail": is_vertical_failure(record, cfg.vertical_fail_m),
                "status": record_status(record, cfg),
            }
        )
    return rows


def failure_log_rows(records: Iterable[ScoredRecord], config: AuditConfig | None = None) -> list[dict[str, Any]]:
    """Rows for the point failure log: failing matched records only."""

    cfg = config or AuditConfig()
    rows: list[dict[str, Any]] = []
    for record in records:
        if record_status(record, cfg) != "FAIL":
            continue
        rows.append(
            {
                "Point ID": record.point_id,
                "Floor": record.floor or "",
                "Horizontal Error (m)": f"{record.horizontal_error_m:.2f}",
                "Vertical Error (m)": f"{record.vertical_error_m:.2f}",
                "Technology": record.fix.tech or "",
                "Status": "FAIL",
            }
        )
    return rows


@dataclass(frozen=True)
class VectorRecord:
    """Truth-to-reported segment for geographic export."""

    point_id: str
    label: str
    truth_lat: float
    truth_lon: float
    truth_altitude_m: float
    reported_lat: float
    reported_lon: float
    reported_altitude_m: float
    horizontal_error_m: float
    vertical_error_m: float
    passed: bool


def vector_label(record: ScoredRecord) -> str:
    timestamp = (record.fix.timestamp or "").strip()
    timestamp_part = f" | {timestamp}" if timestamp else ""
    errors = f"H:{record.horizontal_error_m:.1f}m V:{record.vertical_error_m:.1f}m"
    return f"Pt {record.point_id}{timestamp_part} | {errors}"


def project_vectors(
    records: Iterable[ScoredRecord],
    group_key: str | None = "participant",
    config: AuditConfig | None = None,
) -> dict[str, list[VectorRecord]]:
    """Group matched records into truth/reported vector pairs.

    Groups appear in first-seen order. With ``group_key=None`` everything
    lands in a single "Vectors" group. Unmatched records are skipped.
    """

    cfg = config or AuditConfig()
    groups: dict[str, list[VectorRecord]] = {}
    for record in records:
        truth = record.truth
        if truth is None:
            continue
        fix = record.fix
        truth_alt, reported_alt = display_altitudes_m(
            truth.altitude_ellipsoid_m,
            reported_altitude_hae_m=fix.altitude_hae_m,
            reported_altitude_geoid_m=fix.altitude_geoid_m,
            reported_altitude_m=fix.reported_altitude_m,
        )
        if group_key is None:
            folder = "Vectors"
        else:
            value = record.field_value(group_key)
            folder = str(value).strip() if value is not None and str(value).strip() else cfg.unknown_label
        groups.setdefault(folder, []).append(
            VectorRecord(
                point_id=record.point_id,
                label=vector_label(record),
                truth_lat=truth.lat,
                truth_lon=truth.lon,
                truth_altitude_m=truth_alt,
                reported_lat=fix.reported_lat,
                reported_lon=fix.reported_lon,
                reported_altitude_m=reported_alt,
                horizontal_error_m=float(record.horizontal_error_m or 0.0),
                vertical_error_m=float(record.vertical_error_m or 0.0),
                passed=record_status(record, cfg) == "PASS",
            )
        )
    return groups
