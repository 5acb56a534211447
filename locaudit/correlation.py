"""Join reported fixes to ground truth and score them."""

from __future__ import annotations

from typing import Iterable, Mapping

from locaudit.models import AuditSnapshot, GroundTruthPoint, ReportedFix, ScoredRecord
from locaudit.utils.coerce import normalize_point_id
from locaudit.utils.geodesy import horizontal_distance_m, vertical_delta_m, vertical_error_m
from locaudit.utils.logging import get_logger

logger = get_logger(__name__)


def score_fix(fix: ReportedFix, truth: GroundTruthPoint | None) -> ScoredRecord:
    """Score a single fix against its matched ground truth point.

    The signed vertical delta always comes from the altitudes; a workbook
    ``Vertical Error`` cell only overrides the absolute error.
    """

    if truth is None:
        return ScoredRecord(fix=fix)

    horizontal = horizontal_distance_m(truth.lat, truth.lon, fix.reported_lat, fix.reported_lon)
    altitudes = dict(
        reported_altitude_hae_m=fix.altitude_hae_m,
        reported_altitude_geoid_m=fix.altitude_geoid_m,
    )
    delta = vertical_delta_m(fix.reported_altitude_m, fix.reported_datum, truth.altitude_ellipsoid_m, **altitudes)
    error = vertical_error_m(
        fix.reported_altitude_m,
        fix.reported_datum,
        truth.altitude_ellipsoid_m,
        precomputed_error_m=fix.vertical_error_m,
        **altitudes,
    )
    return ScoredRecord(
        fix=fix,
        truth=truth,
        horizontal_error_m=horizontal,
        vertical_error_m=error,
        vertical_delta_m=delta,
        within_horizontal_uncertainty=horizontal <= fix.horizontal_uncertainty_m,
    )


def correlate(
    fixes: Iterable[ReportedFix],
    ground_truth: Mapping[str, GroundTruthPoint] | None,
    *,
    label: str = "all",
) -> AuditSnapshot:
    """Score every fix against the ground-truth lookup.

    Output order follows input order. Fixes whose point ID has no ground truth
    are kept with their error fields unset.
    """

    lookup = ground_truth or {}
    records = []
    for fix in fixes:
        truth = lookup.get(normalize_point_id(fix.point_id))
        records.append(score_fix(fix, truth))
    snapshot = AuditSnapshot.from_records(records, label=label)

    logger.info(
        "Correlated %d rows: %d matched, %d unmatched",
        len(snapshot),
        snapshot.matched_count,
        snapshot.unmatched_count,
    )
    missing = snapshot.unmatched_point_ids
    if missing:
        logger.warning("Missing point IDs (first 10): %s", ", ".join(missing[:10]))
        logger.warning("Available test point IDs (first 10): %s", ", ".join(list(lookup)[:10]))
    return snapshot
