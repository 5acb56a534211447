"""Ground-truth lookup keyed by test point ID."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping

from locaudit.models import GroundTruthPoint
from locaudit.utils.coerce import coerce_float, coerce_label, normalize_point_id
from locaudit.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class TruthColumns:
    """Header names of the surveyed test point sheet."""

    point_id: str = "Test Point ID"
    lat: str = "Latitude"
    lon: str = "Longitude"
    altitude_ellipsoid: str = "Altitude (Ellipsoid) Meters"
    building: str = "Building ID"
    floor: str = "Floor"


class GroundTruthStore(Mapping[str, GroundTruthPoint]):
    """Read-only ID -> GroundTruthPoint mapping with load diagnostics."""

    def __init__(
        self,
        points: Mapping[str, GroundTruthPoint] | None = None,
        *,
        skipped_rows: int = 0,
        duplicate_ids: tuple[str, ...] = (),
    ) -> None:
        self._points = MappingProxyType(dict(points or {}))
        self.skipped_rows = skipped_rows
        self.duplicate_ids = duplicate_ids

    @classmethod
    def empty(cls) -> GroundTruthStore:
        """Store used when no reference data could be loaded."""
        return cls()

    def __getitem__(self, point_id: str) -> GroundTruthPoint:
        return self._points[point_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._points)

    def __len__(self) -> int:
        return len(self._points)

    def __repr__(self) -> str:
        return f"GroundTruthStore(points={len(self)}, skipped_rows={self.skipped_rows})"


def truth_point_from_row(row: Mapping[str, Any], columns: TruthColumns) -> GroundTruthPoint | None:
    """Build a GroundTruthPoint from a raw row, or None if it has no identifier."""

    point_id = normalize_point_id(row.get(columns.point_id))
    if not point_id:
        return None
    return GroundTruthPoint(
        point_id=point_id,
        lat=coerce_float(row.get(columns.lat)),
        lon=coerce_float(row.get(columns.lon)),
        altitude_ellipsoid_m=coerce_float(row.get(columns.altitude_ellipsoid)),
        building=coerce_label(row.get(columns.building)),
        floor=coerce_label(row.get(columns.floor)),
    )


def build_ground_truth(
    rows: Iterable[Mapping[str, Any]],
    columns: TruthColumns | None = None,
) -> GroundTruthStore:
    """Build the ground-truth lookup from raw test point rows.

    Rows without an identifier are skipped and counted. When an identifier
    repeats, the later row replaces the earlier one.
    """

    cols = columns or TruthColumns()
    points: dict[str, GroundTruthPoint] = {}
    duplicates: dict[str, None] = {}
    skipped = 0
    for row in rows:
        point = truth_point_from_row(row, cols)
        if point is None:
            skipped += 1
            continue
        if point.point_id in points:
            duplicates.setdefault(point.point_id, None)
        points[point.point_id] = point

    if duplicates:
        logger.warning(
            "Duplicate test point IDs (last row wins): %s",
            ", ".join(list(duplicates)[:10]),
        )
    if skipped:
        logger.debug("Skipped %d test point rows without an ID", skipped)
    logger.info("Loaded %d test points from lookup.", len(points))
    return GroundTruthStore(points, skipped_rows=skipped, duplicate_ids=tuple(duplicates))
