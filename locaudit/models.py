"""Core data models for location audits."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Callable, Iterable, Iterator, Sequence

from locaudit.utils.geodesy import VerticalDatum


@dataclass(frozen=True)
class GroundTruthPoint:
    """Surveyed reference coordinate for a physical test point."""

    point_id: str
    lat: float
    lon: float
    altitude_ellipsoid_m: float = 0.0
    building: str | None = None
    floor: str | None = None


@dataclass(frozen=True)
class ReportedFix:
    """Single device-reported location measurement."""

    point_id: str
    timestamp: str | None = None
    device: str | None = None
    reported_lat: float = 0.0
    reported_lon: float = 0.0
    reported_altitude_m: float = 0.0
    reported_datum: VerticalDatum = VerticalDatum.GEOID
    altitude_hae_m: float | None = None
    altitude_geoid_m: float | None = None
    vertical_error_m: float | None = None  # Pre-computed upstream, trusted when present.
    horizontal_uncertainty_m: float = 0.0
    vertical_uncertainty_m: float = 0.0
    tech: str | None = None
    location_source: str | None = None
    floor: str | None = None
    completed_call: bool | None = None
    correlated_call: bool | None = None
    valid_horizontal: bool | None = None
    valid_vertical: bool | None = None
    participant: str | None = None
    carrier: str | None = None
    summary_pool_tech: str | None = None
    stage: str | None = None
    building: str | None = None
    path: str | None = None
    chosen_location: str | None = None
    handset_os: str | None = None
    phone_number: str | None = None


@dataclass(frozen=True)
class ScoredRecord:
    """A fix merged with its ground truth match and computed errors.

    Error fields are populated iff ``truth`` is not None.
    """

    fix: ReportedFix
    truth: GroundTruthPoint | None = None
    horizontal_error_m: float | None = None
    vertical_error_m: float | None = None
    vertical_delta_m: float | None = None
    within_horizontal_uncertainty: bool = False

    @property
    def point_id(self) -> str:
        return self.fix.point_id

    @property
    def matched(self) -> bool:
        return self.truth is not None

    @property
    def floor(self) -> str | None:
        if self.fix.floor is not None:
            return self.fix.floor
        return self.truth.floor if self.truth is not None else None

    @property
    def building(self) -> str | None:
        if self.fix.building is not None:
            return self.fix.building
        return self.truth.building if self.truth is not None else None

    def field_value(self, name: str) -> object:
        """Look up a field by name on the record, then the fix, then the truth point."""

        if name in _RECORD_FIELDS:
            return getattr(self, name)
        if name in _FIX_FIELDS:
            return getattr(self.fix, name)
        if self.truth is not None and name in _TRUTH_FIELDS:
            return getattr(self.truth, name)
        if name in _TRUTH_FIELDS:
            return None
        raise KeyError(f"Unknown record field '{name}'")


_RECORD_FIELDS = {
    "point_id",
    "matched",
    "floor",
    "building",
    "horizontal_error_m",
    "vertical_error_m",
    "vertical_delta_m",
    "within_horizontal_uncertainty",
}
_FIX_FIELDS = {f.name for f in fields(ReportedFix)}
_TRUTH_FIELDS = {f.name for f in fields(GroundTruthPoint)}


@dataclass(frozen=True)
class AuditSnapshot(Sequence[ScoredRecord]):
    """Immutable working set of scored records.

    Filtering never mutates the snapshot; :meth:`subset` returns a new one.
    """

    records: tuple[ScoredRecord, ...] = ()
    label: str = "all"

    def __post_init__(self) -> None:
        object.__setattr__(self, "records", tuple(self.records))

    @classmethod
    def from_records(cls, records: Iterable[ScoredRecord], label: str = "all") -> AuditSnapshot:
        return cls(records=tuple(records), label=label)

    def __getitem__(self, index):
        return self.records[index]

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[ScoredRecord]:
        return iter(self.records)

    @property
    def matched_count(self) -> int:
        return sum(1 for record in self.records if record.matched)

    @property
    def unmatched_count(self) -> int:
        return len(self.records) - self.matched_count

    @property
    def unmatched_point_ids(self) -> tuple[str, ...]:
        """Distinct unmatched point IDs in first-seen order."""
        seen: dict[str, None] = {}
        for record in self.records:
            if not record.matched:
                seen.setdefault(record.point_id, None)
        return tuple(seen)

    def subset(self, predicate: Callable[[ScoredRecord], bool], label: str | None = None) -> AuditSnapshot:
        """Return a new snapshot holding the records that satisfy ``predicate``."""
        return replace(self, records=tuple(r for r in self.records if predicate(r)), label=label or self.label)
