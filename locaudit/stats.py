"""Accuracy statistics over scored records.

Every function here is a stateless reduction over its input sequence. Records
without a ground-truth match carry no errors: they count towards raw totals but
never towards error distributions or failure-rate denominators.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Iterable, Mapping, Sequence

import numpy as np

from locaudit.config import HORIZONTAL_FAIL_M, VERTICAL_FAIL_M, AuditConfig
from locaudit.models import ScoredRecord

RecordKey = Callable[[ScoredRecord], Any]


def percentile(values: Iterable[float], p: float) -> float:
    """Excel-compatible (PERCENTILE.INC) linear-interpolation percentile.

    Returns 0.0 for an empty input.
    """

    arr = np.asarray(list(values), dtype=float)
    if arr.size == 0:
        return 0.0
    return float(np.percentile(arr, p, method="linear"))


def is_horizontal_failure(record: ScoredRecord, threshold_m: float | None = None) -> bool:
    limit = HORIZONTAL_FAIL_M if threshold_m is None else threshold_m
    return record.horizontal_error_m is not None and record.horizontal_error_m > limit


def is_vertical_failure(record: ScoredRecord, threshold_m: float | None = None) -> bool:
    limit = VERTICAL_FAIL_M if threshold_m is None else threshold_m
    return record.vertical_error_m is not None and abs(record.vertical_error_m) > limit


def record_status(record: ScoredRecord, config: AuditConfig | None = None) -> str:
    """Classify a record as PASS, FAIL or UNMATCHED."""

    cfg = config or AuditConfig()
    if not record.matched:
        return "UNMATCHED"
    if is_horizontal_failure(record, cfg.horizontal_fail_m) or is_vertical_failure(record, cfg.vertical_fail_m):
        return "FAIL"
    return "PASS"


@dataclass(frozen=True)
class StatBucket:
    """Aggregate over an arbitrary record subset."""

    count: int
    horizontal_errors: tuple[float, ...]
    vertical_errors: tuple[float, ...]
    categories: Mapping[str, int] = field(default_factory=dict)

    @property
    def scored(self) -> int:
        return len(self.horizontal_errors)


def stat_bucket(
    records: Iterable[ScoredRecord],
    *,
    category: str | None = "tech",
    unknown_label: str = "Unknown",
) -> StatBucket:
    """Collect sorted error samples and a category frequency map."""

    count = 0
    horizontal: list[float] = []
    vertical: list[float] = []
    categories: dict[str, int] = {}
    for record in records:
        count += 1
        if record.matched:
            horizontal.append(float(record.horizontal_error_m or 0.0))
            vertical.append(abs(float(record.vertical_error_m or 0.0)))
        if category is not None:
            label = _label(record.field_value(category), unknown_label)
            categories[label] = categories.get(label, 0) + 1
    return StatBucket(
        count=count,
        horizontal_errors=tuple(sorted(horizontal)),
        vertical_errors=tuple(sorted(vertical)),
        categories=categories,
    )


@dataclass(frozen=True)
class FailureSummary:
    """Failure counts and rates; rates use scored records as the denominator."""

    total: int
    scored: int
    unmatched: int
    horizontal_failures: int
    vertical_failures: int
    any_failures: int
    horizontal_fail_rate: float | None
    vertical_fail_rate: float | None
    any_fail_rate: float | None


def failure_summary(records: Sequence[ScoredRecord], config: AuditConfig | None = None) -> FailureSummary:
    cfg = config or AuditConfig()
    scored = [r for r in records if r.matched]
    h_fail = sum(1 for r in scored if is_horizontal_failure(r, cfg.horizontal_fail_m))
    v_fail = sum(1 for r in scored if is_vertical_failure(r, cfg.vertical_fail_m))
    any_fail = sum(1 for r in scored if record_status(r, cfg) == "FAIL")
    return FailureSummary(
        total=len(records),
        scored=len(scored),
        unmatched=len(records) - len(scored),
        horizontal_failures=h_fail,
        vertical_failures=v_fail,
        any_failures=any_fail,
        horizontal_fail_rate=_rate(h_fail, len(scored)),
        vertical_fail_rate=_rate(v_fail, len(scored)),
        any_fail_rate=_rate(any_fail, len(scored)),
    )


@dataclass(frozen=True)
class GroupSummary:
    """Per-partition accuracy breakdown."""

    key: str
    count: int
    scored: int
    p80_horizontal_m: float
    p80_vertical_m: float
    mean_horizontal_m: float | None
    mean_vertical_m: float | None
    horizontal_failures: int
    vertical_failures: int
    breakdown: Mapping[str, int] = field(default_factory=dict)

    def share(self, category: str) -> float:
        """Fraction of the partition's records with the given category label."""
        if self.count == 0:
            return 0.0
        return self.breakdown.get(category, 0) / self.count


def group_records(
    records: Iterable[ScoredRecord],
    key: str | RecordKey,
    *,
    category: str | None = "tech",
    config: AuditConfig | None = None,
) -> list[GroupSummary]:
    """Partition records by ``key`` and summarise each partition.

    ``key`` is either a record field name (``device``, ``tech``,
    ``location_source``, ``participant``, ``floor``...) or a callable. The
    result is ordered worst-first by P80 horizontal error; equal P80 values
    keep first-seen order.
    """

    cfg = config or AuditConfig()
    key_fn = _key_function(key)
    partitions: dict[str, list[ScoredRecord]] = {}
    for record in records:
        label = _label(key_fn(record), cfg.unknown_label)
        partitions.setdefault(label, []).append(record)

    summaries = [
        _summarize_partition(label, members, category=category, config=cfg)
        for label, members in partitions.items()
    ]
    return sorted(summaries, key=lambda s: -s.p80_horizontal_m)


def _summarize_partition(
    label: str,
    members: list[ScoredRecord],
    *,
    category: str | None,
    config: AuditConfig,
) -> GroupSummary:
    bucket = stat_bucket(members, category=category, unknown_label=config.unknown_label)
    return GroupSummary(
        key=label,
        count=bucket.count,
        scored=bucket.scored,
        p80_horizontal_m=percentile(bucket.horizontal_errors, config.percentile_rank),
        p80_vertical_m=percentile(bucket.vertical_errors, config.percentile_rank),
        mean_horizontal_m=_mean(bucket.horizontal_errors),
        mean_vertical_m=_mean(bucket.vertical_errors),
        horizontal_failures=sum(1 for r in members if is_horizontal_failure(r, config.horizontal_fail_m)),
        vertical_failures=sum(1 for r in members if is_vertical_failure(r, config.vertical_fail_m)),
        breakdown=bucket.categories,
    )


@dataclass(frozen=True)
class DirectionalBias:
    """Systematic offset of reported positions relative to truth."""

    count: int
    north_m: float
    east_m: float
    magnitude_m: float
    direction: str
    vertical_count: int = 0
    vertical_m: float | None = None
    vertical_direction: str | None = None


def directional_bias(
    records: Iterable[ScoredRecord],
    config: AuditConfig | None = None,
) -> DirectionalBias | None:
    """Average signed reported-minus-truth offset over matched records.

    Returns None when no record has both a reported and a truth coordinate.
    """

    cfg = config or AuditConfig()
    matched = [r for r in records if r.truth is not None]
    if not matched:
        return None

    d_lat = np.array([r.fix.reported_lat - r.truth.lat for r in matched], dtype=float)
    d_lon = np.array([r.fix.reported_lon - r.truth.lon for r in matched], dtype=float)
    mean_lat = float(np.mean([r.truth.lat for r in matched]))

    north_m = float(np.mean(d_lat)) * cfg.meters_per_degree
    east_m = float(np.mean(d_lon)) * cfg.meters_per_degree * math.cos(math.radians(mean_lat))
    direction = compass_label(north_m, east_m, cfg.bias_threshold_m)

    vertical = [r.vertical_delta_m for r in matched if r.vertical_delta_m is not None]
    vertical_m = float(np.mean(vertical)) if vertical else None
    vertical_direction = None
    if vertical_m is not None:
        if vertical_m > cfg.bias_threshold_m:
            vertical_direction = "up"
        elif vertical_m < -cfg.bias_threshold_m:
            vertical_direction = "down"
        else:
            vertical_direction = "centered"

    return DirectionalBias(
        count=len(matched),
        north_m=north_m,
        east_m=east_m,
        magnitude_m=math.hypot(north_m, east_m),
        direction=direction,
        vertical_count=len(vertical),
        vertical_m=vertical_m,
        vertical_direction=vertical_direction,
    )


def compass_label(north_m: float, east_m: float, threshold_m: float = 0.5) -> str:
    """Build a quadrant label (N, SE, ...) from per-axis offsets in meters."""

    label = ""
    if north_m > threshold_m:
        label += "N"
    elif north_m < -threshold_m:
        label += "S"
    if east_m > threshold_m:
        label += "E"
    elif east_m < -threshold_m:
        label += "W"
    return label or "centered"


@dataclass(frozen=True)
class AuditSummary:
    """Headline KPIs and breakdowns for one record set."""

    label: str
    total: int
    matched: int
    unmatched: int
    percentile_rank: float
    p_horizontal_m: float
    p_vertical_m: float
    failures: FailureSummary
    bias: DirectionalBias | None
    by_device: list[GroupSummary]
    by_tech: list[GroupSummary]
    by_source: list[GroupSummary]
    unmatched_point_ids: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def summarize(records: Sequence[ScoredRecord], config: AuditConfig | None = None, *, label: str = "all") -> AuditSummary:
    """Compute the full KPI set for a record set (usually a filtered view)."""

    cfg = config or AuditConfig()
    bucket = stat_bucket(records, category=None)
    failures = failure_summary(records, cfg)
    unmatched_ids: dict[str, None] = {}
    for record in records:
        if not record.matched:
            unmatched_ids.setdefault(record.point_id, None)
    return AuditSummary(
        label=label,
        total=failures.total,
        matched=failures.scored,
        unmatched=failures.unmatched,
        percentile_rank=cfg.percentile_rank,
        p_horizontal_m=percentile(bucket.horizontal_errors, cfg.percentile_rank),
        p_vertical_m=percentile(bucket.vertical_errors, cfg.percentile_rank),
        failures=failures,
        bias=directional_bias(records, cfg),
        by_device=group_records(records, "device", config=cfg),
        by_tech=group_records(records, "tech", category="location_source", config=cfg),
        by_source=group_records(records, "location_source", config=cfg),
        unmatched_point_ids=list(unmatched_ids),
    )


def _key_function(key: str | RecordKey) -> RecordKey:
    if callable(key):
        return key
    return lambda record: record.field_value(key)


def _label(value: Any, unknown_label: str) -> str:
    if value is None:
        return unknown_label
    text = str(value).strip()
    return text or unknown_label


def _mean(values: Sequence[float]) -> float | None:
    return float(np.mean(values)) if len(values) else None


def _rate(numerator: int, denominator: int) -> float | None:
    return numerator / denominator if denominator else None
