"""Predicates for narrowing an audit snapshot."""

from __future__ import annotations

from dataclasses import replace
from typing import Callable, Iterable

from locaudit.models import AuditSnapshot, ScoredRecord

Predicate = Callable[[ScoredRecord], bool]


def field_equals(name: str, value: object) -> Predicate:
    """Match records whose field renders to the same string as ``value``."""

    expected = str(value).strip()

    def _predicate(record: ScoredRecord) -> bool:
        actual = record.field_value(name)
        return actual is not None and str(actual).strip() == expected

    return _predicate


def filter_snapshot(
    snapshot: AuditSnapshot,
    *,
    stage: str | None = None,
    building: str | None = None,
    floor: str | None = None,
) -> AuditSnapshot:
    """Apply the optional stage/building/floor filters; None means "all"."""

    filtered = snapshot
    labels = []
    for name, value in (("stage", stage), ("building", building), ("floor", floor)):
        if value is None:
            continue
        filtered = filtered.subset(field_equals(name, value))
        labels.append(f"{name}={value}")
    if labels:
        filtered = replace(filtered, label=",".join(labels))
    return filtered


def distinct_floors(records: Iterable[ScoredRecord]) -> list[str]:
    """Distinct floor labels, numeric floors first in numeric order."""

    floors = {record.floor for record in records if record.floor is not None}
    return sorted(floors, key=_floor_sort_key)


def _floor_sort_key(label: str) -> tuple[int, float, str]:
    try:
        return (0, float(label), label)
    except ValueError:
        return (1, 0.0, label)
