"""CSV, JSON and KML writers for audit outputs."""

from __future__ import annotations

import csv
import json
import math
from pathlib import Path
from typing import Any, Sequence

from locaudit.config import AuditConfig
from locaudit.kml import build_kml_document
from locaudit.models import ScoredRecord
from locaudit.projection import (
    FAILURE_LOG_COLUMNS,
    SCORED_CSV_COLUMNS,
    failure_log_rows,
    project_table_rows,
    project_vectors,
)
from locaudit.stats import AuditSummary


def save_records_csv(path: str | Path, records: Sequence[ScoredRecord], config: AuditConfig | None = None) -> Path:
    """Save every scored record (matched or not) to a CSV file."""

    target = Path(path)
    with target.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=SCORED_CSV_COLUMNS)
        writer.writeheader()
        for row in project_table_rows(records, config):
            writer.writerow({key: _format_value(value) for key, value in row.items()})
    return target


def save_failure_report_csv(
    path: str | Path,
    records: Sequence[ScoredRecord],
    summary: AuditSummary,
    config: AuditConfig | None = None,
) -> Path:
    """Save the audit summary preamble followed by the point failure log."""

    cfg = config or AuditConfig()
    rank = f"P{summary.percentile_rank:g}"
    target = Path(path)
    with target.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.writer(handle)
        writer.writerow(["BUILDING AUDIT SUMMARY"])
        writer.writerow(
            [f"{rank} Horizontal Error", f"{summary.p_horizontal_m:.2f}m (Threshold: {cfg.horizontal_fail_m:g}m)"]
        )
        writer.writerow(
            [f"{rank} Vertical Error", f"{summary.p_vertical_m:.2f}m (Threshold: {cfg.vertical_fail_m:g}m)"]
        )
        writer.writerow(["Total Test Points", summary.total])
        writer.writerow(["Unmatched Test Points", summary.unmatched])
        writer.writerow([])
        writer.writerow(["POINT FAILURE LOG"])
        writer.writerow(FAILURE_LOG_COLUMNS)
        for row in failure_log_rows(records, cfg):
            writer.writerow([row[column] for column in FAILURE_LOG_COLUMNS])
    return target


def save_summary_json(path: str | Path, summary: AuditSummary) -> Path:
    target = Path(path)
    target.write_text(json.dumps(sanitize_json(summary.to_dict()), indent=2, allow_nan=False), encoding="utf-8")
    return target


def save_kml(
    path: str | Path,
    records: Sequence[ScoredRecord],
    *,
    doc_name: str,
    group_key: str | None = "participant",
    config: AuditConfig | None = None,
) -> Path:
    """Write truth-to-reported vectors as a KML document."""

    groups = project_vectors(records, group_key=group_key, config=config)
    target = Path(path)
    target.write_text(build_kml_document(groups, doc_name), encoding="utf-8")
    return target


def sanitize_json(obj: Any) -> Any:
    """Convert NaN/Inf to None so json.dumps(..., allow_nan=False) succeeds."""
    if isinstance(obj, float):
        return None if (math.isnan(obj) or math.isinf(obj)) else obj
    if isinstance(obj, dict):
        return {str(k): sanitize_json(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [sanitize_json(v) for v in obj]
    return obj


def _format_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)
