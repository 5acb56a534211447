"""Headless audit run: load inputs, score, and write report outputs."""

from __future__ import annotations

import json
import logging
from dataclasses import fields
from pathlib import Path
from typing import Any

from locaudit.config import AuditConfig
from locaudit.correlation import correlate
from locaudit.export import save_failure_report_csv, save_kml, save_records_csv, save_summary_json
from locaudit.filters import filter_snapshot
from locaudit.ingest import load_fixes, load_ground_truth
from locaudit.stats import AuditSummary, summarize
from locaudit.utils.logging import get_logger

logger = get_logger(__name__)

RECORDS_CSV = "scored_records.csv"
FAILURES_CSV = "audit_failures.csv"
SUMMARY_JSON = "summary.json"
KML_FILE = "correlation.kml"


class NoDataError(ValueError):
    """The measurement set is empty after loading or filtering."""


def load_config(path: str | Path | None) -> AuditConfig:
    """Build an AuditConfig from a JSON file of field overrides."""

    if path is None:
        return AuditConfig()
    overrides: dict[str, Any] = json.loads(Path(path).read_text(encoding="utf-8"))
    known = {field.name for field in fields(AuditConfig)}
    for key in overrides:
        if key not in known:
            raise ValueError(f"Unknown AuditConfig override '{key}' in {path}")
    return AuditConfig(**overrides)


def run_audit(
    cfg: AuditConfig,
    test_points_path: Path,
    workbook_path: Path,
    run_dir: Path,
    *,
    stage: str | None = None,
    building: str | None = None,
    floor: str | None = None,
    group_key: str | None = None,
    save_figs: bool = True,
    verbose: bool = False,
) -> AuditSummary:
    if verbose:
        logging.getLogger("locaudit").setLevel(logging.DEBUG)

    ground_truth = load_ground_truth(test_points_path, cfg)
    if not ground_truth:
        logger.warning("No ground truth available; every record will be unmatched.")
    fixes = load_fixes(workbook_path, cfg)
    if not fixes:
        raise NoDataError(f"No data rows found in {cfg.correlation_sheet} sheet.")

    snapshot = correlate(fixes, ground_truth)
    view = filter_snapshot(snapshot, stage=stage, building=building, floor=floor)
    if not view:
        raise NoDataError("No matching rows for the selected filters.")

    summary = summarize(view, cfg, label=view.label)

    run_dir.mkdir(parents=True, exist_ok=True)
    save_records_csv(run_dir / RECORDS_CSV, view, cfg)
    save_failure_report_csv(run_dir / FAILURES_CSV, view, summary, cfg)
    save_summary_json(run_dir / SUMMARY_JSON, summary)

    building_label = building or view[0].building or cfg.unknown_label
    kml_group = cfg.kml_group_key if group_key is None else group_key
    save_kml(
        run_dir / KML_FILE,
        view,
        doc_name=f"Correlation KML - {building_label} ({len(view)} points)",
        group_key=kml_group or None,
        config=cfg,
    )

    if save_figs:
        from locaudit.plots import save_audit_plots

        save_audit_plots(view, out_dir=run_dir / "plots", config=cfg)

    failures = summary.failures
    logger.info(
        "P%g horizontal %.2f m, vertical %.2f m; %d/%d scored fixes failing",
        summary.percentile_rank,
        summary.p_horizontal_m,
        summary.p_vertical_m,
        failures.any_failures,
        failures.scored,
    )
    logger.info("Saved outputs to %s", run_dir)
    return summary
