"""Spreadsheet ingestion for test points and correlation workbooks.

Readers return plain row dictionaries keyed by header text. Conversion into
typed records (with the "missing numeric is 0" default fill) happens once,
here, so the scoring code never sees raw cells.
"""

from __future__ import annotations

import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping

import pandas as pd

from locaudit.config import AuditConfig
from locaudit.models import ReportedFix
from locaudit.truth import GroundTruthStore, TruthColumns, build_ground_truth
from locaudit.utils.coerce import (
    coerce_flag,
    coerce_float,
    coerce_label,
    coerce_optional_float,
    normalize_point_id,
)
from locaudit.utils.geodesy import VerticalDatum
from locaudit.utils.logging import get_logger

logger = get_logger(__name__)

CSV_SUFFIXES = {".csv", ".txt"}


class DataUnavailableError(RuntimeError):
    """A source dataset could not be obtained or parsed."""


@dataclass(frozen=True)
class CorrelationColumns:
    """Header names of the Correlation sheet.

    Only ``point_id`` is required; every other column may be absent.
    """

    point_id: str = "Point ID"
    timestamp: str = "Timestamp"
    device: str = "Device"
    reported_lat: str = "Location Latitude"
    reported_lon: str = "Location Longitude"
    reported_altitude: str = "Location Altitude"
    altitude_hae: str = "Location Altitude (HAE)"
    altitude_geoid: str = "Location Altitude (Geoid)"
    vertical_error: str = "Vertical Error"
    horizontal_uncertainty: str = "Horizontal Uncertainty"
    vertical_uncertainty: str = "Vertical Uncertainty"
    tech: str = "Technology"
    location_source: str = "Location Source"
    floor: str = "Floor"
    completed_call: str = "Completed Call"
    correlated_call: str = "Correlated Call"
    valid_horizontal: str = "Valid Horizontal Location"
    valid_vertical: str = "Valid Vertical Location"
    participant: str = "Participant"
    carrier: str = "Carrier"
    summary_pool_tech: str = "Summary Pool Tech"
    stage: str = "Stage"
    building: str = "Building ID"
    path: str = "Path ID"
    chosen_location: str = "Chosen Location"
    handset_os: str = "Handset OS"
    phone_number: str = "Location Phone Number"
    altitude_datum: VerticalDatum = VerticalDatum.GEOID


def read_table(
    path: str | Path,
    *,
    sheet: int | str = 0,
    header_row: int = 0,
    required: Iterable[str] = (),
) -> list[dict[str, Any]]:
    """Read one sheet (or a CSV file) into row dictionaries.

    ``header_row`` is the zero-based row holding the column headers; rows
    above it are ignored and fully blank rows are dropped.

    Raises:
        DataUnavailableError: the file, sheet or a required header is missing,
            or the file cannot be parsed.
    """

    source = Path(path)
    if not source.exists():
        raise DataUnavailableError(f"File not found: {source}")
    try:
        if source.suffix.lower() in CSV_SUFFIXES:
            frame = pd.read_csv(source, skiprows=header_row, dtype=object)
        else:
            frame = pd.read_excel(source, sheet_name=sheet, header=header_row, dtype=object)
    except (OSError, ValueError, KeyError, zipfile.BadZipFile) as exc:
        raise DataUnavailableError(f"Could not read {source.name} (sheet {sheet!r}): {exc}") from exc

    frame.columns = [str(column).strip() for column in frame.columns]
    missing = [header for header in required if header not in frame.columns]
    if missing:
        raise DataUnavailableError(f"Missing required headers: {', '.join(missing)}")

    frame = frame.dropna(how="all")
    return frame.to_dict(orient="records")


def read_test_point_rows(path: str | Path, config: AuditConfig | None = None) -> list[dict[str, Any]]:
    cfg = config or AuditConfig()
    return read_table(path, sheet=cfg.test_points_sheet, header_row=0)


def load_ground_truth(
    path: str | Path,
    config: AuditConfig | None = None,
    columns: TruthColumns | None = None,
) -> GroundTruthStore:
    """Load the ground-truth lookup, degrading to an empty store on failure."""

    try:
        rows = read_test_point_rows(path, config)
    except DataUnavailableError as exc:
        logger.error("Error loading test points: %s", exc)
        return GroundTruthStore.empty()
    return build_ground_truth(rows, columns)


def read_correlation_rows(
    path: str | Path,
    config: AuditConfig | None = None,
    columns: CorrelationColumns | None = None,
) -> list[dict[str, Any]]:
    cfg = config or AuditConfig()
    cols = columns or CorrelationColumns()
    rows = read_table(
        path,
        sheet=cfg.correlation_sheet,
        header_row=cfg.correlation_header_row,
        required=[cols.point_id],
    )
    sample = [normalize_point_id(row.get(cols.point_id)) for row in rows[:10]]
    logger.info("Loaded %d rows from %s sheet.", len(rows), cfg.correlation_sheet)
    logger.debug("Sample Point IDs from workbook: %s", [p for p in sample if p])
    return rows


def fix_from_row(row: Mapping[str, Any], columns: CorrelationColumns | None = None) -> ReportedFix:
    """Convert one raw Correlation row into a typed ReportedFix."""

    cols = columns or CorrelationColumns()
    return ReportedFix(
        point_id=normalize_point_id(row.get(cols.point_id)),
        timestamp=coerce_label(row.get(cols.timestamp)),
        device=coerce_label(row.get(cols.device)),
        reported_lat=coerce_float(row.get(cols.reported_lat)),
        reported_lon=coerce_float(row.get(cols.reported_lon)),
        reported_altitude_m=coerce_float(row.get(cols.reported_altitude)),
        reported_datum=cols.altitude_datum,
        altitude_hae_m=coerce_optional_float(row.get(cols.altitude_hae)),
        altitude_geoid_m=coerce_optional_float(row.get(cols.altitude_geoid)),
        vertical_error_m=coerce_optional_float(row.get(cols.vertical_error)),
        horizontal_uncertainty_m=coerce_float(row.get(cols.horizontal_uncertainty)),
        vertical_uncertainty_m=coerce_float(row.get(cols.vertical_uncertainty)),
        tech=coerce_label(row.get(cols.tech)),
        location_source=coerce_label(row.get(cols.location_source)),
        floor=coerce_label(row.get(cols.floor)),
        completed_call=coerce_flag(row.get(cols.completed_call)),
        correlated_call=coerce_flag(row.get(cols.correlated_call)),
        valid_horizontal=coerce_flag(row.get(cols.valid_horizontal)),
        valid_vertical=coerce_flag(row.get(cols.valid_vertical)),
        participant=coerce_label(row.get(cols.participant)),
        carrier=coerce_label(row.get(cols.carrier)),
        summary_pool_tech=coerce_label(row.get(cols.summary_pool_tech)),
        stage=coerce_label(row.get(cols.stage)),
        building=coerce_label(row.get(cols.building)),
        path=coerce_label(row.get(cols.path)),
        chosen_location=coerce_label(row.get(cols.chosen_location)),
        handset_os=coerce_label(row.get(cols.handset_os)),
        phone_number=coerce_label(row.get(cols.phone_number)),
    )


def fixes_from_rows(
    rows: Iterable[Mapping[str, Any]],
    columns: CorrelationColumns | None = None,
) -> list[ReportedFix]:
    cols = columns or CorrelationColumns()
    return [fix_from_row(row, cols) for row in rows]


def load_fixes(
    path: str | Path,
    config: AuditConfig | None = None,
    columns: CorrelationColumns | None = None,
) -> list[ReportedFix]:
    """Read and convert the Correlation sheet of a measurement workbook."""

    return fixes_from_rows(read_correlation_rows(path, config, columns), columns)
