"""Configuration objects for location audits."""

from __future__ import annotations

from dataclasses import dataclass

HORIZONTAL_FAIL_M = 50.0
VERTICAL_FAIL_M = 5.0
PERCENTILE_RANK = 80.0
BIAS_THRESHOLD_M = 0.5


@dataclass(frozen=True)
class AuditConfig:
    """Audit thresholds and workbook layout defaults."""

    horizontal_fail_m: float = HORIZONTAL_FAIL_M
    vertical_fail_m: float = VERTICAL_FAIL_M
    percentile_rank: float = PERCENTILE_RANK
    bias_threshold_m: float = BIAS_THRESHOLD_M
    meters_per_degree: float = 111_000.0
    kml_group_key: str = "participant"
    correlation_sheet: str = "Correlation"
    correlation_header_row: int = 2
    test_points_sheet: int | str = 0
    unknown_label: str = "Unknown"
