"""Indoor location accuracy audit package."""

from locaudit.config import AuditConfig
from locaudit.correlation import correlate
from locaudit.models import AuditSnapshot, GroundTruthPoint, ReportedFix, ScoredRecord
from locaudit.stats import directional_bias, group_records, percentile, summarize
from locaudit.truth import GroundTruthStore, build_ground_truth

__all__ = [
    "AuditConfig",
    "AuditSnapshot",
    "GroundTruthPoint",
    "GroundTruthStore",
    "ReportedFix",
    "ScoredRecord",
    "build_ground_truth",
    "correlate",
    "directional_bias",
    "group_records",
    "percentile",
    "summarize",
]
