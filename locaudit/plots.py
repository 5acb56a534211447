"""Plotting utilities for audit run outputs."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import matplotlib
import numpy as np

from locaudit.config import AuditConfig
from locaudit.models import ScoredRecord
from locaudit.stats import GroupSummary, group_records, stat_bucket

matplotlib.use("Agg", force=True)
import matplotlib.pyplot as plt  # noqa: E402


def save_audit_plots(
    records: Sequence[ScoredRecord],
    *,
    out_dir: str | Path,
    config: AuditConfig | None = None,
) -> Path:
    """Save standard audit plots into ``out_dir`` and return it."""

    cfg = config or AuditConfig()
    output_dir = Path(out_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    bucket = stat_bucket(records, category=None)

    _plot_error_cdf(
        np.array(bucket.horizontal_errors, dtype=float),
        cfg.horizontal_fail_m,
        cfg.percentile_rank,
        "Horizontal error (m)",
        output_dir / "horizontal_error_cdf.png",
    )
    _plot_error_cdf(
        np.array(bucket.vertical_errors, dtype=float),
        cfg.vertical_fail_m,
        cfg.percentile_rank,
        "Vertical error (m)",
        output_dir / "vertical_error_cdf.png",
    )
    _plot_group_percentiles(
        group_records(records, "device", config=cfg),
        cfg,
        output_dir / "device_p80.png",
    )
    return output_dir


def _plot_error_cdf(errors: np.ndarray, threshold_m: float, rank: float, xlabel: str, path: Path) -> None:
    fig, ax = plt.subplots(figsize=(8, 4))
    if errors.size:
        ordered = np.sort(errors)
        fraction = np.arange(1, ordered.size + 1) / ordered.size
        ax.step(ordered, fraction, where="post")
    ax.axvline(threshold_m, color="tab:red", linestyle="--", label=f"Fail threshold ({threshold_m:g} m)")
    ax.axhline(rank / 100.0, color="tab:gray", linestyle=":", label=f"P{rank:g}")
    ax.set_title(f"{xlabel.split(' (')[0]} CDF")
    ax.set_xlabel(xlabel)
    ax.set_ylabel("Fraction of fixes")
    ax.set_ylim(0.0, 1.05)
    ax.grid(True, alpha=0.3)
    ax.legend(loc="lower right")
    fig.tight_layout()
    fig.savefig(path, dpi=150)
    plt.close(fig)


def _plot_group_percentiles(groups: list[GroupSummary], cfg: AuditConfig, path: Path) -> None:
    fig, ax = plt.subplots(figsize=(9, 4))
    labels = [group.key for group in groups]
    x = np.arange(len(labels))
    ax.bar(x - 0.2, [g.p80_horizontal_m for g in groups], width=0.4, label="Horizontal", color="tab:blue")
    ax.bar(x + 0.2, [g.p80_vertical_m for g in groups], width=0.4, label="Vertical", color="tab:orange")
    ax.axhline(cfg.horizontal_fail_m, color="tab:blue", linestyle="--", alpha=0.6)
    ax.axhline(cfg.vertical_fail_m, color="tab:orange", linestyle="--", alpha=0.6)
    ax.set_xticks(x)
    ax.set_xticklabels(labels, rotation=30, ha="right")
    ax.set_title(f"P{cfg.percentile_rank:g} Error by Device")
    ax.set_ylabel("Error (m)")
    ax.grid(True, axis="y", alpha=0.3)
    ax.legend()
    fig.tight_layout()
    fig.savefig(path, dpi=150)
    plt.close(fig)
