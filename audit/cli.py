"""Unified CLI entrypoint.

Two commands:
  1) run    (headless audit, writes CSV + KML + JSON + plots)
  2) floors (list the floors present in a workbook)
"""

from __future__ import annotations

import argparse
from pathlib import Path

from locaudit.ingest import DataUnavailableError


def _cmd_run(args: argparse.Namespace) -> None:
    from audit.run_audit import NoDataError, load_config, run_audit

    try:
        cfg = load_config(args.config)
        run_audit(
            cfg,
            Path(args.test_points),
            Path(args.workbook),
            Path(args.out),
            stage=args.stage,
            building=args.building,
            floor=args.floor,
            group_key=args.group_by,
            save_figs=not args.no_plots,
            verbose=args.verbose,
        )
    except (DataUnavailableError, NoDataError, ValueError, OSError) as exc:
        raise SystemExit(f"Error: {exc}") from exc
    print(f"Saved outputs to {args.out}")


def _cmd_floors(args: argparse.Namespace) -> None:
    from audit.run_audit import load_config
    from locaudit.correlation import correlate
    from locaudit.filters import distinct_floors
    from locaudit.ingest import load_fixes, load_ground_truth

    try:
        cfg = load_config(args.config)
        snapshot = correlate(load_fixes(args.workbook, cfg), load_ground_truth(args.test_points, cfg))
    except (DataUnavailableError, ValueError, OSError) as exc:
        raise SystemExit(f"Error: {exc}") from exc
    for floor in distinct_floors(snapshot):
        print(floor)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="locaudit", description="Indoor location accuracy audit")
    sub = parser.add_subparsers(dest="cmd", required=True)

    run = sub.add_parser("run", help="Score a correlation workbook against surveyed test points")
    run.add_argument("--test-points", type=str, required=True, help="Path to TestPoints.xlsx (or CSV)")
    run.add_argument("--workbook", type=str, required=True, help="Path to the measurement workbook (or CSV)")
    run.add_argument("--out", type=str, default="audit_out", help="Output directory")
    run.add_argument("--config", type=str, default=None, help="JSON file of AuditConfig overrides")
    run.add_argument("--stage", type=str, default=None, help="Only keep rows from this stage")
    run.add_argument("--building", type=str, default=None, help="Only keep rows from this building")
    run.add_argument("--floor", type=str, default=None, help="Only keep rows from this floor")
    run.add_argument("--group-by", type=str, default=None, help="KML folder field (default: participant)")
    run.add_argument("--no-plots", action="store_true", help="Skip saving plot PNGs")
    run.add_argument("--verbose", action="store_true", help="Enable debug logging")
    run.set_defaults(func=_cmd_run)

    floors = sub.add_parser("floors", help="List the floors present in a workbook")
    floors.add_argument("--test-points", type=str, required=True)
    floors.add_argument("--workbook", type=str, required=True)
    floors.add_argument("--config", type=str, default=None, help="JSON file of AuditConfig overrides")
    floors.set_defaults(func=_cmd_floors)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
