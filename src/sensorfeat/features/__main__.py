#!/usr/bin/env python3
"""sensorfeat.features

Feature table CLI for sensorfeat.

This is one of three sensorfeat subsystem CLIs:
- sensorfeat.registry → input preparation (reproject, dedup, classify)
- sensorfeat.geo      → geometric stages (buffers)
- sensorfeat.features → feature tables (this file)

sensorfeat.features runs the full pipeline from raw layers and writes the
two summary tables: raw (NaN where a sensor had no overlap with a class) and
filled (those NaNs set to 0).

Design notes:
- Input layers and column names come from the pipeline YAML; any of the
  three layers can be overridden on the command line.
- Lazy-imports the pipeline to keep CLI startup fast
- All subcommands support --dry-run for safe exploration

Examples:
  # Build both feature tables using config/pipeline.yaml
  python -m sensorfeat.features build

  # Override the sensor layer, also keep the long percentage table
  python -m sensorfeat.features build \
    --sensors data/raw/purpleair_calibrated.gpkg \
    --out-long data/processed/landuse_pct.csv

  # QA a finished table
  python -m sensorfeat.features validate --table data/processed/sensor_lu_road_summary0.csv
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import List, Optional

from sensorfeat.config import (
    load_pipeline_config,
    missing_inputs,
    LayerSource,
    PipelineConfig,
    DEFAULT_PIPELINE_YAML,
    DEFAULT_RAW_CSV,
    DEFAULT_FILLED_CSV,
    LANDUSE_CLASSES,
)
from sensorfeat.logs import setup_logging


# -----------------------------------------------------------------------------
# CLI structure
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for sensorfeat.features."""
    ap = argparse.ArgumentParser(
        prog="sensorfeat.features",
        description="Per-sensor land-use and road-distance feature tables",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Subsystem CLIs:
  python -m sensorfeat.registry  # Input preparation
  python -m sensorfeat.geo       # Geometric stages
  python -m sensorfeat.features  # Feature tables (this)
        """,
    )

    # --- Global args ---
    ap.add_argument(
        "--pipeline-yaml",
        type=Path,
        default=DEFAULT_PIPELINE_YAML,
        help=f"Path to pipeline YAML (default: {DEFAULT_PIPELINE_YAML})",
    )
    ap.add_argument(
        "--dry-run",
        action="store_true",
        help="Print planned actions without writing files",
    )
    ap.add_argument(
        "--overwrite",
        action="store_true",
        help="Overwrite existing output files",
    )
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    # --- Subcommands ---
    sub = ap.add_subparsers(dest="command", required=True)

    # --- build ---
    build = sub.add_parser(
        "build",
        help="Build raw and zero-filled feature tables",
        description="""
Run the full pipeline and write the feature tables.

This command:
1. Reads sensors, land use and roads (paths from pipeline YAML or flags)
2. Reprojects to the planar CRS, dedups sensors, classifies land use
3. Builds 1-mile buffers and sums land-use overlap per class
4. Computes nearest distance to each road class
5. Writes the raw and zero-filled tables (CSV, or parquet by suffix)
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    build.add_argument("--sensors", type=Path, default=None, help="Sensor layer (overrides YAML)")
    build.add_argument("--landuse", type=Path, default=None, help="Land-use layer (overrides YAML)")
    build.add_argument("--roads", type=Path, default=None, help="Road layer (overrides YAML)")
    build.add_argument(
        "--out-raw",
        type=Path,
        default=None,
        help=f"Raw table output (default: outputs.raw in YAML, else {DEFAULT_RAW_CSV})",
    )
    build.add_argument(
        "--out-filled",
        type=Path,
        default=None,
        help=f"Zero-filled table output (default: outputs.filled in YAML, else {DEFAULT_FILLED_CSV})",
    )
    build.add_argument(
        "--out-long",
        type=Path,
        default=None,
        help="Optional long (sensor, class, area, pct) table output",
    )

    # --- validate ---
    val = sub.add_parser(
        "validate",
        help="Run QA checks on a feature table",
    )
    val.add_argument("--table", required=True, type=Path, help="Feature table (CSV or parquet)")
    val.add_argument("--json", action="store_true", help="Emit JSON to stdout")

    return ap


# -----------------------------------------------------------------------------
# Command handlers
# -----------------------------------------------------------------------------

def _resolve_config(args: argparse.Namespace) -> PipelineConfig:
    """Pipeline YAML if present, then per-layer overrides from flags."""
    if args.pipeline_yaml.exists():
        cfg = load_pipeline_config(args.pipeline_yaml)
    else:
        cfg = PipelineConfig()

    for key in ("sensors", "landuse", "roads"):
        override = getattr(args, key)
        if override is not None:
            setattr(cfg, key, LayerSource(path=override))

    missing = missing_inputs(cfg)
    if missing:
        raise SystemExit(
            f"Missing input layer(s): {missing}. "
            f"Set them under inputs: in {args.pipeline_yaml} or pass --sensors/--landuse/--roads."
        )
    return cfg


def _handle_build(args: argparse.Namespace) -> int:
    """Handle the build subcommand."""
    cfg = _resolve_config(args)
    out_raw = args.out_raw or cfg.outputs.get("raw", DEFAULT_RAW_CSV)
    out_filled = args.out_filled or cfg.outputs.get("filled", DEFAULT_FILLED_CSV)
    out_long = args.out_long or cfg.outputs.get("long")

    if args.dry_run:
        print("[dry-run] Would build feature tables:")
        print(f"  Sensors: {cfg.sensors.path} (id={cfg.sensor_id_field}, order_by={cfg.sensor_order_field})")
        print(f"  Land use: {cfg.landuse.path} (category={cfg.landuse_field})")
        print(f"  Roads: {cfg.roads.path} (category={cfg.road_field})")
        print(f"  Target CRS: {cfg.target_crs}")
        print(f"  Raw table: {out_raw}")
        print(f"  Filled table: {out_filled}")
        if out_long:
            print(f"  Long table: {out_long}")
        return 0

    # Lazy import: keeps CLI startup fast, avoids loading geopandas until needed
    from sensorfeat.features.build_features import build_features
    from sensorfeat.io import check_writable, read_layer, write_table

    for p in (out_raw, out_filled, out_long):
        if p is not None:
            check_writable(p, args.overwrite)

    tables = build_features(
        read_layer(cfg.sensors, "sensors"),
        read_layer(cfg.landuse, "landuse"),
        read_layer(cfg.roads, "roads"),
        cfg,
    )

    write_table(tables.raw, out_raw)
    write_table(tables.filled, out_filled)
    if out_long:
        write_table(tables.long, out_long)

    # --- Human-friendly summary ---
    n_no_overlap = int(tables.raw[list(LANDUSE_CLASSES)].isna().all(axis=1).sum())
    print(f"Wrote {len(tables.raw)} sensors -> {out_raw}")
    print(f"Wrote {len(tables.filled)} sensors -> {out_filled}")
    if out_long:
        print(f"Wrote {len(tables.long)} (sensor, class) rows -> {out_long}")
    print(f"  Sensors with no land-use overlap: {n_no_overlap}")
    return 0


def _handle_validate(args: argparse.Namespace) -> int:
    """Handle the validate subcommand. Exit code 1 if any check fails."""
    from sensorfeat.features.validate_features import validate_features
    from sensorfeat.io import read_table

    problems = validate_features(read_table(args.table))

    if args.json:
        print(json.dumps({"table": str(args.table), "ok": not problems, "problems": problems}, indent=2))
    elif problems:
        print(f"[FAIL] {args.table}")
        for p in problems:
            print(f"  - {p}")
    else:
        print(f"[OK] {args.table}")

    return 1 if problems else 0


# -----------------------------------------------------------------------------
# Main entrypoint
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """Main entrypoint for sensorfeat.features CLI."""
    ap = build_parser()
    args = ap.parse_args(argv)
    setup_logging(args.verbose)

    handlers = {
        "build": _handle_build,
        "validate": _handle_validate,
    }

    handler = handlers.get(args.command)
    if handler is None:
        raise SystemExit(f"Unknown command: {args.command}")

    return handler(args)


if __name__ == "__main__":
    raise SystemExit(main())
