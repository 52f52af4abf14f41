#!/usr/bin/env python3
"""sensorfeat.geo

Geometric stages CLI for sensorfeat.

This is one of three sensorfeat subsystem CLIs:
- sensorfeat.registry → input preparation (reproject, dedup, classify)
- sensorfeat.geo      → geometric stages (this file)
- sensorfeat.features → feature tables

sensorfeat.geo writes the sensor buffer layer so it can be inspected on a
map next to the land-use parcels. The feature tables do not need it on disk;
sensorfeat.features builds buffers in memory.

Examples:
  python -m sensorfeat.geo buffers
  python -m sensorfeat.geo buffers --radius-m 804.672 --out-gpkg data/interim/vectors/half_mile.gpkg
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Optional

from sensorfeat.config import (
    load_pipeline_config,
    BUFFER_RADIUS_M,
    DEFAULT_PIPELINE_YAML,
    DEFAULT_BUFFERS_GPKG,
)
from sensorfeat.logs import setup_logging


# -----------------------------------------------------------------------------
# CLI structure
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for sensorfeat.geo."""
    ap = argparse.ArgumentParser(
        prog="sensorfeat.geo",
        description="Geometric stages for sensorfeat",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Subsystem CLIs:
  python -m sensorfeat.registry  # Input preparation
  python -m sensorfeat.geo       # Geometric stages (this)
  python -m sensorfeat.features  # Feature tables
        """,
    )

    # --- Global args ---
    ap.add_argument(
        "--pipeline-yaml",
        type=Path,
        default=DEFAULT_PIPELINE_YAML,
        help=f"Path to pipeline YAML (default: {DEFAULT_PIPELINE_YAML})",
    )
    ap.add_argument("--dry-run", action="store_true", help="Print planned actions without writing files")
    ap.add_argument("--overwrite", action="store_true", help="Overwrite existing output files")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    # --- Subcommands ---
    sub = ap.add_subparsers(dest="command", required=True)

    # --- buffers ---
    buf = sub.add_parser(
        "buffers",
        help="Write circular sensor buffers to a GeoPackage",
    )
    buf.add_argument(
        "--out-gpkg",
        type=Path,
        default=DEFAULT_BUFFERS_GPKG,
        help=f"Output GeoPackage path (default: {DEFAULT_BUFFERS_GPKG})",
    )
    buf.add_argument(
        "--radius-m",
        type=float,
        default=BUFFER_RADIUS_M,
        help=f"Buffer radius in meters (default: {BUFFER_RADIUS_M}, one mile)",
    )
    buf.add_argument("--layer", default="sensor_buffers", help="Layer name (default: sensor_buffers)")

    return ap


# -----------------------------------------------------------------------------
# Command handlers
# -----------------------------------------------------------------------------

def _handle_buffers(args: argparse.Namespace) -> int:
    """Handle the buffers subcommand."""
    cfg = load_pipeline_config(args.pipeline_yaml)
    if cfg.sensors is None or not cfg.sensors.path.exists():
        raise SystemExit(f"Sensor input missing; set inputs.sensors in {args.pipeline_yaml}")

    if args.dry_run:
        print("[dry-run] Would build sensor buffers:")
        print(f"  Sensors: {cfg.sensors.path}")
        print(f"  Radius: {args.radius_m} m in {cfg.target_crs}")
        print(f"  Output GeoPackage: {args.out_gpkg} (layer={args.layer})")
        return 0

    from sensorfeat.geo.buffers import BUFFER_AREA_COL, build_sensor_buffers
    from sensorfeat.io import check_writable, read_layer, write_layer
    from sensorfeat.registry.sensors import build_sensor_registry

    check_writable(args.out_gpkg, args.overwrite)
    if args.out_gpkg.exists():
        args.out_gpkg.unlink()

    sensors = build_sensor_registry(
        read_layer(cfg.sensors, "sensors"),
        id_field=cfg.sensor_id_field,
        order_by=cfg.sensor_order_field,
        target_crs=cfg.target_crs,
    )
    buffers = build_sensor_buffers(sensors, args.radius_m, quad_segs=cfg.quad_segs)
    write_layer(buffers, args.out_gpkg, layer=args.layer)

    print(f"Wrote {len(buffers)} buffers -> {args.out_gpkg} (layer={args.layer})")
    if len(buffers):
        print(f"  buffer area: {buffers[BUFFER_AREA_COL].iloc[0]:.1f} m2")
    return 0


# -----------------------------------------------------------------------------
# Main entrypoint
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """Main entrypoint for sensorfeat.geo CLI."""
    ap = build_parser()
    args = ap.parse_args(argv)
    setup_logging(args.verbose)

    handlers = {
        "buffers": _handle_buffers,
    }

    handler = handlers.get(args.command)
    if handler is None:
        raise SystemExit(f"Unknown command: {args.command}")

    return handler(args)


if __name__ == "__main__":
    raise SystemExit(main())
