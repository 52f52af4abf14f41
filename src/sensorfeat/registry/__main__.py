#!/usr/bin/env python3
"""sensorfeat.registry

Input preparation CLI for sensorfeat.

This is one of three sensorfeat subsystem CLIs:
- sensorfeat.registry → input preparation (this file)
- sensorfeat.geo      → geometric stages (buffers)
- sensorfeat.features → feature tables

sensorfeat.registry turns raw layers into the planar, cleaned layers every
other stage works on:
- sensors: one point per sensor_id, in the target CRS
- landuse: parcels with lu_class (whitelist or "others")
- roads:   residential/tertiary/secondary/primary segments only

Outputs (one GeoPackage, one layer each):
- data/interim/vectors/prepped_inputs.gpkg → sensors, landuse, roads

Examples:
  python -m sensorfeat.registry prep
  python -m sensorfeat.registry prep --out-gpkg data/interim/vectors/edgewood_3310.gpkg
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Optional

from sensorfeat.config import (
    load_pipeline_config,
    missing_inputs,
    DEFAULT_PIPELINE_YAML,
    DEFAULT_PREPPED_GPKG,
)
from sensorfeat.logs import setup_logging


# -----------------------------------------------------------------------------
# CLI structure
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for sensorfeat.registry."""
    ap = argparse.ArgumentParser(
        prog="sensorfeat.registry",
        description="Input preparation for sensorfeat (planar, deduplicated, classified layers)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Subsystem CLIs:
  python -m sensorfeat.registry  # Input preparation (this)
  python -m sensorfeat.geo       # Geometric stages
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

    # --- prep ---
    prep = sub.add_parser(
        "prep",
        help="Reproject, dedup and classify input layers",
        description="""
Prepare the three input layers.

This command:
1. Reads sensors, land use and roads from the pipeline YAML
2. Drops null geometries and reprojects to the target CRS
3. Keeps one row per sensor_id (order_by column from YAML, else source order)
4. Recodes land use to the fixed classes, filters roads to four classes
5. Writes all three layers to one GeoPackage
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    prep.add_argument(
        "--out-gpkg",
        type=Path,
        default=DEFAULT_PREPPED_GPKG,
        help=f"Output GeoPackage path (default: {DEFAULT_PREPPED_GPKG})",
    )

    return ap


# -----------------------------------------------------------------------------
# Command handlers
# -----------------------------------------------------------------------------

def _handle_prep(args: argparse.Namespace) -> int:
    """Handle the prep subcommand."""
    cfg = load_pipeline_config(args.pipeline_yaml)
    missing = missing_inputs(cfg)
    if missing:
        raise SystemExit(f"Missing input layer(s) in {args.pipeline_yaml}: {missing}")

    if args.dry_run:
        print("[dry-run] Would prepare inputs:")
        print(f"  Sensors: {cfg.sensors.path}")
        print(f"  Land use: {cfg.landuse.path}")
        print(f"  Roads: {cfg.roads.path}")
        print(f"  Target CRS: {cfg.target_crs}")
        print(f"  Output GeoPackage: {args.out_gpkg}")
        return 0

    # Lazy import to keep CLI startup fast
    from sensorfeat.io import check_writable, read_layer, write_layer
    from sensorfeat.registry.classify import classify_landuse, filter_roads
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
    parcels = classify_landuse(
        read_layer(cfg.landuse, "landuse"),
        id_field=cfg.landuse_id_field,
        category_field=cfg.landuse_field,
        target_crs=cfg.target_crs,
    )
    roads = filter_roads(
        read_layer(cfg.roads, "roads"),
        id_field=cfg.road_id_field,
        category_field=cfg.road_field,
        target_crs=cfg.target_crs,
    )

    # GeoPackage can't store pandas categoricals
    parcels = parcels.astype({"lu_class": str})

    write_layer(sensors, args.out_gpkg, layer="sensors")
    write_layer(parcels, args.out_gpkg, layer="landuse")
    write_layer(roads, args.out_gpkg, layer="roads")

    print(f"Wrote prepared layers -> {args.out_gpkg} (CRS {cfg.target_crs})")
    print(f"  sensors: {len(sensors)}")
    print(f"  landuse: {len(parcels)} ({int((parcels['lu_class'] == 'others').sum())} as 'others')")
    print(f"  roads:   {len(roads)}")
    return 0


# -----------------------------------------------------------------------------
# Main entrypoint
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """Main entrypoint for sensorfeat.registry CLI."""
    ap = build_parser()
    args = ap.parse_args(argv)
    setup_logging(args.verbose)

    handlers = {
        "prep": _handle_prep,
    }

    handler = handlers.get(args.command)
    if handler is None:
        raise SystemExit(f"Unknown command: {args.command}")

    return handler(args)


if __name__ == "__main__":
    raise SystemExit(main())
