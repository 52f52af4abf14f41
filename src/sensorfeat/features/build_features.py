#!/usr/bin/env python3
"""build_features.py

# *how raw layers become one row per sensor*

Composes the whole pipeline:

  registry   reproject, dedup sensors, classify land use, filter roads
  geo        1-mile buffers, overlay areas, nearest road distances
  features   percentages, pivot to wide, join onto distances

Output is two feature tables from the same intermediate state:
- raw:    land-use columns NaN where a sensor had no overlap with a class
- filled: same table with those NaNs set to 0

Distances stay NaN in both when a road class is missing from the road layer.
Re-running on unchanged inputs gives an identical table, row order included.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import geopandas as gpd
import pandas as pd

from sensorfeat.config import (
    BUFFER_RADIUS_M,
    FEATURE_COLUMNS,
    LANDUSE_CLASSES,
    SENSOR_ID_COL,
    PipelineConfig,
)
from sensorfeat.features.landuse_pct import normalize_percentages, pivot_landuse
from sensorfeat.geo.buffers import build_sensor_buffers
from sensorfeat.geo.overlay import aggregate_overlay
from sensorfeat.geo.proximity import road_distances
from sensorfeat.logs import log_step
from sensorfeat.registry.classify import classify_landuse, filter_roads
from sensorfeat.registry.normalize import require_same_crs
from sensorfeat.registry.sensors import build_sensor_registry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeatureTables:
    raw: pd.DataFrame
    filled: pd.DataFrame
    buffers: gpd.GeoDataFrame
    long: pd.DataFrame


def join_features(
    distances: pd.DataFrame,
    landuse_wide: pd.DataFrame,
    *,
    fill_missing: bool = False,
) -> pd.DataFrame:
    """Left-join the wide land-use table onto the distance table.

    Every sensor in `distances` keeps its row. With fill_missing=True the
    land-use columns default to 0 instead of NaN.
    """
    wide = landuse_wide
    if wide[SENSOR_ID_COL].dtype != distances[SENSOR_ID_COL].dtype and wide.empty:
        wide = wide.astype({SENSOR_ID_COL: distances[SENSOR_ID_COL].dtype})

    table = distances.merge(wide, on=SENSOR_ID_COL, how="left", validate="one_to_one")
    classes = list(LANDUSE_CLASSES)
    if fill_missing:
        table[classes] = table[classes].fillna(0.0)

    table = table.sort_values(SENSOR_ID_COL, kind="mergesort").reset_index(drop=True)
    return table[list(FEATURE_COLUMNS)]


def build_features(
    sensors_raw: gpd.GeoDataFrame,
    landuse_raw: gpd.GeoDataFrame,
    roads_raw: gpd.GeoDataFrame,
    cfg: Optional[PipelineConfig] = None,
    *,
    radius_m: float = BUFFER_RADIUS_M,
) -> FeatureTables:
    """Run every stage and return both feature tables plus intermediates.

    Args:
        sensors_raw: sensor rows (id + point geometry, any CRS, duplicates ok)
        landuse_raw: land-use parcels (id + category + polygon, any CRS)
        roads_raw: road segments (id + highway + line, any CRS)
        cfg: column names, target CRS and buffer resolution. Defaults apply
            when None.
        radius_m: buffer radius in meters

    Raises:
        MissingCRSError, CRSMismatchError: before any geometry is compared.
        BufferAreaError: a buffer with non-positive area (reports sensor ids).
    """
    cfg = cfg or PipelineConfig()

    with log_step("registry"):
        sensors = build_sensor_registry(
            sensors_raw,
            id_field=cfg.sensor_id_field,
            order_by=cfg.sensor_order_field,
            target_crs=cfg.target_crs,
        )
        parcels = classify_landuse(
            landuse_raw,
            id_field=cfg.landuse_id_field,
            category_field=cfg.landuse_field,
            target_crs=cfg.target_crs,
        )
        roads = filter_roads(
            roads_raw,
            id_field=cfg.road_id_field,
            category_field=cfg.road_field,
            target_crs=cfg.target_crs,
        )
        require_same_crs(("sensors", sensors), ("landuse", parcels), ("roads", roads))
        logger.info(f"registry: {len(sensors)} sensors, {len(parcels)} parcels, {len(roads)} road segments")

    with log_step("buffers + overlay"):
        buffers = build_sensor_buffers(sensors, radius_m, quad_segs=cfg.quad_segs)
        overlay = aggregate_overlay(buffers, parcels)
        long = normalize_percentages(overlay, buffers)
        wide = pivot_landuse(long)

    with log_step("road proximity"):
        distances = road_distances(sensors, roads)

    raw = join_features(distances, wide, fill_missing=False)
    filled = join_features(distances, wide, fill_missing=True)
    logger.info(f"features: {len(raw)} rows x {len(raw.columns)} columns")
    return FeatureTables(raw=raw, filled=filled, buffers=buffers, long=long)
