#!/usr/bin/env python3
"""overlay.py

Sum land-use intersection area per (sensor, class).

For every buffer, the land-use spatial index yields candidate parcels that
intersect it; each candidate contributes the exact area of its intersection
with the buffer. Contributions are summed by (sensor_id, lu_class).

Notes:
- Classes with no overlap produce no row. Zero-filling is a join concern.
- Parcels are summed as given. If source parcels overlap each other, the
  shared area is counted once per parcel, so a class can exceed its true
  footprint. Clean the land-use layer upstream if that matters.
"""

from __future__ import annotations

import logging

import geopandas as gpd
import numpy as np
import pandas as pd
import shapely

from sensorfeat.config import LANDUSE_CLASSES, LU_CLASS_COL, SENSOR_ID_COL
from sensorfeat.registry.normalize import require_same_crs

logger = logging.getLogger(__name__)

AREA_COL = "area_m2"


def _empty_overlay() -> pd.DataFrame:
    return pd.DataFrame({
        SENSOR_ID_COL: pd.Series([], dtype="int64"),
        LU_CLASS_COL: pd.Categorical([], categories=list(LANDUSE_CLASSES)),
        AREA_COL: pd.Series([], dtype="float64"),
    })


def aggregate_overlay(buffers: gpd.GeoDataFrame, parcels: gpd.GeoDataFrame) -> pd.DataFrame:
    """Long table [sensor_id, lu_class, area_m2], sorted by sensor then class order."""
    require_same_crs(("sensor buffers", buffers), ("landuse", parcels))
    if buffers.empty or parcels.empty:
        return _empty_overlay()

    buf_idx, lu_idx = parcels.sindex.query(buffers.geometry, predicate="intersects")
    logger.debug(f"overlay: {len(buf_idx)} buffer/parcel candidate pairs")
    if len(buf_idx) == 0:
        return _empty_overlay()

    buf_geoms = np.asarray(buffers.geometry.array)[buf_idx]
    lu_geoms = np.asarray(parcels.geometry.array)[lu_idx]
    areas = shapely.area(shapely.intersection(buf_geoms, lu_geoms))

    pairs = pd.DataFrame({
        SENSOR_ID_COL: buffers[SENSOR_ID_COL].to_numpy()[buf_idx],
        LU_CLASS_COL: pd.Categorical(
            np.asarray(parcels[LU_CLASS_COL], dtype=object)[lu_idx],
            categories=list(LANDUSE_CLASSES),
        ),
        AREA_COL: areas,
    })

    out = (
        pairs.groupby([SENSOR_ID_COL, LU_CLASS_COL], observed=True, sort=True)[AREA_COL]
        .sum()
        .reset_index()
    )
    logger.info(f"overlay: {len(out)} (sensor, class) records for {out[SENSOR_ID_COL].nunique()} sensors")
    return out
