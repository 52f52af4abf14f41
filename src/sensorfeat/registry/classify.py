#!/usr/bin/env python3
"""classify.py

Recode raw OSM category labels into the fixed class sets.

- Land use: anything on the 18-name whitelist keeps its label, everything
  else (including missing labels) becomes "others". Every parcel gets
  exactly one class.
- Roads: only residential/tertiary/secondary/primary highways are kept;
  other road rows are dropped at load time.
"""

from __future__ import annotations

import logging
from typing import Any

import geopandas as gpd
import pandas as pd

from sensorfeat.config import (
    DEFAULT_TARGET_CRS,
    LANDUSE_CLASSES,
    LANDUSE_WHITELIST,
    LU_CLASS_COL,
    ROAD_CLASS_COL,
    ROAD_CLASSES,
    LandUseClass,
)
from sensorfeat.registry.normalize import drop_null_geometries, to_planar

logger = logging.getLogger(__name__)

_WHITELIST = frozenset(LANDUSE_WHITELIST)


def classify_landuse_label(label: Any) -> str:
    """Map one raw land-use label to its class. Total: never raises."""
    if isinstance(label, str) and label in _WHITELIST:
        return label
    return LandUseClass.OTHERS.value


def _require_columns(gdf: gpd.GeoDataFrame, name: str, *cols: str) -> None:
    for col in cols:
        if col not in gdf.columns:
            raise KeyError(f"{name} layer has no column '{col}'. Available columns: {list(gdf.columns)}")


def classify_landuse(
    raw: gpd.GeoDataFrame,
    *,
    id_field: str = "id",
    category_field: str = "landuse",
    target_crs: str = DEFAULT_TARGET_CRS,
) -> gpd.GeoDataFrame:
    """Classify and reproject land-use parcels.

    Output columns: [id, landuse, lu_class, geometry]. lu_class is a
    categorical over the fixed class list, so downstream groupbys see the
    full schema.
    """
    _require_columns(raw, "Land-use", id_field, category_field)
    parcels = drop_null_geometries(raw, name="landuse")
    parcels = parcels[[id_field, category_field, parcels.geometry.name]].copy()
    parcels[LU_CLASS_COL] = pd.Categorical(
        parcels[category_field].map(classify_landuse_label),
        categories=list(LANDUSE_CLASSES),
    )

    n_others = int((parcels[LU_CLASS_COL] == LandUseClass.OTHERS.value).sum())
    logger.debug(f"landuse: {len(parcels)} parcels, {n_others} recoded to 'others'")

    parcels = to_planar(parcels, target_crs, name="landuse").reset_index(drop=True)
    _ = parcels.sindex
    return parcels


def filter_roads(
    raw: gpd.GeoDataFrame,
    *,
    id_field: str = "id",
    category_field: str = "highway",
    target_crs: str = DEFAULT_TARGET_CRS,
) -> gpd.GeoDataFrame:
    """Keep the four whitelisted highway classes and reproject.

    Output columns: [id, highway, geometry].
    """
    _require_columns(raw, "Road", id_field, category_field)
    roads = drop_null_geometries(raw, name="roads")
    roads = roads[roads[category_field].isin(ROAD_CLASSES)]
    roads = roads[[id_field, category_field, roads.geometry.name]].rename(
        columns={category_field: ROAD_CLASS_COL}
    )
    logger.debug(f"roads: kept {len(roads)} of {len(raw)} segments")

    roads = to_planar(roads, target_crs, name="roads").reset_index(drop=True)
    _ = roads.sindex
    return roads
