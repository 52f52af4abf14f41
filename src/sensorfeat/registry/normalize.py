#!/usr/bin/env python3
"""normalize.py

Bring every input layer into one planar CRS before any area or distance math.

Sensors, land-use parcels and roads arrive in whatever CRS their source used
(usually EPSG:4326). Areas and distances are only meaningful in a projected
CRS with meter units, so every layer passes through to_planar() first, and
every stage that compares two layers calls require_same_crs() before it
touches a geometry.
"""

from __future__ import annotations

import logging
from typing import Tuple

import geopandas as gpd
from pyproj import CRS

from sensorfeat.config import DEFAULT_TARGET_CRS

logger = logging.getLogger(__name__)


class MissingCRSError(ValueError):
    """A layer has no CRS, so it can't be reprojected or compared."""


class CRSMismatchError(ValueError):
    """Two layers that are about to be compared carry different CRSs."""


def drop_null_geometries(gdf: gpd.GeoDataFrame, name: str = "layer") -> gpd.GeoDataFrame:
    """Drop rows whose geometry is missing or empty.

    Null geometry is not an error anywhere in the pipeline; those rows are
    simply not part of the computation.
    """
    keep = gdf.geometry.notna() & ~gdf.geometry.is_empty
    dropped = int((~keep).sum())
    if dropped:
        logger.debug(f"{name}: dropped {dropped} rows with null/empty geometry")
    return gdf[keep].copy()


def to_planar(
    gdf: gpd.GeoDataFrame,
    target_crs: str = DEFAULT_TARGET_CRS,
    *,
    name: str = "layer",
) -> gpd.GeoDataFrame:
    """Reproject a layer into the planar target CRS.

    Raises MissingCRSError if the layer has no CRS, and ValueError if the
    target is geographic (degrees can't be used for buffers or areas).
    """
    if gdf.crs is None:
        raise MissingCRSError(f"{name} has no CRS; can't reproject to {target_crs} safely.")
    target = CRS.from_user_input(target_crs)
    if target.is_geographic:
        raise ValueError(f"Target CRS {target_crs} is geographic; a projected CRS in meters is required.")
    if CRS.from_user_input(gdf.crs) == target:
        return gdf.copy()
    logger.debug(f"{name}: reprojecting {gdf.crs.to_string()} -> {target_crs}")
    return gdf.to_crs(target)


def require_same_crs(*layers: Tuple[str, gpd.GeoDataFrame]) -> None:
    """Fail fast unless every (name, layer) pair shares one CRS.

    Called before overlay and distance work; mixing CRSs would silently
    produce wrong areas and distances.
    """
    ref_name, ref = None, None
    for name, gdf in layers:
        if gdf.crs is None:
            raise MissingCRSError(f"{name} has no CRS")
        if ref is None:
            ref_name, ref = name, CRS.from_user_input(gdf.crs)
            continue
        if CRS.from_user_input(gdf.crs) != ref:
            raise CRSMismatchError(
                f"CRS mismatch: {ref_name} is {ref.to_string()} but {name} is {gdf.crs.to_string()}"
            )
