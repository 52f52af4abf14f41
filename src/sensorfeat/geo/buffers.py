#!/usr/bin/env python3
"""buffers.py

Circular buffers around each sensor.

Buffers are full circles in the planar CRS, never clipped to a study-area
boundary, so every buffer has the same area (about pi * r^2). The recorded
area is the area of the polygon actually used for the overlay, which keeps
full-coverage percentages summing to 1.
"""

from __future__ import annotations

import geopandas as gpd
import numpy as np
import shapely

from sensorfeat.config import BUFFER_QUAD_SEGS, BUFFER_RADIUS_M, SENSOR_ID_COL

BUFFER_AREA_COL = "buffer_area_m2"


def build_sensor_buffers(
    sensors: gpd.GeoDataFrame,
    radius_m: float = BUFFER_RADIUS_M,
    *,
    quad_segs: int = BUFFER_QUAD_SEGS,
) -> gpd.GeoDataFrame:
    """Return one buffer row per sensor: [sensor_id, buffer_area_m2, geometry]."""
    if radius_m <= 0:
        raise ValueError(f"radius_m must be > 0, got {radius_m}")
    if sensors.crs is None or sensors.crs.is_geographic:
        raise ValueError("Sensors must be in a projected CRS before buffering; call to_planar() first.")

    points = np.asarray(sensors.geometry.array)
    polys = shapely.buffer(points, radius_m, quad_segs=quad_segs)

    buffers = gpd.GeoDataFrame(
        {SENSOR_ID_COL: sensors[SENSOR_ID_COL].to_numpy()},
        geometry=polys,
        crs=sensors.crs,
    )
    buffers[BUFFER_AREA_COL] = shapely.area(polys)
    buffers = buffers[[SENSOR_ID_COL, BUFFER_AREA_COL, "geometry"]]
    _ = buffers.sindex
    return buffers
