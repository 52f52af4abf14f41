#!/usr/bin/env python3
"""proximity.py

Nearest distance from each sensor to each road class.

Every sensor gets a row. A class with no segments anywhere in the road layer
leaves that column NaN for all sensors (absent, not zero).
"""

from __future__ import annotations

import logging
from typing import Dict

import geopandas as gpd
import numpy as np
import pandas as pd

from sensorfeat.config import ROAD_CLASS_COL, SENSOR_ID_COL, RoadClass
from sensorfeat.registry.normalize import require_same_crs

logger = logging.getLogger(__name__)


def split_roads_by_class(roads: gpd.GeoDataFrame) -> Dict[RoadClass, gpd.GeoDataFrame]:
    """One indexed layer per road class; classes with no segments are omitted."""
    layers = {}
    for rc in RoadClass:
        subset = roads[roads[ROAD_CLASS_COL] == rc.value].reset_index(drop=True)
        if subset.empty:
            logger.info(f"roads: no '{rc.value}' segments; {rc.distance_column} will be empty")
            continue
        _ = subset.sindex
        layers[rc] = subset
    return layers


def road_distances(sensors: gpd.GeoDataFrame, roads: gpd.GeoDataFrame) -> pd.DataFrame:
    """Table [sensor_id, dist_res_m, dist_ter_m, dist_sec_m, dist_pri_m] in sensor order."""
    require_same_crs(("sensors", sensors), ("roads", roads))

    out = pd.DataFrame({SENSOR_ID_COL: sensors[SENSOR_ID_COL].to_numpy()})
    layers = split_roads_by_class(roads)

    for rc in RoadClass:
        dist = np.full(len(sensors), np.nan)
        layer = layers.get(rc)
        if layer is not None and len(sensors):
            idx, d = layer.sindex.nearest(
                sensors.geometry, return_all=False, return_distance=True
            )
            dist[idx[0]] = d
        out[rc.distance_column] = dist

    return out
