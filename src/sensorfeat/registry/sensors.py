#!/usr/bin/env python3
"""sensors.py

Build the sensor registry: one planar point per sensor id.

Raw sensor tables (e.g. PurpleAir exports after calibration) carry one row
per reading, so the same sensor id shows up many times. The registry keeps
exactly one row per id.

Dedup policy:
- If `order_by` is given, rows are stably sorted on it (ascending) and the
  first row per id wins. Pass a row number or timestamp column to control
  which reading represents the sensor.
- Otherwise the first row per id in source order wins.
Either way the result does not depend on anything but the input table.
"""

from __future__ import annotations

import logging
from typing import Optional

import geopandas as gpd

from sensorfeat.config import DEFAULT_TARGET_CRS, SENSOR_ID_COL
from sensorfeat.registry.normalize import drop_null_geometries, to_planar

logger = logging.getLogger(__name__)


def build_sensor_registry(
    raw: gpd.GeoDataFrame,
    *,
    id_field: str = SENSOR_ID_COL,
    order_by: Optional[str] = None,
    target_crs: str = DEFAULT_TARGET_CRS,
) -> gpd.GeoDataFrame:
    """Deduplicate raw sensor rows and reproject them.

    Returns a GeoDataFrame with columns [sensor_id, geometry], sorted by
    sensor_id, indexed 0..n-1, with its spatial index already built.
    """
    for col in (id_field, order_by):
        if col and col not in raw.columns:
            raise KeyError(f"Sensor layer has no column '{col}'. Available columns: {list(raw.columns)}")

    sensors = drop_null_geometries(raw, name="sensors")
    sensors = sensors[sensors[id_field].notna()]

    if order_by:
        sensors = sensors.sort_values(order_by, kind="mergesort")
    n_rows = len(sensors)
    sensors = sensors.drop_duplicates(subset=id_field, keep="first")
    if len(sensors) < n_rows:
        logger.info(f"sensors: collapsed {n_rows} rows to {len(sensors)} unique ids")

    sensors = sensors[[id_field, sensors.geometry.name]].rename(columns={id_field: SENSOR_ID_COL})
    sensors = to_planar(sensors, target_crs, name="sensors")
    sensors = sensors.sort_values(SENSOR_ID_COL, kind="mergesort").reset_index(drop=True)

    # Build once up front; later stages only read it.
    _ = sensors.sindex
    return sensors
