#!/usr/bin/env python3
"""landuse_pct.py

# *how overlay area becomes composition*

Two steps on the long overlay table:
1. normalize_percentages(): area_m2 / buffer_area_m2, rounded half-up to
   4 decimals.
2. pivot_landuse(): one row per sensor, one column per land-use class in
   fixed order. Classes a sensor never touched stay NaN here.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

import geopandas as gpd
import numpy as np
import pandas as pd

from sensorfeat.config import LANDUSE_CLASSES, LU_CLASS_COL, SENSOR_ID_COL
from sensorfeat.geo.buffers import BUFFER_AREA_COL
from sensorfeat.geo.overlay import AREA_COL

PCT_COL = "pct_of_buffer"
PCT_PLACES = 4


class BufferAreaError(ZeroDivisionError):
    """A sensor buffer with non-positive area reached normalization."""


def round_half_up(x: Any, places: int = PCT_PLACES) -> float:
    """Round like SQL ROUND(numeric, n): halves go away from zero, not to even."""
    if x is None or (isinstance(x, float) and math.isnan(x)):
        return np.nan
    q = Decimal(1).scaleb(-places)
    return float(Decimal(repr(float(x))).quantize(q, rounding=ROUND_HALF_UP))


def normalize_percentages(overlay: pd.DataFrame, buffers: gpd.GeoDataFrame) -> pd.DataFrame:
    """Add pct_of_buffer to the long overlay table.

    Raises BufferAreaError naming the sensors whose buffer area is <= 0,
    and KeyError if an overlay row has no buffer at all.
    """
    areas = pd.Series(
        buffers[BUFFER_AREA_COL].to_numpy(),
        index=buffers[SENSOR_ID_COL].to_numpy(),
    )
    denom = overlay[SENSOR_ID_COL].map(areas)

    orphans = overlay.loc[denom.isna(), SENSOR_ID_COL].unique().tolist()
    if orphans:
        raise KeyError(f"Overlay rows without a sensor buffer: {sorted(orphans)}")

    bad = overlay.loc[denom <= 0, SENSOR_ID_COL].unique().tolist()
    if bad:
        raise BufferAreaError(f"Buffer area must be > 0; offending sensor_id(s): {sorted(bad)}")

    out = overlay.copy()
    out[PCT_COL] = (out[AREA_COL] / denom).map(round_half_up).astype("float64")
    return out


def pivot_landuse(long: pd.DataFrame) -> pd.DataFrame:
    """Long (sensor_id, lu_class, pct_of_buffer) -> wide, one column per class.

    Only sensors present in `long` get a row.
    """
    classes = list(LANDUSE_CLASSES)
    if long.empty:
        wide = pd.DataFrame(
            {c: pd.Series([], dtype="float64") for c in classes},
            index=pd.Index([], dtype=long[SENSOR_ID_COL].dtype, name=SENSOR_ID_COL),
        )
        return wide.reset_index()

    flat = long.assign(**{LU_CLASS_COL: long[LU_CLASS_COL].astype(str)})
    wide = flat.pivot(index=SENSOR_ID_COL, columns=LU_CLASS_COL, values=PCT_COL)
    wide = wide.reindex(columns=classes).astype("float64")
    wide.columns.name = None
    return wide.sort_index().reset_index()
