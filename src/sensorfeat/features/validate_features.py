#!/usr/bin/env python3
"""validate_features.py

##### Goal
- QA on a finished feature table (raw or filled).
- Returns a list of problems; an empty list means the table passed.

##### Checks
- schema: exact column set and order
- one row per sensor_id, sorted ascending
- percentages within [0, 1]
- per-sensor percentage sum <= 1 + tolerance
- distances >= 0 (NaN allowed)
"""

from __future__ import annotations

from typing import List

import pandas as pd

from sensorfeat.config import DISTANCE_COLUMNS, FEATURE_COLUMNS, LANDUSE_CLASSES, SENSOR_ID_COL

# Rounding to 4 places can push a full-coverage sum a hair past 1.
SUM_TOLERANCE = 1e-4


def validate_features(table: pd.DataFrame, tolerance: float = SUM_TOLERANCE) -> List[str]:
    problems: List[str] = []

    cols = list(table.columns)
    if cols != list(FEATURE_COLUMNS):
        missing = [c for c in FEATURE_COLUMNS if c not in cols]
        extra = [c for c in cols if c not in FEATURE_COLUMNS]
        if missing or extra:
            problems.append(f"schema: missing={missing} extra={extra}")
        else:
            problems.append("schema: columns out of order")
        return problems

    ids = table[SENSOR_ID_COL]
    dupes = ids[ids.duplicated()].unique().tolist()
    if dupes:
        problems.append(f"duplicate sensor_id: {dupes[:10]}")
    if not ids.is_monotonic_increasing:
        problems.append("rows not sorted by sensor_id")

    pct = table[list(LANDUSE_CLASSES)]
    out_of_range = ((pct < 0) | (pct > 1)).any(axis=1)
    if out_of_range.any():
        problems.append(f"percentage outside [0, 1] for sensor_id: {ids[out_of_range].tolist()[:10]}")

    over = pct.sum(axis=1, skipna=True) > 1 + tolerance
    if over.any():
        problems.append(f"percentage sum > 1 for sensor_id: {ids[over].tolist()[:10]}")

    dist = table[list(DISTANCE_COLUMNS)]
    negative = (dist < 0).any(axis=1)
    if negative.any():
        problems.append(f"negative distance for sensor_id: {ids[negative].tolist()[:10]}")

    return problems
