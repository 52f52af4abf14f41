#!/usr/bin/env python3

from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
import pandas as pd

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from sensorfeat.config import FEATURE_COLUMNS, LANDUSE_CLASSES
from sensorfeat.features.validate_features import validate_features


def _table(n=3):
    df = pd.DataFrame(np.nan, index=range(n), columns=list(FEATURE_COLUMNS))
    df["sensor_id"] = list(range(1, n + 1))
    df["dist_pri_m"] = 100.0
    df["forest"] = 0.6
    df["others"] = 0.4
    return df


def test_clean_table_passes():
    assert validate_features(_table()) == []


def test_schema_problems():
    assert validate_features(_table().drop(columns="forest"))[0].startswith("schema: missing=['forest']")
    reordered = _table()[["dist_res_m", "sensor_id"] + list(FEATURE_COLUMNS[2:])]
    assert validate_features(reordered) == ["schema: columns out of order"]


def test_duplicate_and_unsorted_ids():
    df = _table()
    df["sensor_id"] = [3, 1, 3]
    problems = validate_features(df)
    assert any(p.startswith("duplicate sensor_id: [3]") for p in problems)
    assert "rows not sorted by sensor_id" in problems


def test_percentage_range_and_sum():
    df = _table()
    df.loc[0, "grass"] = -0.1
    df.loc[1, "grass"] = 0.2
    problems = validate_features(df)
    assert any("outside [0, 1]" in p and "[1]" in p for p in problems)
    assert any("sum > 1" in p and "[2]" in p for p in problems)


def test_sum_within_rounding_tolerance_passes():
    df = _table(1)
    df.loc[0, list(LANDUSE_CLASSES)] = 0.0
    df.loc[0, "forest"] = 0.50005
    df.loc[0, "others"] = 0.50004
    assert validate_features(df) == []


def test_negative_distance():
    df = _table()
    df.loc[2, "dist_sec_m"] = -1.0
    problems = validate_features(df)
    assert problems == ["negative distance for sensor_id: [3]"]
