#!/usr/bin/env python3

from __future__ import annotations

import math
import sys
from pathlib import Path

import geopandas as gpd
import pandas as pd
import pytest
from shapely.geometry import Point

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from sensorfeat.config import LANDUSE_CLASSES
from sensorfeat.features.landuse_pct import (
    PCT_COL,
    BufferAreaError,
    normalize_percentages,
    pivot_landuse,
    round_half_up,
)


def _buffers(areas):
    return gpd.GeoDataFrame(
        {"sensor_id": list(areas), "buffer_area_m2": list(areas.values())},
        geometry=[Point(0, 0)] * len(areas),
        crs="EPSG:3310",
    )


def _overlay(rows):
    return pd.DataFrame(rows, columns=["sensor_id", "lu_class", "area_m2"])


@pytest.mark.parametrize("x, expected", [
    (0.12345, 0.1235),
    (0.00005, 0.0001),
    (0.99995, 1.0),
    (0.3, 0.3),
    (0.123449, 0.1234),
    (1.0, 1.0),
])
def test_round_half_up(x, expected):
    assert round_half_up(x) == expected


def test_round_half_up_passes_nan_through():
    assert math.isnan(round_half_up(float("nan")))


def test_normalize_divides_by_buffer_area():
    buffers = _buffers({1: 1000.0, 2: 2000.0})
    overlay = _overlay([(1, "forest", 250.0), (1, "others", 1.25), (2, "grass", 2000.0)])
    out = normalize_percentages(overlay, buffers)
    assert out[PCT_COL].tolist() == [0.25, 0.0013, 1.0]
    assert out["area_m2"].tolist() == overlay["area_m2"].tolist()


def test_zero_area_buffer_names_sensor():
    buffers = _buffers({7: 0.0, 8: 100.0})
    overlay = _overlay([(7, "forest", 0.0), (8, "forest", 50.0)])
    with pytest.raises(BufferAreaError, match=r"\[7\]"):
        normalize_percentages(overlay, buffers)


def test_overlay_without_buffer_raises():
    buffers = _buffers({1: 100.0})
    overlay = _overlay([(2, "forest", 50.0)])
    with pytest.raises(KeyError):
        normalize_percentages(overlay, buffers)


def test_pivot_has_fixed_columns_and_nan_for_absent():
    long = pd.DataFrame({
        "sensor_id": [2, 1, 1],
        "lu_class": ["forest", "others", "residential"],
        PCT_COL: [1.0, 0.2, 0.3],
    })
    wide = pivot_landuse(long)
    assert list(wide.columns) == ["sensor_id"] + list(LANDUSE_CLASSES)
    assert wide["sensor_id"].tolist() == [1, 2]
    assert wide.loc[0, "residential"] == 0.3
    assert wide.loc[0, "others"] == 0.2
    assert pd.isna(wide.loc[0, "forest"])
    assert wide.loc[1, "forest"] == 1.0
    assert wide.drop(columns="sensor_id").notna().sum().sum() == 3


def test_pivot_accepts_categorical_classes():
    long = pd.DataFrame({
        "sensor_id": [1],
        "lu_class": pd.Categorical(["meadow"], categories=list(LANDUSE_CLASSES)),
        PCT_COL: [0.5],
    })
    wide = pivot_landuse(long)
    assert list(wide.columns) == ["sensor_id"] + list(LANDUSE_CLASSES)
    assert wide.loc[0, "meadow"] == 0.5


def test_pivot_empty_keeps_schema():
    long = pd.DataFrame({
        "sensor_id": pd.Series([], dtype="int64"),
        "lu_class": pd.Series([], dtype=object),
        PCT_COL: pd.Series([], dtype="float64"),
    })
    wide = pivot_landuse(long)
    assert wide.empty
    assert list(wide.columns) == ["sensor_id"] + list(LANDUSE_CLASSES)
