#!/usr/bin/env python3

from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from sensorfeat.geo.buffers import BUFFER_AREA_COL, build_sensor_buffers
from sensorfeat.geo.overlay import AREA_COL, aggregate_overlay
from sensorfeat.registry.classify import classify_landuse
from sensorfeat.registry.normalize import CRSMismatchError

from conftest import make_landuse, make_sensors


def _overlay(sensor_rows, landuse_rows):
    buffers = build_sensor_buffers(make_sensors(sensor_rows))
    parcels = classify_landuse(make_landuse(landuse_rows))
    return buffers, aggregate_overlay(buffers, parcels)


def test_full_cover_by_one_parcel():
    buffers, out = _overlay([(1, 0.0, 0.0)], [(10, "forest", (-5000, -5000, 5000, 5000))])
    assert len(out) == 1
    row = out.iloc[0]
    assert row["sensor_id"] == 1
    assert row["lu_class"] == "forest"
    assert row[AREA_COL] == pytest.approx(buffers[BUFFER_AREA_COL].iloc[0])


def test_same_class_parcels_are_summed_once():
    # Two adjacent forest halves cover the buffer exactly once
    buffers, out = _overlay(
        [(1, 0.0, 0.0)],
        [(10, "forest", (-5000, -5000, 0, 5000)), (11, "forest", (0, -5000, 5000, 5000))],
    )
    assert out["lu_class"].tolist() == ["forest"]
    assert out[AREA_COL].iloc[0] == pytest.approx(buffers[BUFFER_AREA_COL].iloc[0])


def test_absent_classes_produce_no_rows():
    _, out = _overlay(
        [(1, 0.0, 0.0), (2, 100_000.0, 0.0)],
        [(10, "grass", (-100, -100, 100, 100)), (11, "quarry", (200, 200, 300, 300))],
    )
    assert out["sensor_id"].tolist() == [1, 1]
    assert out["lu_class"].tolist() == ["grass", "others"]
    assert out[AREA_COL].tolist() == pytest.approx([40_000.0, 10_000.0])


def test_parcel_partly_outside_buffer_is_clipped():
    buffers, out = _overlay([(1, 0.0, 0.0)], [(10, "retail", (0, -5000, 5000, 5000))])
    assert out[AREA_COL].iloc[0] == pytest.approx(buffers[BUFFER_AREA_COL].iloc[0] / 2, rel=1e-6)


def test_rows_sorted_by_sensor_then_class_order():
    _, out = _overlay(
        [(2, 0.0, 0.0), (1, 0.0, 0.0)],
        [(10, "others", (-10, -10, 10, 10)), (11, "residential", (-10, -10, 10, 10)), (12, "forest", (-10, -10, 10, 10))],
    )
    assert out["sensor_id"].tolist() == [1, 1, 1, 2, 2, 2]
    assert out["lu_class"].tolist() == ["residential", "forest", "others"] * 2


def test_overlapping_source_parcels_are_summed_as_given():
    _, out = _overlay(
        [(1, 0.0, 0.0)],
        [(10, "grass", (-100, -100, 100, 100)), (11, "grass", (-100, -100, 100, 100))],
    )
    assert out[AREA_COL].iloc[0] == pytest.approx(80_000.0)


def test_no_parcels_gives_empty_table():
    buffers = build_sensor_buffers(make_sensors([(1, 0.0, 0.0)]))
    parcels = classify_landuse(make_landuse([(10, "forest", (50_000, 50_000, 60_000, 60_000))]))
    out = aggregate_overlay(buffers, parcels)
    assert out.empty
    assert list(out.columns) == ["sensor_id", "lu_class", AREA_COL]


def test_crs_mismatch_is_fatal():
    buffers = build_sensor_buffers(make_sensors([(1, 0.0, 0.0)]))
    parcels = make_landuse([(10, "forest", (-1, -1, 1, 1))], crs="EPSG:4326")
    parcels["lu_class"] = "forest"
    with pytest.raises(CRSMismatchError):
        aggregate_overlay(buffers, parcels)
