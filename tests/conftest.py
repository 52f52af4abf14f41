#!/usr/bin/env python3
"""Small synthetic layers in EPSG:3310 (meters), so no reprojection noise."""

from __future__ import annotations

import geopandas as gpd
import pytest
from shapely.geometry import LineString, Point, box

PLANAR = "EPSG:3310"


def make_sensors(rows, crs=PLANAR, **extra):
    """rows: list of (sensor_id, x, y); None for x drops the geometry."""
    data = {"sensor_id": [r[0] for r in rows], **extra}
    geoms = [Point(r[1], r[2]) if r[1] is not None else None for r in rows]
    return gpd.GeoDataFrame(data, geometry=geoms, crs=crs)


def make_landuse(rows, crs=PLANAR):
    """rows: list of (id, landuse, (xmin, ymin, xmax, ymax))."""
    return gpd.GeoDataFrame(
        {"id": [r[0] for r in rows], "landuse": [r[1] for r in rows]},
        geometry=[box(*r[2]) for r in rows],
        crs=crs,
    )


def make_roads(rows, crs=PLANAR):
    """rows: list of (id, highway, [(x, y), ...])."""
    return gpd.GeoDataFrame(
        {"id": [r[0] for r in rows], "highway": [r[1] for r in rows]},
        geometry=[LineString(r[2]) for r in rows],
        crs=crs,
    )


@pytest.fixture
def one_sensor():
    return make_sensors([(1, 0.0, 0.0)])


@pytest.fixture
def forest_everywhere():
    return make_landuse([(10, "forest", (-5000, -5000, 5000, 5000))])


@pytest.fixture
def primary_at_500m():
    return make_roads([(100, "primary", [(500, -3000), (500, 3000)])])


@pytest.fixture
def no_roads():
    return make_roads([])
