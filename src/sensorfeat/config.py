#!/usr/bin/env python3
"""sensorfeat.config

Shared configuration for the sensorfeat subsystems.

This module holds two kinds of things:
- Fixed constants of the feature schema (buffer radius, class whitelists,
  output column names). These are the same for every run.
- Per-run settings (input layers, column names, target CRS), loaded from a
  pipeline YAML into a PipelineConfig.

Design notes:
- YAML loading is strict: files must exist and be valid mappings.
- Land-use and road classes are closed enumerations; the feature table
  column set comes from them, never from whatever values appear in a dataset.
- All functions are pure (no side effects on import).
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml


# -----------------------------------------------------------------------------
# Feature schema constants
# -----------------------------------------------------------------------------

# One statute mile.
BUFFER_RADIUS_M = 1609.344

# Segments per quarter circle. 128 keeps the polygon area within ~3e-5 of pi*r^2.
BUFFER_QUAD_SEGS = 128

# NAD83 / California Albers (equal area, meters)
DEFAULT_TARGET_CRS = "EPSG:3310"

SENSOR_ID_COL = "sensor_id"
LU_CLASS_COL = "lu_class"
ROAD_CLASS_COL = "highway"


class LandUseClass(str, Enum):
    """Recognized land-use classes, in output column order."""

    RESIDENTIAL = "residential"
    GRASS = "grass"
    RETAIL = "retail"
    COMMERCIAL = "commercial"
    INDUSTRIAL = "industrial"
    BROWNFIELD = "brownfield"
    RELIGIOUS = "religious"
    CONSTRUCTION = "construction"
    MEADOW = "meadow"
    FOREST = "forest"
    FARMLAND = "farmland"
    RECREATION_GROUND = "recreation_ground"
    PLANT_NURSERY = "plant_nursery"
    RAILWAY = "railway"
    CEMETERY = "cemetery"
    FARMYARD = "farmyard"
    MILITARY = "military"
    VILLAGE_GREEN = "village_green"
    OTHERS = "others"


class RoadClass(str, Enum):
    """Highway classes kept at load time, in output column order."""

    RESIDENTIAL = "residential"
    TERTIARY = "tertiary"
    SECONDARY = "secondary"
    PRIMARY = "primary"

    @property
    def distance_column(self) -> str:
        return _DISTANCE_COLUMNS[self]


_DISTANCE_COLUMNS = {
    RoadClass.RESIDENTIAL: "dist_res_m",
    RoadClass.TERTIARY: "dist_ter_m",
    RoadClass.SECONDARY: "dist_sec_m",
    RoadClass.PRIMARY: "dist_pri_m",
}

# Plain-string views, handy for pandas column selection.
LANDUSE_CLASSES: Tuple[str, ...] = tuple(c.value for c in LandUseClass)
LANDUSE_WHITELIST: Tuple[str, ...] = tuple(c for c in LANDUSE_CLASSES if c != LandUseClass.OTHERS.value)
ROAD_CLASSES: Tuple[str, ...] = tuple(c.value for c in RoadClass)
DISTANCE_COLUMNS: Tuple[str, ...] = tuple(c.distance_column for c in RoadClass)
FEATURE_COLUMNS: Tuple[str, ...] = (SENSOR_ID_COL,) + DISTANCE_COLUMNS + LANDUSE_CLASSES


# -----------------------------------------------------------------------------
# YAML loading
# -----------------------------------------------------------------------------

def load_yaml(path: Path) -> Dict[str, Any]:
    """Load a YAML file and return as dict.

    Raises SystemExit on missing file or invalid format (non-mapping).
    Config errors should fail fast.
    """
    if not path.exists():
        raise SystemExit(f"Config not found: {path}")
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise SystemExit(f"Expected YAML mapping at {path}")
    return data


# -----------------------------------------------------------------------------
# Pipeline config
# -----------------------------------------------------------------------------

@dataclass
class LayerSource:
    """Where one input layer lives on disk."""

    path: Path
    layer: Optional[str] = None


@dataclass
class PipelineConfig:
    sensors: Optional[LayerSource] = None
    landuse: Optional[LayerSource] = None
    roads: Optional[LayerSource] = None

    # Column names in the raw inputs
    sensor_id_field: str = SENSOR_ID_COL
    sensor_order_field: Optional[str] = None
    landuse_id_field: str = "id"
    landuse_field: str = "landuse"
    road_id_field: str = "id"
    road_field: str = "highway"

    target_crs: str = DEFAULT_TARGET_CRS
    quad_segs: int = BUFFER_QUAD_SEGS

    outputs: Dict[str, Path] = field(default_factory=dict)


_LAYER_KEYS = ("sensors", "landuse", "roads")


def _parse_layer(name: str, block: Any, base_dir: Path) -> LayerSource:
    if isinstance(block, str):
        block = {"path": block}
    if not isinstance(block, dict) or "path" not in block:
        raise ValueError(f"inputs.{name} must be a path or a mapping with 'path'")
    unknown = set(block) - {"path", "layer"}
    if unknown:
        raise ValueError(f"Unknown keys in inputs.{name}: {sorted(unknown)}")
    path = Path(block["path"])
    if not path.is_absolute():
        path = base_dir / path
    return LayerSource(path=path, layer=block.get("layer"))


def parse_pipeline_config(data: Dict[str, Any], base_dir: Path = Path(".")) -> PipelineConfig:
    """Build a PipelineConfig from a parsed YAML mapping.

    Expects structure like:
        inputs:
          sensors: {path: data/sensors.gpkg, layer: purpleair}
          landuse: data/landuse.gpkg
          roads: data/roads.gpkg
        columns:
          sensor_id_field: sensor_id
          landuse_field: landuse
        target_crs: EPSG:3310
        outputs:
          raw: out/features_raw.csv

    Relative input paths are resolved against base_dir.
    """
    cfg = PipelineConfig()

    inputs = data.get("inputs") or {}
    if not isinstance(inputs, dict):
        raise ValueError("'inputs' must be a mapping")
    for key, block in inputs.items():
        if key not in _LAYER_KEYS:
            raise ValueError(f"Unknown input layer '{key}'. Expected one of {list(_LAYER_KEYS)}")
        setattr(cfg, key, _parse_layer(key, block, base_dir))

    column_fields = {
        f.name for f in fields(PipelineConfig)
        if f.name.endswith("_field")
    }
    columns = data.get("columns") or {}
    if not isinstance(columns, dict):
        raise ValueError("'columns' must be a mapping")
    for key, value in columns.items():
        if key not in column_fields:
            raise ValueError(f"Unknown column setting '{key}'. Expected one of {sorted(column_fields)}")
        setattr(cfg, key, value)

    if "target_crs" in data:
        cfg.target_crs = str(data["target_crs"])
    if "quad_segs" in data:
        cfg.quad_segs = int(data["quad_segs"])
        if cfg.quad_segs < 1:
            raise ValueError("quad_segs must be >= 1")

    outputs = data.get("outputs") or {}
    if not isinstance(outputs, dict):
        raise ValueError("'outputs' must be a mapping")
    cfg.outputs = {k: Path(v) for k, v in outputs.items()}

    return cfg


def load_pipeline_config(path: Path) -> PipelineConfig:
    """Load and parse a pipeline YAML. Relative paths resolve against its folder."""
    return parse_pipeline_config(load_yaml(path), base_dir=path.parent)


def missing_inputs(cfg: PipelineConfig) -> List[str]:
    """Names of input layers that are unset or not on disk."""
    missing = []
    for key in _LAYER_KEYS:
        src = getattr(cfg, key)
        if src is None or not src.path.exists():
            missing.append(key)
    return missing


# -----------------------------------------------------------------------------
# Default paths
# -----------------------------------------------------------------------------
# Centralized so all CLIs use the same defaults.

DEFAULT_PIPELINE_YAML = Path("config/pipeline.yaml")
DEFAULT_PREPPED_GPKG = Path("data/interim/vectors/prepped_inputs.gpkg")
DEFAULT_BUFFERS_GPKG = Path("data/interim/vectors/sensor_buffers.gpkg")
DEFAULT_RAW_CSV = Path("data/processed/sensor_lu_road_summary.csv")
DEFAULT_FILLED_CSV = Path("data/processed/sensor_lu_road_summary0.csv")
