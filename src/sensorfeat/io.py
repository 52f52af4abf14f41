"""sensorfeat.io

Thin read/write helpers for the CLIs. The pipeline itself works on
in-memory frames and never touches disk.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import geopandas as gpd
import pandas as pd

from sensorfeat.config import LayerSource


def read_layer(src: LayerSource, name: str) -> gpd.GeoDataFrame:
    """Read one input layer (any format GDAL/pyogrio reads)."""
    if not src.path.exists():
        raise SystemExit(f"{name} input not found: {src.path}")
    kwargs = {"layer": src.layer} if src.layer else {}
    gdf = gpd.read_file(src.path, **kwargs)
    if gdf.crs is None:
        raise SystemExit(
            f"{name} input has no CRS: {src.path}. "
            "Fix that first; everything downstream depends on CRS."
        )
    return gdf


def check_writable(path: Path, overwrite: bool) -> None:
    if path.exists() and not overwrite:
        raise SystemExit(f"Output exists: {path} (pass --overwrite to replace it)")


def write_table(df: pd.DataFrame, path: Path) -> None:
    """Write a table as parquet when the suffix says so, CSV otherwise."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix == ".parquet":
        df.to_parquet(path, index=False)
    else:
        df.to_csv(path, index=False)


def read_table(path: Path) -> pd.DataFrame:
    if not path.exists():
        raise SystemExit(f"Table not found: {path}")
    if path.suffix == ".parquet":
        return pd.read_parquet(path)
    return pd.read_csv(path)


def write_layer(gdf: gpd.GeoDataFrame, path: Path, layer: Optional[str] = None) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    gdf.to_file(path, layer=layer, driver="GPKG")
