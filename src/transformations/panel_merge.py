"""
Merging of long indicator tables into the analysis panel.

Joins are inner joins on (country_name, country_code, year): a country-year
survives only when every indicator has a value for it.

    curated/indicator_panel/indicator_panel.parquet
"""

from __future__ import annotations

from typing import List

import pandas as pd

from adapters import StorageAdapter
from .reshape import OBSERVATION_KEYS

COUNTRY_KEYS: List[str] = ["country_name", "country_code"]

CURATED_PANEL_KEY = "curated/indicator_panel/indicator_panel.parquet"


def _inner_join_all(frames: tuple, keys: List[str]) -> pd.DataFrame:
    if len(frames) < 2:
        raise ValueError(f"At least two tables are needed for a merge, got {len(frames)}")

    merged = frames[0]
    for frame in frames[1:]:
        overlap = (set(merged.columns) & set(frame.columns)) - set(keys)
        if overlap:
            raise ValueError(f"Tables share non-key columns {sorted(overlap)}; rename them first")
        merged = merged.merge(frame, on=keys, how="inner", validate="one_to_one")
    return merged.sort_values(keys).reset_index(drop=True)


def merge_observations(*frames: pd.DataFrame) -> pd.DataFrame:
    """Inner join two or more long tables on (country_name, country_code, year)."""
    panel = _inner_join_all(frames, OBSERVATION_KEYS)
    print(
        f"[panel] merged {len(frames)} tables: {len(panel)} country-years, "
        f"{panel['country_code'].nunique()} countries"
    )
    return panel


def merge_country_summaries(*frames: pd.DataFrame) -> pd.DataFrame:
    """Inner join per-country tables (one row per country) on name and code."""
    return _inner_join_all(frames, COUNTRY_KEYS)


def save_panel_parquet(
    panel: pd.DataFrame,
    storage: StorageAdapter,
    *,
    key: str = CURATED_PANEL_KEY,
) -> str:
    return storage.write_parquet(panel, key)


__all__ = [
    "COUNTRY_KEYS",
    "CURATED_PANEL_KEY",
    "merge_observations",
    "merge_country_summaries",
    "save_panel_parquet",
]
