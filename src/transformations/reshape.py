"""
Wide -> long reshaping of indicator tables.

Long schema (one row per country-year):

    country_name: string
    country_code: string
    year:         int
    <value>:      float

(country_name, country_code, year) is unique.
"""

from __future__ import annotations

from typing import List, Optional

import pandas as pd

from adapters import StorageAdapter
from .indicator_tables import ID_COLUMNS, year_columns
from .indicators import IndicatorSpec

OBSERVATION_KEYS: List[str] = ["country_name", "country_code", "year"]

# Logical prefix of the reshaped (PROCESSED) indicator tables
PROCESSED_BASE_PREFIX = "processed"


def to_long(wide: pd.DataFrame, value_column: str) -> pd.DataFrame:
    years = year_columns(wide)
    long = wide.melt(
        id_vars=ID_COLUMNS,
        value_vars=years,
        var_name="year",
        value_name=value_column,
    )
    long["year"] = long["year"].astype("int64")
    long[value_column] = pd.to_numeric(long[value_column], errors="coerce").astype(float)

    duplicated = long.duplicated(subset=OBSERVATION_KEYS, keep="first")
    if duplicated.any():
        print(
            f"[reshape] {int(duplicated.sum())} duplicated (country, year) rows "
            f"for {value_column}; keeping the first occurrence."
        )
        long = long[~duplicated]

    return long.sort_values(OBSERVATION_KEYS).reset_index(drop=True)


def processed_key(spec: IndicatorSpec) -> str:
    return f"{PROCESSED_BASE_PREFIX}/{spec.key}/{spec.key}_long.parquet"


def save_observations_parquet(
    long: pd.DataFrame,
    spec: IndicatorSpec,
    storage: StorageAdapter,
    *,
    key: Optional[str] = None,
) -> str:
    """Persist a long table under processed/<key>/<key>_long.parquet."""
    return storage.write_parquet(long, key or processed_key(spec))


__all__ = [
    "OBSERVATION_KEYS",
    "PROCESSED_BASE_PREFIX",
    "to_long",
    "processed_key",
    "save_observations_parquet",
]
