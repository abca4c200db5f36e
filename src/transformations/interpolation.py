"""
Gap filling for wide indicator tables.

Each country row is filled by a straight line drawn between its first and
last known values: only those two anchors are used, interior known values
are kept as they are but do not bend the line. Years before the first
anchor or after the last one are not extrapolated, and any row still
missing a year afterwards is dropped from the table.

Rows with fewer than two known values have no line to draw; they are left
untouched and therefore dropped by the completeness step (unless the table
covers a single year).
"""

from __future__ import annotations

from typing import Optional

import numpy as np
import pandas as pd

from .indicator_tables import year_columns


def _x_coordinates(index: pd.Index) -> np.ndarray:
    try:
        return np.asarray(index, dtype=float)
    except (TypeError, ValueError):
        return np.arange(len(index), dtype=float)


def interpolate_between_anchors(values: pd.Series) -> pd.Series:
    """
    Fill missing values strictly between the first and last known values.

    The index is used as the x axis when it is numeric (years), otherwise
    positions are used.
    """
    series = pd.to_numeric(values, errors="coerce").astype(float)
    known = series.notna().to_numpy()
    if known.sum() < 2:
        return series.copy()

    positions = np.flatnonzero(known)
    first, last = positions[0], positions[-1]

    x = _x_coordinates(series.index)
    filled = series.to_numpy(copy=True)
    v_first, v_last = filled[first], filled[last]

    gap = np.arange(first, last + 1)
    gap = gap[~known[first : last + 1]]
    if gap.size:
        slope = (v_last - v_first) / (x[last] - x[first])
        filled[gap] = v_first + slope * (x[gap] - x[first])

    return pd.Series(filled, index=series.index, name=series.name)


def interpolate_indicator_table(wide: pd.DataFrame) -> pd.DataFrame:
    """Return a copy of the wide table with every row gap-filled."""
    years = year_columns(wide)
    out = wide.copy()
    if out.empty:
        return out
    out[years] = out[years].apply(interpolate_between_anchors, axis=1)
    return out


def drop_incomplete_rows(wide: pd.DataFrame, *, label: Optional[str] = None) -> pd.DataFrame:
    """Drop every row that still has a missing year."""
    years = year_columns(wide)
    complete = wide[years].notna().all(axis=1)
    dropped = int((~complete).sum())
    if dropped:
        name = f" {label}:" if label else ""
        print(
            f"[interpolation]{name} dropped {dropped} of {len(wide)} rows "
            "still missing years after interpolation"
        )
    return wide[complete].reset_index(drop=True)


def fill_missing_years(wide: pd.DataFrame, *, label: Optional[str] = None) -> pd.DataFrame:
    """Interpolate between anchors, then keep only complete rows."""
    return drop_incomplete_rows(interpolate_indicator_table(wide), label=label)


__all__ = [
    "interpolate_between_anchors",
    "interpolate_indicator_table",
    "drop_incomplete_rows",
    "fill_missing_years",
]
