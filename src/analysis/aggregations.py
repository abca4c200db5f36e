"""
Per-country and per-year summaries of long indicator tables.

CountrySummary columns, for a value column `<v>`:

    country_name, country_code,
    total_<v>, mean_<v>, n_years_<v>, cagr_<v>

The compound annual growth rate over the n known values v_1..v_n is

    (v_n / v_1) ** (1 / (n - 1)) - 1

and is missing when n < 2, when v_1 == 0, or when v_n / v_1 < 0.
"""

from __future__ import annotations

import math
from typing import Iterable

import pandas as pd

from transformations import COUNTRY_KEYS, OBSERVATION_KEYS


def compound_growth_rate(values: Iterable[float]) -> float:
    """CAGR of a time-ordered sequence; NaN when undefined."""
    series = pd.to_numeric(pd.Series(list(values), dtype="object"), errors="coerce").dropna()
    n = len(series)
    if n < 2:
        return math.nan

    first = float(series.iloc[0])
    last = float(series.iloc[-1])
    if first == 0:
        return math.nan

    ratio = last / first
    if ratio < 0:
        return math.nan
    return ratio ** (1.0 / (n - 1)) - 1.0


def cagr_column(value_column: str) -> str:
    return f"cagr_{value_column}"


def summarize_by_country(long: pd.DataFrame, value_column: str) -> pd.DataFrame:
    """Total, mean, year count and CAGR of `value_column` for every country."""
    columns = COUNTRY_KEYS + [
        f"total_{value_column}",
        f"mean_{value_column}",
        f"n_years_{value_column}",
        cagr_column(value_column),
    ]
    if long.empty:
        return pd.DataFrame(columns=columns)

    # sorted by year so each group's values reach the CAGR in time order
    ordered = long.sort_values(OBSERVATION_KEYS)
    summary = (
        ordered.groupby(COUNTRY_KEYS, sort=True)[value_column]
        .agg(
            total="sum",
            mean="mean",
            n_years="count",
            cagr=compound_growth_rate,
        )
        .reset_index()
    )
    summary.columns = columns
    summary["country_name"] = summary["country_name"].astype("string")
    summary["country_code"] = summary["country_code"].astype("string")
    return summary


def country_growth_rates(long: pd.DataFrame, value_column: str) -> pd.DataFrame:
    """
    One CAGR per country, with undefined growth rates removed.

    Result columns: country_name, country_code, cagr_<value_column>.
    """
    column = cagr_column(value_column)
    summary = summarize_by_country(long, value_column)[COUNTRY_KEYS + [column]]
    defined = summary[column].notna()
    dropped = int((~defined).sum())
    if dropped:
        print(f"[aggregations] {dropped} countries without a defined {column}; dropped")
    return summary[defined].reset_index(drop=True)


def yearly_statistics(long: pd.DataFrame, value_column: str) -> pd.DataFrame:
    """Cross-country count, mean, median, min and max for every year."""
    stats = (
        long.groupby("year")[value_column]
        .agg(["count", "mean", "median", "min", "max"])
        .reset_index()
    )
    return stats.rename(columns={"count": "n_countries"})


def top_countries(
    summary: pd.DataFrame,
    column: str,
    *,
    n: int = 5,
    ascending: bool = False,
) -> pd.DataFrame:
    """The `n` countries with the highest (or lowest) value of `column`."""
    valid = summary.dropna(subset=[column])
    return (
        valid.sort_values(by=column, ascending=ascending)
        .head(n)[COUNTRY_KEYS + [column]]
        .reset_index(drop=True)
    )


def format_top_countries(top: pd.DataFrame, column: str) -> str:
    """Render a top-N table as "Country: 1.234;Other: 0.567"."""
    return ";".join(
        f"{name}: {value:.3f}"
        for name, value in zip(top["country_name"].astype(str), top[column].astype(float))
    )


__all__ = [
    "compound_growth_rate",
    "cagr_column",
    "summarize_by_country",
    "country_growth_rates",
    "yearly_statistics",
    "top_countries",
    "format_top_countries",
]
