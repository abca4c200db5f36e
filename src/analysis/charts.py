"""
Visual outputs of the analysis.

- <indicator>_trend.png: cross-country yearly mean of an indicator, with
  optional highlighted countries (matplotlib).
- <indicator>_choropleth_<year>.html: world map coloured by the indicator
  value of every country for one year (plotly).

Both are written through a StorageAdapter under the analysis/ prefix.
"""

from __future__ import annotations

import io
from typing import Optional, Sequence

import matplotlib.pyplot as plt
import pandas as pd
import plotly.express as px

from adapters import LocalStorageAdapter, StorageAdapter

ANALYSIS_BASE_PREFIX = "analysis"


def build_indicator_trend_chart(
    long: pd.DataFrame,
    value_column: str,
    *,
    countries: Sequence[str] = (),
    title: Optional[str] = None,
    storage: Optional[StorageAdapter] = None,
    key: Optional[str] = None,
) -> str:
    """
    Line chart of the yearly cross-country mean of `value_column`.

    `countries` are ISO3 codes drawn as extra lines; unknown codes are
    ignored. Returns the location the PNG was written to.
    """
    data = long.dropna(subset=[value_column])
    if data.empty:
        raise RuntimeError(f"No data available for trend chart of {value_column}")

    storage = storage or LocalStorageAdapter()
    key = key or f"{ANALYSIS_BASE_PREFIX}/{value_column}_trend.png"

    yearly_mean = data.groupby("year")[value_column].mean()

    fig, ax = plt.subplots(figsize=(10, 6))
    ax.plot(
        yearly_mean.index,
        yearly_mean.to_numpy(),
        color="black",
        linewidth=2.5,
        label="Cross-country mean",
    )

    for code in countries:
        country = data[data["country_code"] == code].sort_values("year")
        if country.empty:
            continue
        ax.plot(
            country["year"],
            country[value_column],
            linewidth=1.2,
            alpha=0.8,
            label=str(country["country_name"].iloc[0]),
        )

    ax.set_xlabel("Year")
    ax.set_ylabel(value_column.replace("_", " "))
    ax.set_title(title or f"{value_column.replace('_', ' ')} over time")
    ax.grid(True, linestyle="--", alpha=0.3)
    ax.legend(frameon=False)
    fig.tight_layout()

    buf = io.BytesIO()
    fig.savefig(buf, format="png", dpi=150)
    plt.close(fig)
    return storage.write_raw(key, buf.getvalue())


def build_choropleth_map(
    frame: pd.DataFrame,
    value_column: str,
    *,
    year: Optional[int] = None,
    title: Optional[str] = None,
    color_scale: str = "RdYlGn",
):
    """
    Plotly choropleth of `value_column` keyed by ISO3 country_code.

    When `year` is given, `frame` is filtered to that year (long or panel
    tables); otherwise it is expected to hold one row per country.
    """
    data = frame
    if year is not None:
        data = data[data["year"] == year]
    data = data.dropna(subset=[value_column, "country_code"])
    if data.empty:
        suffix = f" in {year}" if year is not None else ""
        raise RuntimeError(f"No data available for choropleth of {value_column}{suffix}")

    data = data.assign(
        country_code=data["country_code"].astype(str),
        country_name=data["country_name"].astype(str),
    )
    default_title = value_column.replace("_", " ")
    if year is not None:
        default_title = f"{default_title} ({year})"

    return px.choropleth(
        data,
        locations="country_code",
        color=value_column,
        hover_name="country_name",
        color_continuous_scale=color_scale,
        projection="natural earth",
        title=title or default_title,
    )


def save_choropleth_html(
    fig,
    name: str,
    *,
    storage: Optional[StorageAdapter] = None,
) -> str:
    storage = storage or LocalStorageAdapter()
    html = fig.to_html(include_plotlyjs="cdn", full_html=True)
    return storage.write_raw(f"{ANALYSIS_BASE_PREFIX}/{name}.html", html.encode("utf-8"))


__all__ = [
    "ANALYSIS_BASE_PREFIX",
    "build_indicator_trend_chart",
    "build_choropleth_map",
    "save_choropleth_html",
]
