"""
Loading and normalization of World Bank indicator tables (wide format).

Input layout (World Bank bulk CSV):

    "Data Source","World Development Indicators",
    (blank)
    "Last Updated Date","2024-06-28",
    (blank)
    "Country Name","Country Code","Indicator Name","Indicator Code","1960",...,"2023",

The four preamble lines are optional; the header row is located by its
"Country Name" cell. After normalization the table has the schema:

    country_name: string
    country_code: string (ISO3)
    <year>:       float, one int-labelled column per year in the window
"""

from __future__ import annotations

import io
import numbers
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from adapters import StorageAdapter
from env_loader import DEFAULT_END_YEAR, DEFAULT_START_YEAR
from .indicators import IndicatorSpec

ID_COLUMN_RENAMES: Dict[str, str] = {
    "Country Name": "country_name",
    "Country Code": "country_code",
    "Indicator Name": "indicator_name",
    "Indicator Code": "indicator_code",
}
ID_COLUMNS: List[str] = ["country_name", "country_code"]

# World Bank aggregates (regions, income groups, lending groups, World).
AGGREGATE_REGION_CODES = frozenset(
    {
        "AFE", "AFW", "ARB", "CEB", "CSS", "EAP", "EAR", "EAS", "ECA", "ECS",
        "EMU", "EUU", "FCS", "HIC", "HPC", "IBD", "IBT", "IDA", "IDB", "IDX",
        "INX", "LAC", "LCN", "LDC", "LIC", "LMC", "LMY", "LTE", "MEA", "MIC",
        "MNA", "NAC", "OED", "OSS", "PRE", "PSS", "PST", "SAS", "SSA", "SSF",
        "SST", "TEA", "TEC", "TLA", "TMN", "TSA", "TSS", "UMC", "WLD",
    }
)

_PREAMBLE_SCAN_LINES = 10


def _find_header_row(text: str) -> int:
    for idx, line in enumerate(text.splitlines()[:_PREAMBLE_SCAN_LINES]):
        if line.lstrip('"').startswith("Country Name"):
            return idx
    return 0


def read_indicator_csv(source: Path | str | bytes) -> pd.DataFrame:
    """
    Read a wide World Bank indicator CSV from a path or from raw bytes.

    Skips the metadata preamble when present and drops the empty trailing
    column produced by the trailing comma of every World Bank row.
    """
    if isinstance(source, (bytes, bytearray)):
        text = bytes(source).decode("utf-8-sig")
    else:
        text = Path(source).read_text(encoding="utf-8-sig")

    df = pd.read_csv(io.StringIO(text), skiprows=_find_header_row(text))

    empty_unnamed = [
        col for col in df.columns if str(col).startswith("Unnamed:") and df[col].isna().all()
    ]
    return df.drop(columns=empty_unnamed)


def year_columns(df: pd.DataFrame) -> List[int]:
    """Year columns of a normalized wide table, in ascending order."""
    return sorted(
        int(col) for col in df.columns if isinstance(col, numbers.Integral) and not isinstance(col, bool)
    )


def normalize_indicator_table(
    df: pd.DataFrame,
    *,
    start_year: int = DEFAULT_START_YEAR,
    end_year: int = DEFAULT_END_YEAR,
) -> pd.DataFrame:
    """
    Rename identifier columns to the canonical schema and keep only the
    years inside [start_year, end_year].

    - "Country Name" -> country_name, "Country Code" -> country_code
    - indicator name/code columns are dropped (constant per table)
    - year labels become ints; unparseable values become missing
    """
    renamed = df.rename(columns=ID_COLUMN_RENAMES)

    missing = [col for col in ID_COLUMNS if col not in renamed.columns]
    if missing:
        raise ValueError(f"Indicator table is missing identifier columns: {missing}")

    years: Dict[object, int] = {}
    for col in renamed.columns:
        label = str(col).strip()
        if label.isdigit() and start_year <= int(label) <= end_year:
            years[col] = int(label)

    if not years:
        raise ValueError(f"Indicator table has no year columns between {start_year} and {end_year}")

    out = renamed[ID_COLUMNS + list(years)].rename(columns=years)
    out = out.dropna(subset=ID_COLUMNS).copy()
    out["country_name"] = out["country_name"].astype("string").str.strip()
    out["country_code"] = out["country_code"].astype("string").str.strip()

    for year in years.values():
        out[year] = pd.to_numeric(out[year], errors="coerce").astype(float)

    return out[ID_COLUMNS + sorted(years.values())].reset_index(drop=True)


def drop_aggregate_regions(df: pd.DataFrame) -> pd.DataFrame:
    """Remove World Bank aggregate rows so only countries remain."""
    mask = df["country_code"].isin(AGGREGATE_REGION_CODES)
    return df[~mask].reset_index(drop=True)


def load_indicator_table(
    spec: IndicatorSpec,
    storage: StorageAdapter,
    *,
    key: Optional[str] = None,
    start_year: int = DEFAULT_START_YEAR,
    end_year: int = DEFAULT_END_YEAR,
    exclude_aggregates: bool = True,
) -> pd.DataFrame:
    """
    Read and normalize one indicator table from storage.

    `key` defaults to the indicator's file name at the storage root.
    """
    raw = storage.read_raw(key or spec.file_name)
    table = normalize_indicator_table(
        read_indicator_csv(raw),
        start_year=start_year,
        end_year=end_year,
    )

    if exclude_aggregates:
        before = len(table)
        table = drop_aggregate_regions(table)
        removed = before - len(table)
        if removed:
            print(f"[load] {spec.key}: removed {removed} aggregate region rows")

    years = year_columns(table)
    print(f"[load] {spec.key}: {len(table)} countries, years {years[0]}-{years[-1]}")
    return table


__all__ = [
    "ID_COLUMN_RENAMES",
    "ID_COLUMNS",
    "AGGREGATE_REGION_CODES",
    "read_indicator_csv",
    "year_columns",
    "normalize_indicator_table",
    "drop_aggregate_regions",
    "load_indicator_table",
]
