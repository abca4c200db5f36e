"""
Tabular reports written next to the charts:

- regression_summary.csv (optionally .xlsx): one row per regression term.
- residual_outliers.csv: flagged countries for every research question.
- <indicator>_country_summary.csv / <indicator>_yearly_statistics.csv.
"""

from __future__ import annotations

import io
from typing import Iterable, List, Optional

import pandas as pd

from adapters import LocalStorageAdapter, StorageAdapter
from .charts import ANALYSIS_BASE_PREFIX
from .regression import RegressionSummary
from .research_questions import ResearchQuestionResult

REGRESSION_CSV_NAME = "regression_summary.csv"
REGRESSION_XLSX_NAME = "regression_summary.xlsx"
OUTLIERS_CSV_NAME = "residual_outliers.csv"

REGRESSION_COLUMNS = [
    "label",
    "method",
    "dependent",
    "term",
    "coefficient",
    "std_error",
    "p_value",
    "r_squared",
    "nobs",
]


def regression_summary_frame(summaries: Iterable[RegressionSummary]) -> pd.DataFrame:
    frames = [summary.to_frame() for summary in summaries]
    if not frames:
        return pd.DataFrame(columns=REGRESSION_COLUMNS)
    return pd.concat(frames, ignore_index=True)[REGRESSION_COLUMNS]


def write_regression_report(
    summaries: Iterable[RegressionSummary],
    *,
    storage: Optional[StorageAdapter] = None,
    write_xlsx: bool = False,
) -> List[str]:
    """Write regression_summary.csv (and .xlsx when asked); returns locations."""
    storage = storage or LocalStorageAdapter()
    result_df = regression_summary_frame(summaries)

    locations = [storage.write_csv(result_df, f"{ANALYSIS_BASE_PREFIX}/{REGRESSION_CSV_NAME}")]
    if write_xlsx and result_df.empty:
        print(f"[analysis] No regression results; {REGRESSION_XLSX_NAME} not written.")
    elif write_xlsx:
        buf = io.BytesIO()
        with pd.ExcelWriter(buf, engine="openpyxl") as writer:
            result_df.to_excel(writer, index=False, sheet_name="regressions")
        locations.append(
            storage.write_raw(f"{ANALYSIS_BASE_PREFIX}/{REGRESSION_XLSX_NAME}", buf.getvalue())
        )
    return locations


def outliers_frame(results: Iterable[ResearchQuestionResult]) -> pd.DataFrame:
    frames = []
    for result in results:
        if result.outliers.empty:
            continue
        frames.append(result.outliers.assign(question=result.question.key))
    if not frames:
        return pd.DataFrame(columns=["question", "residual", "abs_residual", "cutoff"])
    combined = pd.concat(frames, ignore_index=True)
    return combined[["question"] + [c for c in combined.columns if c != "question"]]


def write_outlier_report(
    results: Iterable[ResearchQuestionResult],
    *,
    storage: Optional[StorageAdapter] = None,
) -> str:
    storage = storage or LocalStorageAdapter()
    return storage.write_csv(outliers_frame(results), f"{ANALYSIS_BASE_PREFIX}/{OUTLIERS_CSV_NAME}")


def write_table(
    df: pd.DataFrame,
    name: str,
    *,
    storage: Optional[StorageAdapter] = None,
) -> str:
    storage = storage or LocalStorageAdapter()
    return storage.write_csv(df, f"{ANALYSIS_BASE_PREFIX}/{name}.csv")


__all__ = [
    "REGRESSION_CSV_NAME",
    "REGRESSION_XLSX_NAME",
    "OUTLIERS_CSV_NAME",
    "regression_summary_frame",
    "write_regression_report",
    "outliers_frame",
    "write_outlier_report",
    "write_table",
]
