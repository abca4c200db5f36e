"""
Regression fitting and residual outlier detection.

- Fixed-effects panel regression (linearmodels PanelOLS) over the merged
  country-year panel, with country and year effects absorbed.
- Cross-sectional OLS (statsmodels) over one row per country, typically
  compound growth rates regressed on each other.

Rows with a missing value in any used column are dropped before fitting.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd
import statsmodels.api as sm
from linearmodels.panel import PanelOLS

from transformations import COUNTRY_KEYS

PANEL_METHOD = "panel_fixed_effects"
OLS_METHOD = "ols"


@dataclass
class RegressionSummary:
    label: str
    method: str
    dependent: str
    regressors: List[str]
    coefficients: Dict[str, float]
    std_errors: Dict[str, float]
    p_values: Dict[str, float]
    r_squared: float
    nobs: int

    def to_frame(self) -> pd.DataFrame:
        """One row per estimated term."""
        rows = [
            {
                "label": self.label,
                "method": self.method,
                "dependent": self.dependent,
                "term": term,
                "coefficient": coef,
                "std_error": self.std_errors.get(term),
                "p_value": self.p_values.get(term),
                "r_squared": self.r_squared,
                "nobs": self.nobs,
            }
            for term, coef in self.coefficients.items()
        ]
        return pd.DataFrame(rows)

    def format(self) -> str:
        lines = [
            f"{self.label} [{self.method}] {self.dependent} ~ {' + '.join(self.regressors)}",
            f"  nobs={self.nobs}  R²={self.r_squared:.4f}",
        ]
        for term, coef in self.coefficients.items():
            lines.append(
                f"  {term:<32} coef={coef: .6g}  se={self.std_errors.get(term, float('nan')):.6g}"
                f"  p={self.p_values.get(term, float('nan')):.4f}"
            )
        return "\n".join(lines)


@dataclass
class FittedRegression:
    summary: RegressionSummary
    results: Any
    data: pd.DataFrame
    residuals: pd.Series = field(repr=False)


def _require_columns(frame: pd.DataFrame, columns: Sequence[str]) -> None:
    missing = [col for col in columns if col not in frame.columns]
    if missing:
        raise ValueError(f"Columns not found for regression: {missing}")


def _as_float_dict(values: pd.Series) -> Dict[str, float]:
    return {str(k): float(v) for k, v in values.items()}


def fit_fixed_effects(
    panel: pd.DataFrame,
    dependent: str,
    regressors: Sequence[str],
    *,
    label: Optional[str] = None,
    entity_column: str = "country_code",
    time_column: str = "year",
    entity_effects: bool = True,
    time_effects: bool = True,
) -> FittedRegression:
    """
    Regress `dependent` on `regressors` with country and year fixed effects.

    The panel is indexed by (entity_column, time_column); effects are
    absorbed through the within transformation performed by PanelOLS.
    """
    regressors = list(regressors)
    used = [dependent] + regressors
    _require_columns(panel, [entity_column, time_column] + used)

    data = panel[[entity_column, time_column] + used].dropna()
    if data.empty:
        raise RuntimeError(f"No complete rows to fit {dependent} ~ {regressors}")

    data = data.assign(
        **{
            entity_column: data[entity_column].astype(str),
            time_column: data[time_column].astype("int64"),
        }
    )
    indexed = data.set_index([entity_column, time_column]).sort_index()
    for col in used:
        indexed[col] = indexed[col].astype(float)

    model = PanelOLS(
        indexed[dependent],
        indexed[regressors],
        entity_effects=entity_effects,
        time_effects=time_effects,
        drop_absorbed=True,
    )
    results = model.fit()

    summary = RegressionSummary(
        label=label or f"{dependent}_fe",
        method=PANEL_METHOD,
        dependent=dependent,
        regressors=regressors,
        coefficients=_as_float_dict(results.params),
        std_errors=_as_float_dict(results.std_errors),
        p_values=_as_float_dict(results.pvalues),
        r_squared=float(results.rsquared),
        nobs=int(results.nobs),
    )
    return FittedRegression(summary=summary, results=results, data=indexed, residuals=results.resids)


def fit_linear_regression(
    frame: pd.DataFrame,
    dependent: str,
    regressors: Sequence[str],
    *,
    label: Optional[str] = None,
) -> FittedRegression:
    """Ordinary least squares with an intercept ("const")."""
    regressors = list(regressors)
    used = [dependent] + regressors
    _require_columns(frame, used)

    data = frame.dropna(subset=used)
    if len(data) <= len(regressors) + 1:
        raise RuntimeError(
            f"Not enough complete rows ({len(data)}) to fit {dependent} ~ {regressors}",
        )

    exog = sm.add_constant(data[regressors].astype(float), has_constant="add")
    results = sm.OLS(data[dependent].astype(float), exog).fit()

    summary = RegressionSummary(
        label=label or f"{dependent}_ols",
        method=OLS_METHOD,
        dependent=dependent,
        regressors=regressors,
        coefficients=_as_float_dict(results.params),
        std_errors=_as_float_dict(results.bse),
        p_values=_as_float_dict(results.pvalues),
        r_squared=float(results.rsquared),
        nobs=int(results.nobs),
    )
    return FittedRegression(summary=summary, results=results, data=data, residuals=results.resid)


def flag_residual_outliers(
    residuals: Sequence[float] | pd.Series,
    *,
    labels: Optional[pd.DataFrame] = None,
    threshold: float = 2.0,
) -> pd.DataFrame:
    """
    Flag observations whose absolute residual exceeds `threshold` standard
    deviations of the residual distribution (population std, ddof=0).

    `labels`, when given, is a frame sharing the residuals' index whose
    columns (e.g. country name/code) are attached to each flagged row.
    A named index (such as the (country_code, year) panel index) is kept
    as columns. The result is sorted by residual, largest first.
    """
    resid = pd.to_numeric(pd.Series(residuals), errors="coerce").dropna().astype(float)
    resid.name = "residual"

    sigma = float(resid.std(ddof=0)) if len(resid) else 0.0
    cutoff = threshold * sigma
    flagged = resid[resid.abs() > cutoff].to_frame()

    if labels is not None:
        flagged = labels.loc[flagged.index].join(flagged)
        flagged = flagged.reset_index(drop=True)
    elif any(name is not None for name in flagged.index.names):
        flagged = flagged.reset_index()
    else:
        flagged = flagged.reset_index(drop=True)

    flagged["abs_residual"] = flagged["residual"].abs()
    flagged["cutoff"] = cutoff
    return flagged.sort_values("residual", ascending=False).reset_index(drop=True)


def outlier_labels(fitted: FittedRegression) -> Optional[pd.DataFrame]:
    """Country columns of a cross-sectional fit, for flag_residual_outliers."""
    if all(col in fitted.data.columns for col in COUNTRY_KEYS):
        return fitted.data[COUNTRY_KEYS]
    return None


__all__ = [
    "PANEL_METHOD",
    "OLS_METHOD",
    "RegressionSummary",
    "FittedRegression",
    "fit_fixed_effects",
    "fit_linear_regression",
    "flag_residual_outliers",
    "outlier_labels",
]
