"""
The three research questions answered by the analysis.

Each question is answered twice:

(a) fixed-effects panel regression on the merged country-year panel;
(b) cross-sectional OLS of compound growth rates, one row per country,
    whose residual outliers (|residual| > 2 sigma) are reported.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

import pandas as pd

from transformations import get_indicator
from .aggregations import cagr_column
from .regression import (
    FittedRegression,
    RegressionSummary,
    fit_fixed_effects,
    fit_linear_regression,
    flag_residual_outliers,
    outlier_labels,
)


@dataclass(frozen=True)
class ResearchQuestion:
    key: str
    question: str
    dependent: str
    regressors: Tuple[str, ...]

    @property
    def dependent_column(self) -> str:
        return get_indicator(self.dependent).value_column

    @property
    def regressor_columns(self) -> List[str]:
        return [get_indicator(key).value_column for key in self.regressors]


RESEARCH_QUESTIONS: Tuple[ResearchQuestion, ...] = (
    ResearchQuestion(
        key="co2_vs_renewables",
        question="Do countries that consume a larger share of renewable energy emit less CO2 per capita?",
        dependent="co2",
        regressors=("renewables",),
    ),
    ResearchQuestion(
        key="co2_vs_gdp",
        question="Do CO2 emissions per capita rise with GDP per capita?",
        dependent="co2",
        regressors=("gdp",),
    ),
    ResearchQuestion(
        key="co2_vs_renewables_and_gdp",
        question="How do renewable share and GDP per capita jointly relate to CO2 emissions per capita?",
        dependent="co2",
        regressors=("renewables", "gdp"),
    ),
)


@dataclass
class ResearchQuestionResult:
    question: ResearchQuestion
    panel: FittedRegression
    cross_section: FittedRegression
    outliers: pd.DataFrame

    @property
    def summaries(self) -> List[RegressionSummary]:
        return [self.panel.summary, self.cross_section.summary]


def run_research_question(
    question: ResearchQuestion,
    panel: pd.DataFrame,
    growth_rates: pd.DataFrame,
    *,
    outlier_threshold: float = 2.0,
) -> ResearchQuestionResult:
    """
    `panel` is the merged country-year panel; `growth_rates` holds one
    row per country with a cagr_<value_column> column per indicator.
    """
    fe = fit_fixed_effects(
        panel,
        question.dependent_column,
        question.regressor_columns,
        label=f"{question.key}_panel_fe",
    )
    ols = fit_linear_regression(
        growth_rates,
        cagr_column(question.dependent_column),
        [cagr_column(col) for col in question.regressor_columns],
        label=f"{question.key}_cagr_ols",
    )
    outliers = flag_residual_outliers(
        ols.residuals,
        labels=outlier_labels(ols),
        threshold=outlier_threshold,
    )
    return ResearchQuestionResult(question=question, panel=fe, cross_section=ols, outliers=outliers)


def run_research_questions(
    panel: pd.DataFrame,
    growth_rates: pd.DataFrame,
    *,
    questions: Sequence[ResearchQuestion] = RESEARCH_QUESTIONS,
    outlier_threshold: float = 2.0,
) -> List[ResearchQuestionResult]:
    return [
        run_research_question(q, panel, growth_rates, outlier_threshold=outlier_threshold)
        for q in questions
    ]


__all__ = [
    "ResearchQuestion",
    "ResearchQuestionResult",
    "RESEARCH_QUESTIONS",
    "run_research_question",
    "run_research_questions",
]
