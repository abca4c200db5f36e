"""
Analysis layer
--------------

Per-country aggregation, regressions answering the research questions,
and the analytical outputs built from them:

- <indicator>_trend.png / <indicator>_choropleth_<year>.html
- regression_summary.csv
- residual_outliers.csv
"""

from .aggregations import (  # noqa: F401
    cagr_column,
    compound_growth_rate,
    country_growth_rates,
    format_top_countries,
    summarize_by_country,
    top_countries,
    yearly_statistics,
)
from .regression import (  # noqa: F401
    FittedRegression,
    RegressionSummary,
    fit_fixed_effects,
    fit_linear_regression,
    flag_residual_outliers,
)
from .research_questions import (  # noqa: F401
    RESEARCH_QUESTIONS,
    ResearchQuestion,
    ResearchQuestionResult,
    run_research_question,
    run_research_questions,
)
from .charts import (  # noqa: F401
    ANALYSIS_BASE_PREFIX,
    build_choropleth_map,
    build_indicator_trend_chart,
    save_choropleth_html,
)
from .reports import (  # noqa: F401
    REGRESSION_CSV_NAME,
    write_outlier_report,
    write_regression_report,
    write_table,
)

__all__ = [
    "compound_growth_rate",
    "cagr_column",
    "summarize_by_country",
    "country_growth_rates",
    "yearly_statistics",
    "top_countries",
    "format_top_countries",
    "RegressionSummary",
    "FittedRegression",
    "fit_fixed_effects",
    "fit_linear_regression",
    "flag_residual_outliers",
    "ResearchQuestion",
    "ResearchQuestionResult",
    "RESEARCH_QUESTIONS",
    "run_research_question",
    "run_research_questions",
    "ANALYSIS_BASE_PREFIX",
    "build_indicator_trend_chart",
    "build_choropleth_map",
    "save_choropleth_html",
    "REGRESSION_CSV_NAME",
    "write_regression_report",
    "write_outlier_report",
    "write_table",
]
