"""
Transformations layer
----------------------

Turn the three World Bank indicator files into analysis-ready tables:
load and normalize (wide), fill gaps, reshape to long, merge into a panel.
"""

from .indicators import (  # noqa: F401
    CO2,
    GDP,
    INDICATORS,
    RENEWABLES,
    IndicatorSpec,
    get_indicator,
    list_indicators,
)
from .indicator_tables import (  # noqa: F401
    AGGREGATE_REGION_CODES,
    ID_COLUMNS,
    drop_aggregate_regions,
    load_indicator_table,
    normalize_indicator_table,
    read_indicator_csv,
    year_columns,
)
from .interpolation import (  # noqa: F401
    drop_incomplete_rows,
    fill_missing_years,
    interpolate_between_anchors,
    interpolate_indicator_table,
)
from .reshape import (  # noqa: F401
    OBSERVATION_KEYS,
    processed_key,
    save_observations_parquet,
    to_long,
)
from .panel_merge import (  # noqa: F401
    COUNTRY_KEYS,
    CURATED_PANEL_KEY,
    merge_country_summaries,
    merge_observations,
    save_panel_parquet,
)

__all__ = [
    "IndicatorSpec",
    "CO2",
    "RENEWABLES",
    "GDP",
    "INDICATORS",
    "get_indicator",
    "list_indicators",
    "ID_COLUMNS",
    "AGGREGATE_REGION_CODES",
    "read_indicator_csv",
    "normalize_indicator_table",
    "drop_aggregate_regions",
    "load_indicator_table",
    "year_columns",
    "interpolate_between_anchors",
    "interpolate_indicator_table",
    "drop_incomplete_rows",
    "fill_missing_years",
    "OBSERVATION_KEYS",
    "to_long",
    "processed_key",
    "save_observations_parquet",
    "COUNTRY_KEYS",
    "CURATED_PANEL_KEY",
    "merge_observations",
    "merge_country_summaries",
    "save_panel_parquet",
]
