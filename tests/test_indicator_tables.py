import pandas as pd
import pytest

from adapters import LocalStorageAdapter
from transformations import (
    CO2,
    drop_aggregate_regions,
    load_indicator_table,
    normalize_indicator_table,
    read_indicator_csv,
    year_columns,
)

YEARS = [1989, 1990, 1991, 1992]


@pytest.fixture
def sample_csv(make_indicator_csv):
    return make_indicator_csv(
        [
            ("Brazil", "BRA", [1.0, 1.1, 1.2, 1.3]),
            ("World", "WLD", [4.0, 4.1, 4.2, 4.3]),
            ("Chad", "TCD", [None, 0.1, None, 0.3]),
        ],
        YEARS,
    )


def test_read_skips_preamble_and_trailing_column(sample_csv):
    df = read_indicator_csv(sample_csv)

    assert list(df.columns[:4]) == ["Country Name", "Country Code", "Indicator Name", "Indicator Code"]
    assert not any(str(c).startswith("Unnamed") for c in df.columns)
    assert len(df) == 3


def test_read_without_preamble(make_indicator_csv, tmp_path):
    path = tmp_path / "plain.csv"
    path.write_bytes(make_indicator_csv([("Brazil", "BRA", [1.0, 2.0, 3.0, 4.0])], YEARS, preamble=False))

    df = read_indicator_csv(path)

    assert df.loc[0, "Country Code"] == "BRA"


def test_normalize_renames_and_restricts_window(sample_csv):
    table = normalize_indicator_table(read_indicator_csv(sample_csv), start_year=1990, end_year=1991)

    assert list(table.columns) == ["country_name", "country_code", 1990, 1991]
    assert year_columns(table) == [1990, 1991]
    assert table.loc[0, "country_name"] == "Brazil"
    assert table.loc[0, 1991] == pytest.approx(1.2)
    assert pd.isna(table.loc[2, 1991])


def test_normalize_coerces_unparseable_values():
    df = pd.DataFrame(
        {
            "Country Name": ["Brazil"],
            "Country Code": ["BRA"],
            "Indicator Name": ["x"],
            "Indicator Code": ["X"],
            "1990": [".."],
            "1991": ["2.5"],
        }
    )

    table = normalize_indicator_table(df, start_year=1990, end_year=1991)

    assert pd.isna(table.loc[0, 1990])
    assert table.loc[0, 1991] == 2.5


def test_normalize_requires_identifier_columns():
    df = pd.DataFrame({"Country Name": ["Brazil"], "1990": [1.0]})

    with pytest.raises(ValueError, match="identifier"):
        normalize_indicator_table(df, start_year=1990, end_year=1991)


def test_normalize_requires_years_in_window(sample_csv):
    with pytest.raises(ValueError, match="no year columns"):
        normalize_indicator_table(read_indicator_csv(sample_csv), start_year=2000, end_year=2010)


def test_drop_aggregate_regions(sample_csv):
    table = normalize_indicator_table(read_indicator_csv(sample_csv), start_year=1990, end_year=1992)

    countries = drop_aggregate_regions(table)

    assert list(countries["country_code"]) == ["BRA", "TCD"]


def test_load_indicator_table_from_storage(sample_csv, tmp_path):
    (tmp_path / CO2.file_name).write_bytes(sample_csv)
    storage = LocalStorageAdapter(tmp_path)

    table = load_indicator_table(CO2, storage, start_year=1990, end_year=1992)
    with_aggregates = load_indicator_table(
        CO2, storage, start_year=1990, end_year=1992, exclude_aggregates=False
    )

    assert list(table["country_code"]) == ["BRA", "TCD"]
    assert "WLD" in set(with_aggregates["country_code"])
    assert year_columns(table) == [1990, 1991, 1992]
