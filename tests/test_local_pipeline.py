import numpy as np
import pandas as pd
import pytest

import metadata
from adapters import LocalStorageAdapter
from env_loader import PipelineSettings
from local_pipeline import main, run_local_pipeline
from metadata import INTERPOLATION_SCOPE, LOAD_SCOPE, PANEL_SCOPE, REGRESSION_SCOPE
from transformations import CO2, CURATED_PANEL_KEY, GDP, RENEWABLES

YEARS = list(range(1999, 2006))
COUNTRIES = [
    ("Argentina", "ARG"),
    ("Brazil", "BRA"),
    ("Chile", "CHL"),
    ("Denmark", "DNK"),
    ("Egypt, Arab Rep.", "EGY"),
    ("France", "FRA"),
    ("Ghana", "GHA"),
    ("India", "IND"),
]


@pytest.fixture
def data_dir(tmp_path, make_indicator_csv):
    rng = np.random.default_rng(42)
    gdp_rows, ren_rows, co2_rows = [], [], []
    t = np.arange(len(YEARS))
    for name, code in COUNTRIES:
        gdp = rng.uniform(2_000, 40_000) * (1 + rng.uniform(0.01, 0.05)) ** t
        ren = rng.uniform(5, 60) * (1 + rng.uniform(-0.02, 0.04)) ** t
        co2 = 5 + 0.0002 * gdp - 0.05 * ren + rng.normal(0, 0.05, len(t))
        gdp_rows.append((name, code, list(np.round(gdp, 2))))
        ren_rows.append((name, code, list(np.round(ren, 3))))
        co2_rows.append((name, code, list(np.round(co2, 4))))

    # interior gap, filled from the 2000 and 2005 anchors
    co2_rows[0][2][3] = None
    co2_rows[0][2][4] = None

    sparse = [None, None, None, None, 1.0, None, None]
    for rows in (gdp_rows, ren_rows, co2_rows):
        rows.append(("Sparseland", "SPR", sparse))
        rows.append(("World", "WLD", [1.0] * len(YEARS)))
    co2_rows.append(("Lateland", "LAT", [None, None, 1.0, 1.1, 1.2, 1.3, 1.4]))
    gdp_rows.append(("Lateland", "LAT", [1000.0 + i for i in range(len(YEARS))]))
    ren_rows.append(("Lateland", "LAT", [10.0 + i for i in range(len(YEARS))]))

    directory = tmp_path / "data"
    directory.mkdir()
    for spec, rows in ((CO2, co2_rows), (RENEWABLES, ren_rows), (GDP, gdp_rows)):
        csv = make_indicator_csv(rows, YEARS, indicator_code=spec.indicator_code)
        (directory / spec.file_name).write_bytes(csv)
    return directory


def test_pipeline_end_to_end(data_dir, tmp_path):
    out = tmp_path / "out"
    settings = PipelineSettings(data_dir=data_dir, output_root=out, start_year=2000, end_year=2005)

    artefacts = run_local_pipeline(settings)

    assert len(artefacts["processed"]) == 3
    storage = LocalStorageAdapter(out)

    panel = storage.read_parquet(CURATED_PANEL_KEY)
    assert set(panel["country_code"]) == {code for _, code in COUNTRIES}
    assert sorted(panel["year"].unique()) == list(range(2000, 2006))
    assert len(panel) == len(COUNTRIES) * 6

    co2_long = storage.read_parquet("processed/co2/co2_long.parquet")
    arg = co2_long[co2_long["country_code"] == "ARG"].set_index("year")[CO2.value_column]
    assert arg[2002] == pytest.approx(arg[2000] + (arg[2005] - arg[2000]) * 2 / 5)
    assert "LAT" not in set(co2_long["country_code"])

    report = pd.read_csv(out / "analysis" / "regression_summary.csv")
    assert report["label"].nunique() == 6
    assert (out / "analysis" / "residual_outliers.csv").exists()
    assert (out / "analysis" / "co2_tons_per_capita_country_summary.csv").exists()
    assert (out / "analysis" / "co2_tons_per_capita_trend.png").exists()
    assert (out / "analysis" / "gdp_per_capita_usd_choropleth_2005.html").exists()

    for scope in (LOAD_SCOPE, INTERPOLATION_SCOPE, PANEL_SCOPE, REGRESSION_SCOPE):
        assert metadata.get_last_run(scope)["status"] == "SUCCESS"
    assert metadata.get_last_run(INTERPOLATION_SCOPE)["rows_dropped"] == 4


def test_pipeline_records_failed_step(tmp_path):
    empty = tmp_path / "empty"
    empty.mkdir()
    settings = PipelineSettings(data_dir=empty, output_root=tmp_path / "out")

    with pytest.raises(FileNotFoundError):
        run_local_pipeline(settings, make_charts=False)

    assert metadata.get_last_run(LOAD_SCOPE)["status"] == "FAILED"


def test_main_applies_cli_overrides(data_dir, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("PIPELINE_S3_BUCKET", raising=False)
    out = tmp_path / "cli_out"

    artefacts = main(
        [
            "--data-dir", str(data_dir),
            "--output-root", str(out),
            "--start-year", "2000",
            "--end-year", "2005",
            "--skip-charts",
            "--xlsx",
        ]
    )

    assert (out / "analysis" / "regression_summary.xlsx").exists()
    assert not list((out / "analysis").glob("*.png"))
    assert any(loc.endswith("regression_summary.csv") for loc in artefacts["analysis"])


def test_chart_failures_are_skipped(data_dir, tmp_path, monkeypatch, capsys):
    import local_pipeline

    def no_map(frame, value_column, *, year=None, title=None):
        raise RuntimeError(f"No data available for choropleth of {value_column} in {year}")

    monkeypatch.setattr(local_pipeline, "build_choropleth_map", no_map)
    out = tmp_path / "out"
    settings = PipelineSettings(data_dir=data_dir, output_root=out, start_year=2000, end_year=2005)

    artefacts = run_local_pipeline(settings)

    printed = capsys.readouterr().out
    assert "Skipping charts for co2" in printed
    assert "Pipeline completed successfully." in printed
    assert not list((out / "analysis").glob("*.html"))
    assert any(loc.endswith("_trend.png") for loc in artefacts["analysis"])


def test_runs_recorded_in_configured_ledger(data_dir, tmp_path, metadata_file):
    ledger_file = tmp_path / "custom_ledger.json"
    settings = PipelineSettings(
        data_dir=data_dir,
        output_root=tmp_path / "out",
        start_year=2000,
        end_year=2005,
        metadata_file=ledger_file,
    )

    run_local_pipeline(settings, make_charts=False)

    scopes = {run["run_scope"] for run in metadata.list_runs(path=ledger_file)}
    assert scopes == {LOAD_SCOPE, INTERPOLATION_SCOPE, PANEL_SCOPE, REGRESSION_SCOPE}
    assert not metadata_file.exists()
