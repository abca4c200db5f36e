"""
Local orchestration entrypoint for the CO₂ x renewables x GDP analysis.

When executed, runs:

1. (optional) Download of the three indicator CSVs from the World Bank (RAW)
2. Load and normalize the indicator tables (wide, year window)
3. Fill gaps between first and last known values, drop incomplete rows
4. Reshape to long tables (PROCESSED) + per-country / per-year summaries
5. Merge the long tables into the country-year panel (CURATED)
6. Regressions for the three research questions + residual outliers
7. Analytical outputs (trend charts + choropleth maps)

Intended usage (local):

    PYTHONPATH=src python -m local_pipeline --data-dir data

with co2_emissions_per_capita.csv, renewable_energy_consumption.csv and
gdp_per_capita.csv under data/, or

    PYTHONPATH=src python -m local_pipeline --download

to fetch them first. Outputs are written under --output-root (or to S3
when PIPELINE_S3_BUCKET is set).
"""

from __future__ import annotations

import argparse
import dataclasses
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple, TypeVar

import pandas as pd

from adapters import (
    LocalMetadataAdapter,
    LocalStorageAdapter,
    MetadataAdapter,
    S3StorageAdapter,
    StorageAdapter,
)
from analysis import (
    build_choropleth_map,
    build_indicator_trend_chart,
    cagr_column,
    country_growth_rates,
    format_top_countries,
    run_research_questions,
    save_choropleth_html,
    summarize_by_country,
    top_countries,
    write_outlier_report,
    write_regression_report,
    write_table,
    yearly_statistics,
)
from env_loader import PipelineSettings
from ingestion_api import download_indicator_csv
from metadata import INTERPOLATION_SCOPE, LOAD_SCOPE, PANEL_SCOPE, REGRESSION_SCOPE
from transformations import (
    IndicatorSpec,
    fill_missing_years,
    list_indicators,
    load_indicator_table,
    merge_country_summaries,
    merge_observations,
    save_observations_parquet,
    save_panel_parquet,
    to_long,
)

T = TypeVar("T")

# Prefix of the input CSVs inside the bucket when reading from S3
S3_INPUT_PREFIX = "data"


def _run_tracked(
    metadata: MetadataAdapter,
    run_scope: str,
    step: Callable[[], Tuple[T, int, int]],
) -> T:
    """
    Run one pipeline step inside a metadata run.

    `step` returns (result, rows_processed, rows_dropped).
    """
    run_id = metadata.start_run(run_scope)
    try:
        result, rows_processed, rows_dropped = step()
    except Exception as exc:  # noqa: BLE001
        metadata.end_run(run_id, status="FAILED", error_message=str(exc))
        raise
    metadata.end_run(
        run_id,
        status="SUCCESS",
        rows_processed=rows_processed,
        rows_dropped=rows_dropped,
    )
    return result


def _default_storage(settings: PipelineSettings) -> StorageAdapter:
    if settings.uses_s3:
        return S3StorageAdapter(settings.s3_bucket, base_prefix=settings.s3_base_prefix)
    return LocalStorageAdapter(settings.output_root)


def _default_input_storage(settings: PipelineSettings) -> StorageAdapter:
    if settings.uses_s3:
        prefix = "/".join(p for p in (settings.s3_base_prefix, S3_INPUT_PREFIX) if p)
        return S3StorageAdapter(settings.s3_bucket, base_prefix=prefix)
    return LocalStorageAdapter(settings.data_dir)


def _highlight_countries(summary: pd.DataFrame, value_column: str, n: int = 3) -> List[str]:
    top = top_countries(summary, f"mean_{value_column}", n=n)
    return [str(code) for code in top["country_code"]]


def run_local_pipeline(
    settings: Optional[PipelineSettings] = None,
    *,
    download: bool = False,
    make_charts: bool = True,
    exclude_aggregates: bool = True,
    write_xlsx: bool = False,
    storage: Optional[StorageAdapter] = None,
    input_storage: Optional[StorageAdapter] = None,
    metadata: Optional[MetadataAdapter] = None,
) -> Dict[str, List[str]]:
    """
    Run the full pipeline end-to-end.

    Parameters
    ----------
    settings:
        Year window and locations; defaults to PipelineSettings.from_env().
    download:
        Fetch the indicator CSVs from the World Bank into RAW storage first
        and read them from there instead of `input_storage`.
    storage, input_storage, metadata:
        Adapter overrides (outputs, input CSVs, run ledger).

    Returns
    -------
    artefacts:
        Dictionary mapping step names to lists of generated locations.
    """
    settings = settings or PipelineSettings.from_env()
    storage = storage or _default_storage(settings)
    metadata = metadata or LocalMetadataAdapter(settings.metadata_file)
    indicators: Sequence[IndicatorSpec] = list_indicators()
    artefacts: Dict[str, List[str]] = {}

    # 1. Download (RAW)
    input_keys: Dict[str, str] = {}
    if download:
        print("[1/7] Downloading indicator CSVs from the World Bank...")
        for spec in indicators:
            input_keys[spec.key] = download_indicator_csv(spec, storage, metadata)
        input_storage = storage
        artefacts["raw"] = [input_keys[spec.key] for spec in indicators]
    else:
        input_storage = input_storage or _default_input_storage(settings)
        print("[1/7] Download skipped; reading local indicator CSVs.")
        for spec in indicators:
            input_keys[spec.key] = spec.file_name

    # 2. Load + normalize
    print(f"[2/7] Loading indicator tables ({settings.start_year}-{settings.end_year})...")

    def _load() -> Tuple[Dict[str, pd.DataFrame], int, int]:
        tables = {
            spec.key: load_indicator_table(
                spec,
                input_storage,
                key=input_keys[spec.key],
                start_year=settings.start_year,
                end_year=settings.end_year,
                exclude_aggregates=exclude_aggregates,
            )
            for spec in indicators
        }
        return tables, sum(len(t) for t in tables.values()), 0

    wide_tables = _run_tracked(metadata, LOAD_SCOPE, _load)

    # 3. Interpolation
    print("[3/7] Filling gaps between first and last known values...")

    def _interpolate() -> Tuple[Dict[str, pd.DataFrame], int, int]:
        filled = {
            spec.key: fill_missing_years(wide_tables[spec.key], label=spec.key)
            for spec in indicators
        }
        kept = sum(len(t) for t in filled.values())
        dropped = sum(len(wide_tables[k]) - len(t) for k, t in filled.items())
        return filled, kept, dropped

    complete_tables = _run_tracked(metadata, INTERPOLATION_SCOPE, _interpolate)
    for spec in indicators:
        print(f"      {spec.key}: {len(complete_tables[spec.key])} complete countries")

    # 4. Reshape (PROCESSED) + summaries
    print("[4/7] Reshaping to long tables and summarizing per country...")
    long_tables: Dict[str, pd.DataFrame] = {}
    summaries: Dict[str, pd.DataFrame] = {}
    artefacts["processed"] = []
    artefacts["summaries"] = []
    for spec in indicators:
        long = to_long(complete_tables[spec.key], spec.value_column)
        long_tables[spec.key] = long
        artefacts["processed"].append(save_observations_parquet(long, spec, storage))

        summary = summarize_by_country(long, spec.value_column)
        summaries[spec.key] = summary
        artefacts["summaries"].append(
            write_table(summary, f"{spec.value_column}_country_summary", storage=storage)
        )
        artefacts["summaries"].append(
            write_table(
                yearly_statistics(long, spec.value_column),
                f"{spec.value_column}_yearly_statistics",
                storage=storage,
            )
        )

        top = top_countries(summary, cagr_column(spec.value_column))
        print(f"      {spec.label}: fastest growth -> {format_top_countries(top, cagr_column(spec.value_column))}")

    # 5. Merge (CURATED)
    print("[5/7] Merging indicators into the country-year panel...")

    def _merge() -> Tuple[pd.DataFrame, int, int]:
        merged = merge_observations(*(long_tables[spec.key] for spec in indicators))
        if merged.empty:
            raise RuntimeError("Merged panel is empty; no country-year has all indicators")
        total = sum(len(long_tables[spec.key]) for spec in indicators)
        return merged, len(merged), total - len(merged) * len(indicators)

    panel = _run_tracked(metadata, PANEL_SCOPE, _merge)
    panel_location = save_panel_parquet(panel, storage)
    artefacts["curated"] = [panel_location]
    print(f"      Panel parquet: {panel_location}")

    # 6. Regressions
    print("[6/7] Fitting regressions for the research questions...")
    growth = merge_country_summaries(
        *(country_growth_rates(long_tables[spec.key], spec.value_column) for spec in indicators)
    )

    def _regress():
        results = run_research_questions(panel, growth)
        nobs = sum(s.nobs for r in results for s in r.summaries)
        return results, nobs, 0

    results = _run_tracked(metadata, REGRESSION_SCOPE, _regress)
    all_summaries = [s for r in results for s in r.summaries]
    artefacts["analysis"] = write_regression_report(all_summaries, storage=storage, write_xlsx=write_xlsx)
    artefacts["analysis"].append(write_outlier_report(results, storage=storage))

    for result in results:
        print(f"\n   {result.question.question}")
        for summary in result.summaries:
            print(summary.format())
        if result.outliers.empty:
            print("  no residual outliers")
        else:
            names = ", ".join(result.outliers["country_name"].astype(str))
            print(f"  residual outliers: {names}")
    print()

    # 7. Charts
    if not make_charts:
        print("[7/7] Charts skipped.")
    else:
        print("[7/7] Generating trend charts and choropleth maps...")
        charts: List[str] = []
        for spec in indicators:
            long = long_tables[spec.key]
            try:
                charts.append(
                    build_indicator_trend_chart(
                        long,
                        spec.value_column,
                        countries=_highlight_countries(summaries[spec.key], spec.value_column),
                        title=spec.description,
                        storage=storage,
                    )
                )
                fig = build_choropleth_map(long, spec.value_column, year=settings.end_year)
                charts.append(
                    save_choropleth_html(
                        fig,
                        f"{spec.value_column}_choropleth_{settings.end_year}",
                        storage=storage,
                    )
                )
            except RuntimeError as exc:
                print(f"      Skipping charts for {spec.key}: {exc}")
        artefacts["analysis"].extend(charts)
        for location in charts:
            print(f"      {location}")

    print("\nPipeline completed successfully.")
    return artefacts


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Run the CO2 x renewables x GDP analysis pipeline end-to-end.",
    )
    parser.add_argument("--data-dir", type=Path, default=None, help="Directory holding the three indicator CSVs.")
    parser.add_argument("--output-root", type=Path, default=None, help="Root directory for pipeline outputs.")
    parser.add_argument("--start-year", type=int, default=None, help="First year of the analysis window (inclusive).")
    parser.add_argument("--end-year", type=int, default=None, help="Last year of the analysis window (inclusive).")
    parser.add_argument(
        "--download",
        action="store_true",
        help="Download the indicator CSVs from the World Bank before running.",
    )
    parser.add_argument("--skip-charts", action="store_true", help="Do not generate PNG/HTML charts.")
    parser.add_argument(
        "--keep-aggregates",
        action="store_true",
        help="Keep World Bank aggregate rows (regions, income groups, World).",
    )
    parser.add_argument("--xlsx", action="store_true", help="Also write regression_summary.xlsx.")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> Dict[str, List[str]]:
    args = build_parser().parse_args(argv)

    settings = PipelineSettings.from_env()
    overrides = {
        "data_dir": args.data_dir,
        "output_root": args.output_root,
        "start_year": args.start_year,
        "end_year": args.end_year,
    }
    settings = dataclasses.replace(settings, **{k: v for k, v in overrides.items() if v is not None})

    return run_local_pipeline(
        settings,
        download=args.download,
        make_charts=not args.skip_charts,
        exclude_aggregates=not args.keep_aggregates,
        write_xlsx=args.xlsx,
    )


if __name__ == "__main__":
    main()


__all__ = ["run_local_pipeline", "build_parser", "main"]
