"""
RAW ingestion of the indicator CSVs from the World Bank bulk-download API.

The API answers with a zip archive holding the data file
(API_<code>_DS2_en_csv_v2_<n>.csv) plus two Metadata_*.csv files. Only the
data member is stored, under RAW_BASE_PREFIX with the indicator's file name,
so the loader can read it exactly like a manually downloaded CSV.
"""

from __future__ import annotations

import io
import zipfile
from typing import Optional, Tuple

import requests

from adapters import MetadataAdapter, StorageAdapter
from metadata import DOWNLOAD_SCOPE
from transformations import IndicatorSpec, read_indicator_csv

WORLD_BANK_DOWNLOAD_URL = "https://api.worldbank.org/v2/en/indicator"

# Logical base prefix for RAW files (local FS or S3).
RAW_BASE_PREFIX = "raw/world_bank"


def fetch_indicator_archive(indicator_code: str, *, timeout: int = 60) -> bytes:
    """Download the zipped CSV bundle of one indicator (single attempt)."""
    url = f"{WORLD_BANK_DOWNLOAD_URL}/{indicator_code}"
    response = requests.get(url, params={"downloadformat": "csv"}, timeout=timeout)
    response.raise_for_status()
    return response.content


def extract_indicator_csv(archive: bytes, indicator_code: str) -> Tuple[str, bytes]:
    """
    Return (member name, content) of the data CSV inside the archive.

    Metadata_* members are ignored.
    """
    try:
        bundle = zipfile.ZipFile(io.BytesIO(archive))
    except zipfile.BadZipFile as exc:
        raise RuntimeError(f"World Bank response for {indicator_code} is not a zip archive") from exc

    with bundle:
        prefix = f"API_{indicator_code}"
        for name in bundle.namelist():
            base = name.rsplit("/", 1)[-1]
            if base.startswith("Metadata_") or not base.lower().endswith(".csv"):
                continue
            if base.startswith(prefix):
                return base, bundle.read(name)

    raise RuntimeError(f"No data CSV for {indicator_code} found in the downloaded archive")


def raw_key(spec: IndicatorSpec) -> str:
    return f"{RAW_BASE_PREFIX}/{spec.file_name}"


def download_indicator_csv(
    spec: IndicatorSpec,
    storage: StorageAdapter,
    metadata: MetadataAdapter,
    *,
    run_scope: str = DOWNLOAD_SCOPE,
    timeout: int = 60,
    key: Optional[str] = None,
) -> str:
    """
    Download one indicator and persist its data CSV.

    Returns the logical key the CSV was stored under, e.g.
    "raw/world_bank/gdp_per_capita.csv".
    """
    run_id = metadata.start_run(run_scope)
    key = key or raw_key(spec)

    try:
        archive = fetch_indicator_archive(spec.indicator_code, timeout=timeout)
        member, content = extract_indicator_csv(archive, spec.indicator_code)
        location = storage.write_raw(key, content)
        print(f"[download] {spec.indicator_code}: {member} -> {location}")

        metadata.end_run(
            run_id,
            status="SUCCESS",
            rows_processed=len(read_indicator_csv(content)),
        )
        return key
    except Exception as exc:  # noqa: BLE001
        metadata.end_run(run_id, status="FAILED", error_message=str(exc))
        raise


__all__ = [
    "WORLD_BANK_DOWNLOAD_URL",
    "RAW_BASE_PREFIX",
    "fetch_indicator_archive",
    "extract_indicator_csv",
    "raw_key",
    "download_indicator_csv",
]
