from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from metadata import METADATA_LOCAL_FILE_ENV

DEFAULT_START_YEAR = 1990
DEFAULT_END_YEAR = 2020

ANALYSIS_DATA_DIR_ENV = "ANALYSIS_DATA_DIR"
ANALYSIS_OUTPUT_ROOT_ENV = "ANALYSIS_OUTPUT_ROOT"
ANALYSIS_START_YEAR_ENV = "ANALYSIS_START_YEAR"
ANALYSIS_END_YEAR_ENV = "ANALYSIS_END_YEAR"
PIPELINE_S3_BUCKET_ENV = "PIPELINE_S3_BUCKET"
PIPELINE_S3_BASE_PREFIX_ENV = "PIPELINE_S3_BASE_PREFIX"


def load_dotenv_if_present(path: str | Path | None = None) -> None:
    """
    Read KEY=VALUE pairs from a .env file into os.environ.

    - Default file is ".env" in the current working directory.
    - Blank lines, comments ("#") and lines without "=" are ignored.
    - Surrounding quotes around values are stripped.
    - Variables already present in the environment are never overwritten.
    """
    env_path = Path(path or ".env")
    if not env_path.exists():
        return

    try:
        text = env_path.read_text(encoding="utf-8")
    except OSError:
        return

    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key and key not in os.environ:
            os.environ[key] = value


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"Environment variable {name!r} must be an integer, got {raw!r}") from exc


@dataclass
class PipelineSettings:
    """Runtime configuration of the analysis pipeline."""

    data_dir: Path = Path("data")
    output_root: Path = Path(".")
    start_year: int = DEFAULT_START_YEAR
    end_year: int = DEFAULT_END_YEAR
    s3_bucket: Optional[str] = None
    s3_base_prefix: Optional[str] = None
    metadata_file: Optional[Path] = None

    def __post_init__(self) -> None:
        if self.start_year > self.end_year:
            raise ValueError(
                f"start_year ({self.start_year}) must not be after end_year ({self.end_year})",
            )

    @property
    def uses_s3(self) -> bool:
        return bool(self.s3_bucket)

    @classmethod
    def from_env(cls) -> "PipelineSettings":
        load_dotenv_if_present()
        ledger = os.getenv(METADATA_LOCAL_FILE_ENV)
        return cls(
            data_dir=Path(os.getenv(ANALYSIS_DATA_DIR_ENV) or "data"),
            output_root=Path(os.getenv(ANALYSIS_OUTPUT_ROOT_ENV) or "."),
            start_year=_int_from_env(ANALYSIS_START_YEAR_ENV, DEFAULT_START_YEAR),
            end_year=_int_from_env(ANALYSIS_END_YEAR_ENV, DEFAULT_END_YEAR),
            s3_bucket=os.getenv(PIPELINE_S3_BUCKET_ENV) or None,
            s3_base_prefix=os.getenv(PIPELINE_S3_BASE_PREFIX_ENV) or None,
            metadata_file=Path(ledger) if ledger else None,
        )


__all__ = [
    "DEFAULT_START_YEAR",
    "DEFAULT_END_YEAR",
    "PipelineSettings",
    "load_dotenv_if_present",
]
