from .world_bank_download import (  # noqa: F401
    RAW_BASE_PREFIX,
    download_indicator_csv,
    extract_indicator_csv,
    fetch_indicator_archive,
    raw_key,
)

__all__ = [
    "RAW_BASE_PREFIX",
    "fetch_indicator_archive",
    "extract_indicator_csv",
    "raw_key",
    "download_indicator_csv",
]
