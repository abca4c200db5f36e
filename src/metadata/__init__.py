"""
Metadata module
---------------

Local JSON ledger recording every pipeline step that ran, its status and
how many rows it kept or dropped.

    from metadata import start_run, end_run, INTERPOLATION_SCOPE

    run_id = start_run(INTERPOLATION_SCOPE)
    # ... fill gaps ...
    end_run(run_id, status="SUCCESS", rows_processed=180, rows_dropped=37)
"""

from .store import (
    DEFAULT_METADATA_FILE,
    METADATA_LOCAL_FILE_ENV,
    end_run,
    get_last_run,
    list_runs,
    reset_local_store,
    start_run,
)

# Run scopes used by the pipeline steps
DOWNLOAD_SCOPE = "download_indicators"
LOAD_SCOPE = "load_indicators"
INTERPOLATION_SCOPE = "interpolate_indicators"
PANEL_SCOPE = "merge_panel"
REGRESSION_SCOPE = "regressions"

__all__ = [
    "DEFAULT_METADATA_FILE",
    "METADATA_LOCAL_FILE_ENV",
    "DOWNLOAD_SCOPE",
    "LOAD_SCOPE",
    "INTERPOLATION_SCOPE",
    "PANEL_SCOPE",
    "REGRESSION_SCOPE",
    "start_run",
    "end_run",
    "get_last_run",
    "list_runs",
    "reset_local_store",
]
