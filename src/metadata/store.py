import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional
from uuid import uuid4

# Environment variable to override the ledger path (useful for tests)
METADATA_LOCAL_FILE_ENV = "METADATA_LOCAL_FILE"

DEFAULT_METADATA_FILE = Path("local_metadata.json")

Run = Dict[str, Any]


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def ledger_path(path: Optional[Path] = None) -> Path:
    """Explicit `path`, else $METADATA_LOCAL_FILE, else ./local_metadata.json."""
    if path is not None:
        return Path(path)
    return Path(os.getenv(METADATA_LOCAL_FILE_ENV) or DEFAULT_METADATA_FILE)


def _read_ledger(path: Optional[Path] = None) -> Dict[str, List[Run]]:
    """
    Read the run ledger; a missing file is an empty ledger.

    Layout:

        {"runs": [{"run_id", "run_scope", "start_ts", "end_ts", "status",
                   "rows_processed", "rows_dropped", "error_message"}, ...]}

    status is one of RUNNING, SUCCESS, FAILED.
    """
    path = ledger_path(path)
    if not path.is_file():
        return {"runs": []}

    try:
        ledger = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise RuntimeError(f"Run ledger {path} is corrupted") from exc

    runs = ledger.get("runs", []) if isinstance(ledger, dict) else None
    if not isinstance(runs, list):
        raise RuntimeError(f"Run ledger {path} does not hold a list of runs")
    return {"runs": runs}


def _write_ledger(ledger: Dict[str, List[Run]], path: Optional[Path] = None) -> None:
    """Replace the ledger atomically (write a sibling temp file, then rename)."""
    path = ledger_path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    staging = path.with_name(path.name + ".tmp")
    staging.write_text(json.dumps(ledger, indent=2, ensure_ascii=False), encoding="utf-8")
    staging.replace(path)


def start_run(run_scope: str, *, path: Optional[Path] = None) -> str:
    """
    Register the start of a pipeline step.

    Parameters
    ----------
    run_scope:
        Step being executed, e.g. "load_indicators" or "regressions".

    Returns
    -------
    run_id:
        Identifier of the created run, to be passed to end_run().
    """
    ledger = _read_ledger(path)
    run_id = uuid4().hex
    ledger["runs"].append(
        {
            "run_id": run_id,
            "run_scope": run_scope,
            "start_ts": _utc_timestamp(),
            "end_ts": None,
            "status": "RUNNING",
            "rows_processed": None,
            "rows_dropped": None,
            "error_message": None,
        }
    )
    _write_ledger(ledger, path)
    return run_id


def end_run(
    run_id: str,
    status: str = "SUCCESS",
    *,
    rows_processed: Optional[int] = None,
    rows_dropped: Optional[int] = None,
    error_message: Optional[str] = None,
    path: Optional[Path] = None,
) -> Run:
    """
    Close a run and return its updated record.

    Counts and error message are only written when given. Raises KeyError
    when no run with `run_id` exists.
    """
    ledger = _read_ledger(path)
    run = next((r for r in reversed(ledger["runs"]) if r.get("run_id") == run_id), None)
    if run is None:
        raise KeyError(f"Unknown run id {run_id!r}")

    run.update(end_ts=_utc_timestamp(), status=status)
    counts = {"rows_processed": rows_processed, "rows_dropped": rows_dropped}
    run.update({name: int(value) for name, value in counts.items() if value is not None})
    if error_message is not None:
        run["error_message"] = error_message

    _write_ledger(ledger, path)
    return run


def list_runs(run_scope: Optional[str] = None, *, path: Optional[Path] = None) -> List[Run]:
    """Runs in start order, optionally restricted to one scope."""
    return [
        run for run in _read_ledger(path)["runs"] if run_scope is None or run.get("run_scope") == run_scope
    ]


def get_last_run(run_scope: Optional[str] = None, *, path: Optional[Path] = None) -> Optional[Run]:
    runs = list_runs(run_scope, path=path)
    return runs[-1] if runs else None


def reset_local_store(*, path: Optional[Path] = None) -> int:
    """Empty the ledger; returns how many runs were removed."""
    removed = len(_read_ledger(path)["runs"])
    _write_ledger({"runs": []}, path)
    return removed
