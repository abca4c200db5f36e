from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional

import metadata as run_ledger


class MetadataAdapter(ABC):
    """
    Where pipeline steps record that they ran: scope, status, how many rows
    they kept and dropped, and why they failed.
    """

    @abstractmethod
    def start_run(self, run_scope: str) -> str:
        """Open a run for the given step and return its id."""

    @abstractmethod
    def end_run(
        self,
        run_id: str,
        status: str = "SUCCESS",
        *,
        rows_processed: Optional[int] = None,
        rows_dropped: Optional[int] = None,
        error_message: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Close the run with its final status and counts."""

    @abstractmethod
    def list_runs(self, run_scope: Optional[str] = None) -> List[Dict[str, Any]]:
        """Recorded runs, oldest first, optionally for one scope only."""


class LocalMetadataAdapter(MetadataAdapter):
    """
    Runs recorded in the local JSON ledger (see `metadata.store`).

    `ledger_file` defaults to $METADATA_LOCAL_FILE, then local_metadata.json.
    """

    def __init__(self, ledger_file: Optional[Path | str] = None) -> None:
        self.ledger_file = Path(ledger_file) if ledger_file is not None else None

    def start_run(self, run_scope: str) -> str:
        return run_ledger.start_run(run_scope, path=self.ledger_file)

    def end_run(
        self,
        run_id: str,
        status: str = "SUCCESS",
        *,
        rows_processed: Optional[int] = None,
        rows_dropped: Optional[int] = None,
        error_message: Optional[str] = None,
    ) -> Dict[str, Any]:
        return run_ledger.end_run(
            run_id,
            status,
            rows_processed=rows_processed,
            rows_dropped=rows_dropped,
            error_message=error_message,
            path=self.ledger_file,
        )

    def list_runs(self, run_scope: Optional[str] = None) -> List[Dict[str, Any]]:
        return run_ledger.list_runs(run_scope, path=self.ledger_file)


__all__ = ["MetadataAdapter", "LocalMetadataAdapter"]
