"""In-memory holder for the most recently cleaned dataset."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional, Tuple

from .cleaning import RawRow, clean_with_report
from .models import CleanedProject, LoadReport


class DatasetNotLoadedError(RuntimeError):
    """Raised when reports are requested before any dataset has been loaded."""

    def __init__(self) -> None:
        super().__init__("No data loaded. Please load the CSV file first (option 1).")


@dataclass(frozen=True)
class LoadedDataset:
    projects: Tuple[CleanedProject, ...]
    report: LoadReport
    source: Optional[str] = None
    loaded_at: Optional[str] = None


@dataclass
class DatasetState:
    """
    Set on load, read on generate.

    ``current`` is swapped for a new immutable :class:`LoadedDataset` on every
    successful load; a failed load leaves the previous dataset in place.
    """

    current: Optional[LoadedDataset] = None

    @property
    def loaded(self) -> bool:
        return self.current is not None

    def load(self, raw_rows: Iterable[RawRow], source: Optional[str] = None) -> LoadedDataset:
        projects, report = clean_with_report(raw_rows)
        dataset = LoadedDataset(
            projects=tuple(projects),
            report=report,
            source=source,
            loaded_at=datetime.now().astimezone().isoformat(timespec="seconds"),
        )
        self.current = dataset
        return dataset

    def require(self) -> LoadedDataset:
        if self.current is None:
            raise DatasetNotLoadedError()
        return self.current


__all__ = ["DatasetNotLoadedError", "DatasetState", "LoadedDataset"]
