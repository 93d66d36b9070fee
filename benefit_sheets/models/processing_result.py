from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

"""Batch result models.

FileStat carries per-file metrics; ProcessingResult aggregates a whole batch
and feeds the SUMMARY line.
"""


@dataclass(frozen=True)
class FileStat:
    """Per-file processing statistics."""
    file_name: str
    status: str  # success/failed
    sheets: int
    elapsed_seconds: float
    output: str | None = None


@dataclass(frozen=True)
class ProcessingResult:
    """Aggregated results of one batch run."""
    success_files: int
    failed_files: int
    total_sheets: int
    skipped_entities: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    file_stats: list[FileStat] | None = None

    @property
    def total_files(self) -> int:
        return self.success_files + self.failed_files
