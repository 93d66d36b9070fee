from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path

"""ConvertedFile domain model and FileStatus enum.

ConvertedFile is the outcome of converting a single input artifact: the files
it produced on success, or the error message on failure.
"""


class FileStatus(Enum):
    """Outcome of one file conversion."""
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class ConvertedFile:
    """Processing result for a single input file and the artifact derived from it."""
    path: Path                           # Input file
    name: str
    status: FileStatus
    output_paths: tuple[Path, ...] = ()  # Written artifacts (one workbook, N csv, or one json)
    start_time: datetime | None = None
    end_time: datetime | None = None
    sheets: int = 0                      # Grids written (forward) or read (reverse)
    skipped_entities: int = 0            # Empty entities / header-only grids omitted
    error: str | None = None
