from __future__ import annotations

import csv
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any

from openpyxl import load_workbook

from ..models.record import Grid

"""Tabular reader: .xlsx workbooks and .csv files -> Grids.

Row 0 is the header, remaining rows are data. Header text is kept as written;
blank header names are dropped later by the Unflattener.

Every row that physically exists in the source becomes a data row, even when
all of its cells are empty, so records whose values are all "" survive a round
trip. Workbook rows are full width (an empty cell reads as ""). CSV rows keep
their actual field count, so cells missing from a short row stay absent.
"""

__all__ = [
    "GridReadError",
    "TABULAR_SUFFIXES",
    "rows_to_grid",
    "read_workbook",
    "read_csv_grid",
    "read_csv_grids",
    "read_grids",
]

TABULAR_SUFFIXES = (".xlsx", ".csv")


class GridReadError(Exception):
    """Raised when a workbook / CSV file cannot be read."""


def _text(val: Any) -> str:
    if val is None:
        return ""
    if isinstance(val, float) and val.is_integer():
        return str(int(val))
    return str(val)


def _trim_trailing_blank(cells: Sequence[str]) -> tuple[str, ...]:
    end = len(cells)
    while end > 0 and not cells[end - 1]:
        end -= 1
    return tuple(cells[:end])


def rows_to_grid(name: str, raw_rows: Sequence[Sequence[str | None]]) -> Grid:
    """Build a Grid from raw rows (first row = header, the rest = data rows)."""
    if not raw_rows:
        return Grid(name=name)
    header = _trim_trailing_blank(["" if c is None else c for c in raw_rows[0]])
    rows = tuple(tuple(r) for r in raw_rows[1:])
    if not header and not rows:
        return Grid(name=name)
    return Grid(name=name, header=header, rows=rows)


def _sheet_rows(ws: Any) -> list[tuple[str, ...]]:
    # max_row は物理的に存在する最終行 (値が空のセルも含む)
    values = [
        tuple(_text(v) for v in row)
        for row in ws.iter_rows(min_row=1, max_row=ws.max_row, max_col=ws.max_column, values_only=True)
    ]
    if all(not cell for row in values for cell in row):
        return []
    return values


def read_workbook(path: Path, target_sheets: Iterable[str] | None = None) -> list[Grid]:
    """Read every sheet (in workbook order) of an .xlsx file as a Grid.

    Parameters
    ----------
    path: workbook path
    target_sheets: restrict to these sheet names (None -> all sheets)
    """
    wanted = set(target_sheets) if target_sheets is not None else None
    grids: list[Grid] = []
    try:
        wb = load_workbook(path, data_only=True)
    except Exception as e:
        raise GridReadError(f"cannot read workbook {path.name}: {e}") from e
    try:
        for ws in wb.worksheets:
            if wanted is not None and ws.title not in wanted:
                continue
            grids.append(rows_to_grid(ws.title, _sheet_rows(ws)))
    except Exception as e:
        raise GridReadError(f"cannot read workbook {path.name}: {e}") from e
    finally:
        wb.close()
    return grids


def read_csv_grid(path: Path, name: str | None = None) -> Grid:
    """Read one CSV file as a Grid named after the file stem (or ``name``).

    Lines with no fields at all are skipped; a line holding empty fields
    (``,,`` or ``""``) is a data row.
    """
    grid_name = name or path.stem
    try:
        with path.open("r", newline="", encoding="utf-8-sig") as f:
            raw_rows = [row for row in csv.reader(f) if row]
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        raise GridReadError(f"cannot read csv {path.name}: {e}") from e
    return rows_to_grid(grid_name, raw_rows)


def read_csv_grids(paths: Iterable[Path]) -> list[Grid]:
    return [read_csv_grid(p) for p in paths]


def read_grids(path: Path) -> list[Grid]:
    """Dispatch on suffix: .xlsx -> all sheets, .csv -> one grid."""
    suffix = path.suffix.lower()
    if suffix == ".xlsx":
        return read_workbook(path)
    if suffix == ".csv":
        return [read_csv_grid(path)]
    raise GridReadError(f"unsupported tabular file type: {path.name}")
