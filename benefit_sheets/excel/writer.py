from __future__ import annotations

import re
from collections.abc import Sequence
from pathlib import Path

import pandas as pd
from openpyxl.styles import Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from ..models.config_models import HeaderStyleConfig
from ..models.record import Grid

"""Tabular writer: Grids -> .xlsx workbook (one sheet per grid) or CSV files.

Header row styling (tan fill, bold font, thin borders) and column auto-sizing
are presentation only; the cells themselves are always written as text.
"""

__all__ = [
    "GridWriteError",
    "MAX_SHEET_TITLE",
    "sheet_titles",
    "write_workbook",
    "write_csv_grids",
]

MAX_SHEET_TITLE = 31
_INVALID_TITLE = re.compile(r"[\\/*?:\[\]]")
_INVALID_FILENAME = re.compile(r'[\\/*?:"<>|]')
_MAX_COLUMN_WIDTH = 80


class GridWriteError(Exception):
    """Raised when grids cannot be written to the destination."""


def sheet_titles(grids: Sequence[Grid]) -> list[str]:
    """Excel-safe, unique sheet titles in grid order.

    Invalid characters become "_", titles are truncated to 31 chars and
    collisions get a numeric suffix.
    """
    titles: list[str] = []
    used: set[str] = set()
    for grid in grids:
        base = _INVALID_TITLE.sub("_", grid.name)[:MAX_SHEET_TITLE] or "Sheet"
        title = base
        n = 1
        while title.lower() in used:
            n += 1
            suffix = f"_{n}"
            title = base[: MAX_SHEET_TITLE - len(suffix)] + suffix
        used.add(title.lower())
        titles.append(title)
    return titles


def _style_header(ws: Worksheet, width: int, style: HeaderStyleConfig) -> None:
    if not style.enabled:
        return
    fill = PatternFill(start_color=style.fill_color, end_color=style.fill_color, fill_type="solid")
    thin = Side(style="thin")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    for col in range(1, width + 1):
        cell = ws.cell(row=1, column=col)
        cell.fill = fill
        if style.bold:
            cell.font = Font(bold=True)
        if style.borders:
            cell.border = border


def _auto_size(ws: Worksheet, grid: Grid) -> None:
    for col, values in enumerate(zip(*grid.to_matrix()), start=1):
        longest = max((len(v) for v in values), default=0)
        ws.column_dimensions[get_column_letter(col)].width = min(longest + 2, _MAX_COLUMN_WIDTH)


def write_workbook(
    grids: Sequence[Grid],
    path: Path,
    *,
    header_style: HeaderStyleConfig | None = None,
    auto_size_columns: bool = True,
) -> Path:
    """Write grids to ``path`` as one sheet each, in order. Needs at least one grid."""
    if not grids:
        raise GridWriteError(f"no grids to write to {path.name}")
    style = header_style or HeaderStyleConfig()
    try:
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            for grid, title in zip(grids, sheet_titles(grids), strict=True):
                df = pd.DataFrame(grid.to_matrix(), dtype=object)
                df.to_excel(writer, sheet_name=title, header=False, index=False)
                ws = writer.sheets[title]
                _style_header(ws, len(grid.header), style)
                if auto_size_columns:
                    _auto_size(ws, grid)
    except Exception as e:
        raise GridWriteError(f"cannot write workbook {path.name}: {e}") from e
    return path


def write_csv_grids(grids: Sequence[Grid], directory: Path) -> list[Path]:
    """Write each grid to ``directory/<grid name>.csv``; returns the paths in grid order."""
    if not grids:
        raise GridWriteError(f"no grids to write to {directory}")
    paths: list[Path] = []
    try:
        directory.mkdir(parents=True, exist_ok=True)
        for grid in grids:
            target = directory / f"{_INVALID_FILENAME.sub('_', grid.name)}.csv"
            pd.DataFrame(grid.to_matrix(), dtype=object).to_csv(
                target, header=False, index=False, encoding="utf-8"
            )
            paths.append(target)
    except Exception as e:
        raise GridWriteError(f"cannot write csv files to {directory}: {e}") from e
    return paths
