from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from pathlib import Path

from ..core.assembler import disassemble, reassemble
from ..document.codec import MalformedDocumentError, dump_document, load_document
from ..excel.reader import TABULAR_SUFFIXES, GridReadError, read_csv_grids, read_grids
from ..excel.writer import GridWriteError, write_csv_grids, write_workbook
from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import ConvertConfig
from ..models.converted_file import ConvertedFile, FileStatus
from ..models.error_record import FILE_LEVEL, ErrorRecord
from ..models.processing_result import FileStat, ProcessingResult
from ..models.record import Grid
from .progress import ProgressTracker

"""Batch orchestration.

Three batch modes, each converting every matching file of an input directory
(non-recursive) into an artifact of the same stem in the output directory:

* ``convert_json_files``    JSON -> workbook (or a directory of CSV files)
* ``convert_tabular_files`` .xlsx / .csv -> JSON, stateless (placeholders)
* ``roundtrip_json_files``  JSON -> workbook -> JSON, carried fields threaded
  from the forward pass of the same file

Files are independent: a failure is logged, recorded in the error log and the
batch moves on to the next file.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "ProcessingError",
    "scan_files",
    "convert_json_file",
    "convert_tabular_file",
    "roundtrip_json_file",
    "convert_json_files",
    "convert_tabular_files",
    "roundtrip_json_files",
]

JSON_SUFFIXES = (".json",)

ConvertOne = Callable[[Path], ConvertedFile]


class ProcessingError(Exception):
    """Fatal batch error (input location unusable)."""


def scan_files(directory: Path, suffixes: Sequence[str]) -> list[Path]:
    """Files in ``directory`` whose suffix matches (case-insensitive), sorted by name.

    Raises:
        ProcessingError: if the path is not a directory or cannot be listed
    """
    if not directory.exists():
        raise ProcessingError(f"Directory not found: {directory}")
    if not directory.is_dir():
        raise ProcessingError(f"Path is not a directory: {directory}")
    wanted = tuple(s.lower() for s in suffixes)
    try:
        return sorted(
            (p for p in directory.iterdir() if p.is_file() and p.suffix.lower() in wanted),
            key=lambda p: p.name,
        )
    except OSError as e:
        raise ProcessingError(f"Error reading directory {directory}: {e}") from e


def _write_grids(grids: list[Grid], stem: str, output_dir: Path, config: ConvertConfig) -> tuple[Path, ...]:
    if config.output_format == "csv":
        return tuple(write_csv_grids(grids, output_dir / stem))
    path = write_workbook(
        grids,
        output_dir / f"{stem}.xlsx",
        header_style=config.header_style,
        auto_size_columns=config.auto_size_columns,
    )
    return (path,)


def _read_written(paths: tuple[Path, ...], config: ConvertConfig) -> list[Grid]:
    if config.output_format == "csv":
        # CSV ファイル名 (stem) = entity 名
        return read_csv_grids(paths)
    return read_grids(paths[0])


def convert_json_file(path: Path, output_dir: Path, config: ConvertConfig) -> ConvertedFile:
    """JSON document -> workbook (or CSV set). Entities with no rows produce no sheet."""
    start = datetime.now(UTC)
    document = load_document(path)
    _, grids = disassemble(document)
    skipped = len(document.entities) - len(grids)
    outputs: tuple[Path, ...] = ()
    if grids:
        outputs = _write_grids(grids, path.stem, output_dir, config)
        logger.info("Converted %s -> %s (%d sheets)", path.name, ", ".join(p.name for p in outputs), len(grids))
    else:
        logger.warning("%s has no entities with data; nothing written", path.name)
    return ConvertedFile(
        path=path,
        name=path.name,
        output_paths=outputs,
        start_time=start,
        end_time=datetime.now(UTC),
        status=FileStatus.SUCCESS,
        sheets=len(grids),
        skipped_entities=skipped,
    )


def convert_tabular_file(path: Path, output_dir: Path, config: ConvertConfig) -> ConvertedFile:
    """Workbook / CSV -> JSON document with placeholder carried fields."""
    start = datetime.now(UTC)
    grids = read_grids(path)
    document = reassemble(None, grids, placeholder=config.placeholder)
    target = dump_document(document, output_dir / f"{path.stem}.json")
    logger.info("Converted %s -> %s (%d entities)", path.name, target.name, len(document.entities))
    return ConvertedFile(
        path=path,
        name=path.name,
        output_paths=(target,),
        start_time=start,
        end_time=datetime.now(UTC),
        status=FileStatus.SUCCESS,
        sheets=len(grids),
        skipped_entities=len(grids) - len(document.entities),
    )


def roundtrip_json_file(
    path: Path, tabular_dir: Path, output_dir: Path, config: ConvertConfig
) -> ConvertedFile:
    """JSON -> tabular -> JSON, re-wrapping with the carried fields of the forward pass."""
    start = datetime.now(UTC)
    document = load_document(path)
    carried, grids = disassemble(document)
    tabular: tuple[Path, ...] = ()
    read_back: list[Grid] = []
    if grids:
        tabular = _write_grids(grids, path.stem, tabular_dir, config)
        read_back = _read_written(tabular, config)
    else:
        logger.warning("%s has no entities with data; tabular stage skipped", path.name)
    rebuilt = reassemble(carried, read_back, placeholder=config.placeholder)
    target = dump_document(rebuilt, output_dir / f"{path.stem}.json")
    logger.info("Round-tripped %s -> %s", path.name, target.name)
    return ConvertedFile(
        path=path,
        name=path.name,
        output_paths=tabular + (target,),
        start_time=start,
        end_time=datetime.now(UTC),
        status=FileStatus.SUCCESS,
        sheets=len(grids),
        skipped_entities=len(document.entities) - len(grids),
    )


def _empty_result(start_time: datetime) -> ProcessingResult:
    end_time = datetime.now(UTC)
    return ProcessingResult(
        success_files=0,
        failed_files=0,
        total_sheets=0,
        skipped_entities=0,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        file_stats=[],
    )


def _prepare_input(directory: Path, suffixes: Sequence[str]) -> list[Path]:
    """Create a missing input directory (and return no files) or scan it."""
    if not directory.exists():
        directory.mkdir(parents=True, exist_ok=True)
        logger.info("Created input directory: %s", directory)
        logger.info("Place your %s files there, then run again.", "/".join(suffixes))
        return []
    files = scan_files(directory, suffixes)
    if not files:
        logger.info("No %s files found in %s", "/".join(suffixes), directory)
    return files


def _failed(path: Path, start: datetime, error: str) -> ConvertedFile:
    return ConvertedFile(
        path=path,
        name=path.name,
        start_time=start,
        end_time=datetime.now(UTC),
        status=FileStatus.FAILED,
        error=error,
    )


def _convert_isolated(path: Path, convert_one: ConvertOne, error_log: ErrorLogBuffer) -> ConvertedFile:
    start = datetime.now(UTC)
    try:
        return convert_one(path)
    except MalformedDocumentError as e:
        error_type = "MALFORMED_DOCUMENT"
        logger.warning("skipping %s: %s", path.name, e)
        message = str(e)
    except GridReadError as e:
        error_type = "READ_ERROR"
        logger.error("read failed %s: %s", path.name, e)
        message = str(e)
    except GridWriteError as e:
        error_type = "WRITE_ERROR"
        logger.error("write failed %s: %s", path.name, e)
        message = str(e)
    except OSError as e:
        error_type = "IO_ERROR"
        logger.error("I/O failed %s: %s", path.name, e)
        message = str(e)
    except Exception as e:
        error_type = "UNEXPECTED_ERROR"
        logger.exception("unexpected failure converting %s", path.name)
        message = f"{type(e).__name__}: {e}"
    error_log.append(
        ErrorRecord.create(file=path.name, sheet=FILE_LEVEL, row=-1, error_type=error_type, message=message)
    )
    return _failed(path, start, message)


def _run_batch(
    files: list[Path],
    convert_one: ConvertOne,
    *,
    description: str,
    start_time: datetime,
    error_log: ErrorLogBuffer,
) -> ProcessingResult:
    file_stats: list[FileStat] = []
    success_count = 0
    failed_count = 0
    total_sheets = 0
    skipped_entities = 0

    with ProgressTracker(len(files), description=description) as progress:
        for path in files:
            progress.start_file(path)
            result = _convert_isolated(path, convert_one, error_log)
            ok = result.status == FileStatus.SUCCESS
            if ok:
                success_count += 1
                total_sheets += result.sheets
                skipped_entities += result.skipped_entities
            else:
                failed_count += 1
            progress.set_postfix(success=success_count, failed=failed_count)
            progress.finish_file()

            elapsed = 0.0
            if result.start_time is not None and result.end_time is not None:
                elapsed = (result.end_time - result.start_time).total_seconds()
            file_stats.append(
                FileStat(
                    file_name=path.name,
                    status=result.status.value,
                    sheets=result.sheets,
                    elapsed_seconds=elapsed,
                    output=result.output_paths[-1].name if result.output_paths else None,
                )
            )

    # error log は batch 毎に一度だけ flush
    try:
        log_path = error_log.flush()
    except OSError as e:
        logger.warning("could not write error log: %s", e)
    else:
        if log_path is not None:
            logger.info("error log written: %s", log_path)

    end_time = datetime.now(UTC)
    return ProcessingResult(
        success_files=success_count,
        failed_files=failed_count,
        total_sheets=total_sheets,
        skipped_entities=skipped_entities,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        file_stats=file_stats,
    )


def convert_json_files(config: ConvertConfig, error_log: ErrorLogBuffer | None = None) -> ProcessingResult:
    """Convert every .json file of ``json_input_directory`` into ``excel_output_directory``."""
    start_time = datetime.now(UTC)
    files = _prepare_input(Path(config.json_input_directory), JSON_SUFFIXES)
    if not files:
        return _empty_result(start_time)
    output_dir = Path(config.excel_output_directory)
    output_dir.mkdir(parents=True, exist_ok=True)
    return _run_batch(
        files,
        lambda p: convert_json_file(p, output_dir, config),
        description="JSON -> Excel",
        start_time=start_time,
        error_log=error_log if error_log is not None else ErrorLogBuffer(),
    )


def convert_tabular_files(config: ConvertConfig, error_log: ErrorLogBuffer | None = None) -> ProcessingResult:
    """Convert every .xlsx / .csv file of ``excel_input_directory`` into ``json_output_directory``."""
    start_time = datetime.now(UTC)
    files = _prepare_input(Path(config.excel_input_directory), TABULAR_SUFFIXES)
    if not files:
        return _empty_result(start_time)
    output_dir = Path(config.json_output_directory)
    output_dir.mkdir(parents=True, exist_ok=True)
    return _run_batch(
        files,
        lambda p: convert_tabular_file(p, output_dir, config),
        description="Excel -> JSON",
        start_time=start_time,
        error_log=error_log if error_log is not None else ErrorLogBuffer(),
    )


def roundtrip_json_files(config: ConvertConfig, error_log: ErrorLogBuffer | None = None) -> ProcessingResult:
    """JSON -> ``excel_output_directory`` -> ``json_output_directory`` for every .json input."""
    start_time = datetime.now(UTC)
    files = _prepare_input(Path(config.json_input_directory), JSON_SUFFIXES)
    if not files:
        return _empty_result(start_time)
    tabular_dir = Path(config.excel_output_directory)
    output_dir = Path(config.json_output_directory)
    tabular_dir.mkdir(parents=True, exist_ok=True)
    output_dir.mkdir(parents=True, exist_ok=True)
    return _run_batch(
        files,
        lambda p: roundtrip_json_file(p, tabular_dir, output_dir, config),
        description="Round trip",
        start_time=start_time,
        error_log=error_log if error_log is not None else ErrorLogBuffer(),
    )
