from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import ConfigError, default_config, load_config
from ..excel.reader import TABULAR_SUFFIXES, GridReadError, read_grids
from ..logging.init import log_summary, set_level, setup_logging
from ..models.config_models import OUTPUT_FORMATS, ConvertConfig
from ..services.orchestrator import (
    ProcessingError,
    convert_json_files,
    convert_tabular_files,
    roundtrip_json_files,
    scan_files,
)
from ..services.summary import render_summary_line

"""CLI entrypoint.

    benefit-sheets to-excel   JSON documents -> workbooks
    benefit-sheets to-json    workbooks / CSV -> JSON documents (placeholders)
    benefit-sheets roundtrip  JSON -> workbook -> JSON (carried fields kept)
    benefit-sheets inspect    print sheet headers & first rows, then exit

Exit codes: 0 all files converted (or nothing to do), 2 some file failed,
1 fatal (config / input location).
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2

DEFAULT_CONFIG = Path("config/convert.yml")


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env so BENEFIT_SHEETS_* values take precedence over the config file."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="benefit-sheets",
        description="Convert benefit request JSON documents to spreadsheets and back",
    )
    p.add_argument("command", choices=["to-excel", "to-json", "roundtrip", "inspect"])
    p.add_argument("--config", type=Path, default=None, help=f"YAML config (default: {DEFAULT_CONFIG})")
    p.add_argument("--input-dir", type=Path, default=None, help="Override the input directory")
    p.add_argument("--output-dir", type=Path, default=None, help="Override the output directory")
    p.add_argument("--format", choices=OUTPUT_FORMATS, default=None, help="Tabular output format")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _resolve_config(args: argparse.Namespace) -> ConvertConfig:
    if args.config is not None:
        cfg = load_config(args.config)
    elif DEFAULT_CONFIG.exists():
        cfg = load_config(DEFAULT_CONFIG)
    else:
        cfg = default_config()

    if args.format is not None:
        cfg = replace(cfg, output_format=args.format)
    # --input-dir / --output-dir はコマンドごとに対象キーが異なる
    if args.input_dir is not None:
        key = "excel_input_directory" if args.command in ("to-json", "inspect") else "json_input_directory"
        cfg = replace(cfg, **{key: str(args.input_dir)})
    if args.output_dir is not None:
        key = "excel_output_directory" if args.command == "to-excel" else "json_output_directory"
        cfg = replace(cfg, **{key: str(args.output_dir)})
    return cfg


def _inspect_data(cfg: ConvertConfig, sample_rows: int = 3) -> int:
    directory = Path(cfg.excel_input_directory)
    if not directory.exists():
        print(f"inspect: directory not found: {directory}")
        return EXIT_FATAL
    files = scan_files(directory, TABULAR_SUFFIXES)
    if not files:
        print("inspect: no .xlsx/.csv files")
        return EXIT_SUCCESS_ALL
    for f in files:
        print(f"FILE: {f.name}")
        try:
            grids = read_grids(f)
        except GridReadError as e:
            print(f"  read_error: {e}")
            continue
        for grid in grids:
            shape = "singleton" if grid.row_count == 1 else "collection"
            print(f"  SHEET: {grid.name} cols={list(grid.header)} rows={grid.row_count} shape={shape}")
            for r in range(min(sample_rows, grid.row_count)):
                print(f"    {[grid.cell(r, c) for c in range(len(grid.header))]}")
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None のときのみシステム引数を読む ([] はそのまま使う)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    if args.debug:
        set_level(logging.DEBUG)
        logger.debug("debug mode enabled")

    try:
        cfg = _resolve_config(args)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.command == "inspect":
        try:
            return _inspect_data(cfg)
        except ProcessingError as e:
            logger.error(f"inspect: {e}")
            return EXIT_FATAL

    runners = {
        "to-excel": convert_json_files,
        "to-json": convert_tabular_files,
        "roundtrip": roundtrip_json_files,
    }
    try:
        result = runners[args.command](cfg)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    log_summary(render_summary_line(result).removeprefix("SUMMARY "))

    if result.failed_files > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
