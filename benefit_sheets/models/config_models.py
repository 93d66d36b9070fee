from __future__ import annotations

from dataclasses import dataclass, field

from .document import PLACEHOLDER

"""Config dataclasses for the benefit request <-> spreadsheet converter.

Loaded by benefit_sheets.config.loader; kept separate so services can depend on
the typed model without pulling in YAML / jsonschema.
"""

__all__ = [
    "HeaderStyleConfig",
    "ConvertConfig",
    "OUTPUT_FORMATS",
]

OUTPUT_FORMATS = ("xlsx", "csv")


@dataclass(frozen=True)
class HeaderStyleConfig:
    """Presentation of the header row in written workbooks (tan / bold / thin borders)."""
    enabled: bool = True
    fill_color: str = "D2B48C"  # TAN
    bold: bool = True
    borders: bool = True


@dataclass(frozen=True)
class ConvertConfig:
    """Root configuration object for batch conversion."""
    json_input_directory: str = "./inputJson"  # JSON -> Excel 入力
    excel_output_directory: str = "./outputExcel"
    excel_input_directory: str = "./inputExcel"  # Excel/CSV -> JSON 入力
    json_output_directory: str = "./outputJson"
    placeholder: str = PLACEHOLDER  # stateless mode で transactionID / clientCode に使う値
    output_format: str = "xlsx"
    header_style: HeaderStyleConfig = field(default_factory=HeaderStyleConfig)
    auto_size_columns: bool = True
