# Shared pytest fixtures
from __future__ import annotations

import json
import tempfile
from pathlib import Path

import pytest

from benefit_sheets.logging.init import reset_logging


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "inputJson").mkdir()
        (p / "inputExcel").mkdir()
        monkeypatch.chdir(p)
        for name in (
            "BENEFIT_SHEETS_JSON_INPUT_DIR",
            "BENEFIT_SHEETS_EXCEL_OUTPUT_DIR",
            "BENEFIT_SHEETS_EXCEL_INPUT_DIR",
            "BENEFIT_SHEETS_JSON_OUTPUT_DIR",
            "BENEFIT_SHEETS_PLACEHOLDER",
        ):
            monkeypatch.delenv(name, raising=False)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """json_input_directory: ./inputJson
excel_output_directory: ./outputExcel
excel_input_directory: ./inputExcel
json_output_directory: ./outputJson
placeholder: PLACEHOLDER
output_format: xlsx
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "convert.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def sample_document() -> dict:
    return {
        "benefitRequest": {
            "transactionID": "TX-1001",
            "clientCode": "ACME",
            "data": {"plan": "gold", "tiers": [1, 2]},
            "dataSet": {
                "CVS": {
                    "GeneralPlanDetails": {"keyValue": [{"attribute": "MobInd", "value": "N"}]},
                    "Copay": [
                        {"keyValue": [{"attribute": "Channel", "value": "RTL"}]},
                        {"keyValue": [{"attribute": "Channel", "value": "MAIL"}]},
                    ],
                }
            },
        }
    }


@pytest.fixture()
def write_json_input(temp_workdir: Path):
    def _write(name: str, doc: object) -> Path:
        path = temp_workdir / "inputJson" / name
        text = doc if isinstance(doc, str) else json.dumps(doc)
        path.write_text(text, encoding="utf-8")
        return path
    return _write
