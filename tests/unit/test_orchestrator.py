from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from benefit_sheets.excel.reader import read_workbook
from benefit_sheets.logging.error_log import ErrorLogBuffer
from benefit_sheets.models.config_models import ConvertConfig
from benefit_sheets.services.orchestrator import (
    ProcessingError,
    convert_json_files,
    convert_tabular_files,
    roundtrip_json_files,
    scan_files,
)


def test_scan_files_filters_and_sorts(temp_workdir: Path):
    d = temp_workdir / "inputJson"
    for name in ("b.json", "A.JSON", "notes.txt", "c.xlsx"):
        (d / name).write_text("{}", encoding="utf-8")
    (d / "sub.json").mkdir()
    assert [p.name for p in scan_files(d, (".json",))] == ["A.JSON", "b.json"]


def test_scan_files_errors(temp_workdir: Path):
    with pytest.raises(ProcessingError, match="Directory not found"):
        scan_files(temp_workdir / "missing", (".json",))
    f = temp_workdir / "file.json"
    f.write_text("{}", encoding="utf-8")
    with pytest.raises(ProcessingError, match="not a directory"):
        scan_files(f, (".json",))


def test_missing_input_directory_is_created(temp_workdir: Path):
    cfg = ConvertConfig(json_input_directory=str(temp_workdir / "newInput"))
    result = convert_json_files(cfg)
    assert (temp_workdir / "newInput").is_dir()
    assert result.total_files == 0
    assert result.file_stats == []


def test_no_matching_files_is_noop(temp_workdir: Path):
    result = convert_tabular_files(ConvertConfig())
    assert result.total_files == 0
    assert not (temp_workdir / "outputJson").exists()


def test_convert_json_files_writes_workbooks(temp_workdir: Path, write_json_input, sample_document):
    write_json_input("plan.json", sample_document)
    result = convert_json_files(ConvertConfig())
    assert result.success_files == 1
    assert result.failed_files == 0
    assert result.total_sheets == 2
    assert result.file_stats[0].output == "plan.xlsx"
    grids = read_workbook(temp_workdir / "outputExcel" / "plan.xlsx")
    assert [g.name for g in grids] == ["GeneralPlanDetails", "Copay"]


def test_convert_json_files_csv_format(temp_workdir: Path, write_json_input, sample_document):
    write_json_input("plan.json", sample_document)
    result = convert_json_files(ConvertConfig(output_format="csv"))
    assert result.success_files == 1
    out = temp_workdir / "outputExcel" / "plan"
    assert sorted(p.name for p in out.iterdir()) == ["Copay.csv", "GeneralPlanDetails.csv"]


def test_empty_entities_counted_as_skipped(temp_workdir: Path, write_json_input):
    write_json_input(
        "sparse.json",
        {
            "benefitRequest": {
                "dataSet": {
                    "CVS": {
                        "Empty": [],
                        "Blank": {"keyValue": []},
                        "Kept": {"keyValue": [{"attribute": "A", "value": "1"}]},
                    }
                }
            }
        },
    )
    result = convert_json_files(ConvertConfig())
    assert result.total_sheets == 1
    assert result.skipped_entities == 2


def test_document_without_entities_writes_nothing(temp_workdir: Path, write_json_input):
    write_json_input("none.json", {"benefitRequest": {"dataSet": {"CVS": {}}}})
    result = convert_json_files(ConvertConfig())
    assert result.success_files == 1
    assert result.file_stats[0].output is None
    assert list((temp_workdir / "outputExcel").iterdir()) == []


def test_bad_file_does_not_stop_batch(temp_workdir: Path, write_json_input, sample_document):
    write_json_input("a_bad.json", {"benefitRequest": {}})
    write_json_input("b_broken.json", "{oops")
    write_json_input("c_good.json", sample_document)
    error_log = ErrorLogBuffer(logs_dir=temp_workdir / "logs")
    result = convert_json_files(ConvertConfig(), error_log=error_log)
    assert result.success_files == 1
    assert result.failed_files == 2
    assert [s.status for s in result.file_stats] == ["failed", "failed", "success"]
    logs = list((temp_workdir / "logs").glob("errors-*.log"))
    assert len(logs) == 1
    entries = [json.loads(line) for line in logs[0].read_text(encoding="utf-8").splitlines()]
    assert [(e["file"], e["error_type"]) for e in entries] == [
        ("a_bad.json", "MALFORMED_DOCUMENT"),
        ("b_broken.json", "MALFORMED_DOCUMENT"),
    ]


def test_write_failure_is_isolated(temp_workdir: Path, write_json_input, sample_document):
    write_json_input("a.json", sample_document)
    write_json_input("b.json", sample_document)
    error_log = ErrorLogBuffer(logs_dir=temp_workdir / "logs")
    with patch(
        "benefit_sheets.services.orchestrator.write_workbook",
        side_effect=[OSError("disk full"), temp_workdir / "outputExcel" / "b.xlsx"],
    ):
        result = convert_json_files(ConvertConfig(), error_log=error_log)
    assert result.failed_files == 1
    assert result.success_files == 1
    assert result.file_stats[0].status == "failed"


def test_unexpected_error_is_isolated(temp_workdir: Path, write_json_input, sample_document):
    write_json_input("a.json", sample_document)
    error_log = ErrorLogBuffer(logs_dir=temp_workdir / "logs")
    with patch("benefit_sheets.services.orchestrator.disassemble", side_effect=RuntimeError("boom")):
        result = convert_json_files(ConvertConfig(), error_log=error_log)
    assert result.failed_files == 1
    line = next((temp_workdir / "logs").glob("errors-*.log")).read_text(encoding="utf-8")
    assert json.loads(line)["error_type"] == "UNEXPECTED_ERROR"


def test_convert_tabular_files_stateless(temp_workdir: Path):
    (temp_workdir / "inputExcel" / "TestCopay.csv").write_text(
        "Channel,Amount\nRTL,10\nMAIL,5\n", encoding="utf-8"
    )
    result = convert_tabular_files(ConvertConfig(placeholder="UNKNOWN"))
    assert result.success_files == 1
    doc = json.loads((temp_workdir / "outputJson" / "TestCopay.json").read_text(encoding="utf-8"))
    request = doc["benefitRequest"]
    assert request["transactionID"] == "UNKNOWN"
    assert request["clientCode"] == "UNKNOWN"
    assert request["data"] is None
    assert request["dataSet"]["CVS"]["TestCopay"] == [
        {"keyValue": [{"attribute": "Channel", "value": "RTL"}, {"attribute": "Amount", "value": "10"}]},
        {"keyValue": [{"attribute": "Channel", "value": "MAIL"}, {"attribute": "Amount", "value": "5"}]},
    ]


def test_unreadable_workbook_recorded(temp_workdir: Path):
    (temp_workdir / "inputExcel" / "broken.xlsx").write_bytes(b"not a workbook")
    error_log = ErrorLogBuffer(logs_dir=temp_workdir / "logs")
    result = convert_tabular_files(ConvertConfig(), error_log=error_log)
    assert result.failed_files == 1
    line = next((temp_workdir / "logs").glob("errors-*.log")).read_text(encoding="utf-8")
    assert json.loads(line)["error_type"] == "READ_ERROR"


def test_roundtrip_keeps_carried_fields(temp_workdir: Path, write_json_input, sample_document):
    write_json_input("plan.json", sample_document)
    result = roundtrip_json_files(ConvertConfig())
    assert result.success_files == 1
    assert (temp_workdir / "outputExcel" / "plan.xlsx").exists()
    rebuilt = json.loads((temp_workdir / "outputJson" / "plan.json").read_text(encoding="utf-8"))
    assert rebuilt == sample_document


def test_roundtrip_csv_format(temp_workdir: Path, write_json_input, sample_document):
    write_json_input("plan.json", sample_document)
    roundtrip_json_files(ConvertConfig(output_format="csv"))
    rebuilt = json.loads((temp_workdir / "outputJson" / "plan.json").read_text(encoding="utf-8"))
    assert rebuilt == sample_document


def test_error_log_goes_to_caller_buffer_outside_cwd(temp_workdir: Path, write_json_input, tmp_path: Path):
    write_json_input("bad.json", {"benefitRequest": {}})
    error_log = ErrorLogBuffer(logs_dir=tmp_path / "elsewhere")
    assert error_log.records == []
    result = convert_json_files(ConvertConfig(), error_log=error_log)
    assert result.failed_files == 1
    assert len(list((tmp_path / "elsewhere").glob("errors-*.log"))) == 1
    assert not (temp_workdir / "logs").exists()
