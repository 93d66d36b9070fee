from __future__ import annotations

import json
from pathlib import Path

from benefit_sheets.cli import main as cli_main

"""Written JSON: 4-space indent, fixed key order, keyValue encoding."""


def test_output_layout(temp_workdir: Path):
    (temp_workdir / "inputExcel" / "Plan.csv").write_text("MobInd,Tier\nN,2\n", encoding="utf-8")
    assert cli_main(["to-json"]) == 0
    text = (temp_workdir / "outputJson" / "Plan.json").read_text(encoding="utf-8")
    assert text.startswith('{\n    "benefitRequest": {\n')
    request = json.loads(text)["benefitRequest"]
    assert list(request) == ["transactionID", "clientCode", "data", "dataSet"]
    assert list(request["dataSet"]) == ["CVS"]
    assert request["dataSet"]["CVS"]["Plan"] == {
        "keyValue": [{"attribute": "MobInd", "value": "N"}, {"attribute": "Tier", "value": "2"}]
    }
