from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

from statement_enricher.cli import main as cli_main
from statement_enricher.services.extraction_client import ExtractionError

REQUIRED_KEYS = {"timestamp", "file", "row", "error_type", "message"}


def test_error_log_lines_match_schema(
    temp_workdir: Path, write_config: Path, write_csv: Path, fake_client_factory
):
    client = fake_client_factory(
        {
            "John from Acme Corp": ExtractionError("response has no candidates"),
            "Payment Smith, J.": TimeoutError(),
        }
    )
    with patch("statement_enricher.cli.__main__.build_client", return_value=client):
        code = cli_main([str(write_csv)])

    assert code == 2
    logs = list((temp_workdir / "logs").glob("errors-*.log"))
    assert len(logs) == 1
    records = [json.loads(line) for line in logs[0].read_text(encoding="utf-8").splitlines()]
    assert len(records) == 2
    for rec in records:
        assert set(rec.keys()) == REQUIRED_KEYS
        assert rec["file"] == "statement.csv"
        assert rec["timestamp"].endswith("Z")
        assert isinstance(rec["row"], int)

    # row numbers count parsed (non-blank) rows: two noise rows, header, then data
    assert [(r["row"], r["error_type"]) for r in records] == [
        (4, "EXTRACTION_BAD_RESPONSE"),
        (6, "EXTRACTION_TIMEOUT"),
    ]


def test_no_error_log_on_clean_run(temp_workdir: Path, write_config: Path, write_csv: Path):
    assert cli_main([str(write_csv), "--offline"]) == 0
    assert not (temp_workdir / "logs").exists()
