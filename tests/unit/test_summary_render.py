from __future__ import annotations

import re
from pathlib import Path

from statement_enricher.models.processing_result import ProcessingResult
from statement_enricher.services.summary import build_report, render_summary_line

SUMMARY_PATTERN = re.compile(
    r"^SUMMARY\s+file=(\S+)\s+rows=([0-9]+)\s+enriched=([0-9]+)\s+failed=([0-9]+)\s+"
    r"elapsed_sec=([0-9]+\.?[0-9]*)\s+output=(.+)$"
)


def _result(**overrides) -> ProcessingResult:
    values = dict(
        file_name="jan.csv",
        rows_processed=3,
        descriptions=("John Acme", "----", "Payment Smith, J."),
        content="Date,Description\n",
        output_path=Path("/srv/uploads/jan_processed_20240101_120000.csv"),
        enriched_rows=2,
        failed_rows=1,
        elapsed_seconds=2.0,
    )
    values.update(overrides)
    return ProcessingResult(**values)


def test_render_summary_line_matches_contract():
    line = render_summary_line(_result())
    match = SUMMARY_PATTERN.match(line)
    assert match, line
    assert match.group(1) == "jan.csv"
    assert match.group(2) == "3"
    assert match.group(3) == "2"
    assert match.group(4) == "1"
    assert match.group(5) == "2"
    assert match.group(6) == "/srv/uploads/jan_processed_20240101_120000.csv"


def test_render_summary_line_elapsed_formats():
    assert "elapsed_sec=0 " in render_summary_line(_result(elapsed_seconds=0.0))
    assert "elapsed_sec=1.25 " in render_summary_line(_result(elapsed_seconds=1.25))
    assert "elapsed_sec=0.004 " in render_summary_line(_result(elapsed_seconds=0.004))
    assert "e-" not in render_summary_line(_result(elapsed_seconds=0.0000123))


def test_build_report_fields():
    report = build_report(_result())
    assert report == {
        "FileName": "jan.csv",
        "RowsProcessed": 3,
        "DescriptionCount": 3,
        "UpdatedDescriptions": ["John Acme", "----", "Payment Smith, J."],
        "SavedFilePath": "/srv/uploads/jan_processed_20240101_120000.csv",
        "Message": "File processed and saved successfully",
    }


def test_has_failures_flag():
    assert _result().has_failures is True
    assert _result(failed_rows=0).has_failures is False
