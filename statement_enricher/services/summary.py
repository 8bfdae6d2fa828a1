from __future__ import annotations

from typing import Any

from ..models.processing_result import ProcessingResult

"""Reporting for a processed upload.

Two renderings of the same ProcessingResult:
- ``render_summary_line``: the single SUMMARY line printed by the CLI
- ``build_report``: the response document handed back to API-style callers
"""

SUCCESS_MESSAGE = "File processed and saved successfully"


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # avoid scientific notation for very small numbers
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: ProcessingResult) -> str:
    """Render the SUMMARY line for a processed upload.

    Format:
    SUMMARY file={name} rows={rows} enriched={n} failed={n} elapsed_sec={s} output={path}

    Examples:
        >>> from pathlib import Path
        >>> r = ProcessingResult(
        ...     file_name="jan.csv", rows_processed=3, descriptions=("a", "b", "c"),
        ...     content="", output_path=Path("uploads/jan_processed_20240101_000000.csv"),
        ...     enriched_rows=2, failed_rows=1, elapsed_seconds=1.5,
        ... )
        >>> render_summary_line(r)
        'SUMMARY file=jan.csv rows=3 enriched=2 failed=1 elapsed_sec=1.5 output=uploads/jan_processed_20240101_000000.csv'
    """
    return (
        f"SUMMARY file={result.file_name} "
        f"rows={result.rows_processed} "
        f"enriched={result.enriched_rows} "
        f"failed={result.failed_rows} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)} "
        f"output={result.output_path}"
    )


def build_report(result: ProcessingResult) -> dict[str, Any]:
    """Response document for a successful upload."""
    return {
        "FileName": result.file_name,
        "RowsProcessed": result.rows_processed,
        "DescriptionCount": len(result.descriptions),
        "UpdatedDescriptions": list(result.descriptions),
        "SavedFilePath": str(result.output_path),
        "Message": SUCCESS_MESSAGE,
    }
