from __future__ import annotations

import asyncio
from collections.abc import Iterable, Sequence
from datetime import datetime
from pathlib import Path, PureWindowsPath

from statement_enricher.models.row_data import RowData

"""Statement CSV writer.

Serializes the normalized header plus retained data rows and persists the
result next to the process as ``uploads/<base>_processed_<stamp><ext>``.
"""

__all__ = [
    "OutputWriteError",
    "build_output_name",
    "escape_field",
    "save_output",
    "serialize_rows",
]

LINE_TERMINATOR = "\n"
OUTPUT_TIMESTAMP_FMT = "%Y%m%d_%H%M%S"
_NEEDS_QUOTING = (",", '"', "\n")


class OutputWriteError(Exception):
    """Raised when the output directory or file cannot be written."""


def escape_field(field: str) -> str:
    """Quote a field only when it contains a comma, double quote or newline."""
    if any(ch in field for ch in _NEEDS_QUOTING):
        return '"' + field.replace('"', '""') + '"'
    return field


def _format_line(fields: Iterable[str]) -> str:
    return ",".join(escape_field(f) for f in fields) + LINE_TERMINATOR


def serialize_rows(header: Sequence[str], rows: Iterable[RowData], column: int) -> str:
    """Render header and retained data rows as CSV text.

    Rows without a non-blank value at ``column`` (the description) are left
    out of the output.
    """
    lines = [_format_line(header)]
    for row in rows:
        if len(row.values) > column and row.values[column].strip():
            lines.append(_format_line(row.values))
    return "".join(lines)


def build_output_name(original_name: str, now: datetime, suffix: str = "_processed") -> str:
    """``statement.csv`` -> ``statement_processed_20240101_093000.csv``."""
    # Browsers on Windows may send a full client path as the file name
    name = PureWindowsPath(original_name).name
    stem, dot, ext = name.rpartition(".")
    if not dot:
        stem, ext = name, ""
    else:
        ext = "." + ext
    return f"{stem}{suffix}_{now.strftime(OUTPUT_TIMESTAMP_FMT)}{ext}"


async def save_output(
    content: str,
    original_name: str,
    directory: str = "uploads",
    *,
    suffix: str = "_processed",
    now: datetime | None = None,
) -> Path:
    """Write ``content`` under ``<cwd>/<directory>`` and return the full path.

    Two uploads with the same name in the same second overwrite each other.

    Raises:
        OutputWriteError: directory creation or file write failed
    """
    stamp = now or datetime.now()
    target_dir = Path.cwd() / directory
    path = target_dir / build_output_name(original_name, stamp, suffix)
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        await asyncio.to_thread(path.write_text, content, encoding="utf-8", newline="")
    except OSError as e:
        raise OutputWriteError(f"failed to write output file {path}: {e}") from e
    return path
