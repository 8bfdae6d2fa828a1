from __future__ import annotations

import csv
import io
from collections.abc import Sequence
from dataclasses import dataclass, field

import pandas as pd

"""Statement CSV reader.

Raw bytes are tokenized into rows, the real header row is located somewhere
below the leading noise (bank name, account lines, blank lines), duplicate
columns are dropped and every row is projected onto the surviving columns.
The normalized header is then checked against the expected schema before
anything downstream touches the data.

Columns are addressed by position after normalization, so normalization has
to run before validation and before enrichment.
"""

__all__ = [
    "CsvStructureError",
    "HeaderNotFoundError",
    "MalformedInputError",
    "MissingColumnError",
    "SchemaMismatchError",
    "SchemaTooShortError",
    "TableData",
    "column_index",
    "compute_projection",
    "locate_header",
    "normalize_table",
    "parse_csv_bytes",
    "read_statement",
    "validate_header",
]

RawRow = tuple[str, ...]


class MalformedInputError(Exception):
    """Raised when the uploaded bytes cannot be read as CSV text."""


class CsvStructureError(Exception):
    """Base class for header / schema problems. Terminal for the upload."""


class HeaderNotFoundError(CsvStructureError):
    """Raised when no row matches the expected header fingerprint."""


class SchemaTooShortError(CsvStructureError):
    """Raised when the normalized header has fewer columns than required."""

    def __init__(self, expected_count: int, actual_count: int) -> None:
        super().__init__(f"Expected {expected_count} columns, but found {actual_count}")
        self.expected_count = expected_count
        self.actual_count = actual_count


class SchemaMismatchError(CsvStructureError):
    """Raised at the first header position that differs from the schema."""

    def __init__(self, position: int, expected: str, actual: str) -> None:
        super().__init__(
            f"Header mismatch at position {position}: Expected '{expected}', but found '{actual}'"
        )
        self.position = position  # 1-based
        self.expected = expected
        self.actual = actual


class MissingColumnError(CsvStructureError):
    """Raised when a named column is absent from the normalized header."""


@dataclass
class TableData:
    rows: list[RawRow]  # header and data rows, all of width len(projection)
    header_index: int
    projection: list[int] = field(default_factory=list)  # source column per output column

    @property
    def header(self) -> RawRow:
        return self.rows[self.header_index]

    @property
    def data_rows(self) -> list[RawRow]:
        return self.rows[self.header_index + 1:]


def _is_blank_record(fields: Sequence[str]) -> bool:
    return not fields or (len(fields) == 1 and not fields[0])


def parse_csv_bytes(data: bytes) -> list[RawRow]:
    """Tokenize comma separated bytes into trimmed rows.

    Blank lines are skipped; rows may have different widths. A leading
    UTF-8 BOM is ignored.

    Raises:
        MalformedInputError: bytes are not UTF-8 text or not tokenizable
    """
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise MalformedInputError(f"file is not valid UTF-8 text: {e}") from e
    if "\x00" in text:
        raise MalformedInputError("file contains NUL bytes; not a text file")

    # csv caps single fields at 128 KiB by default; one cell may span the upload
    if len(text) > csv.field_size_limit():
        csv.field_size_limit(len(text))

    rows: list[RawRow] = []
    try:
        reader = csv.reader(
            io.StringIO(text, newline=""),
            delimiter=",",
            quotechar='"',
            skipinitialspace=True,
        )
        for record in reader:
            fields = tuple(f.strip() for f in record)
            if _is_blank_record(fields):
                continue
            rows.append(fields)
    except csv.Error as e:
        raise MalformedInputError(f"unreadable CSV content: {e}") from e
    return rows


def _fold(name: str | None) -> str:
    return (name or "").strip().casefold()


def locate_header(
    rows: Sequence[RawRow],
    expected: Sequence[str],
    fingerprint_width: int = 3,
) -> int:
    """Return the index of the first row that looks like the expected header.

    Only the first ``fingerprint_width`` names are compared (ignoring case),
    so trailing schema drift does not hide the header. The row must still
    be at least as wide as the full schema.

    Raises:
        HeaderNotFoundError: no row matches
    """
    width = min(fingerprint_width, len(expected))
    prefix = [_fold(name) for name in expected[:width]]
    for idx, row in enumerate(rows):
        if len(row) < len(expected):
            continue
        if [_fold(cell) for cell in row[:width]] == prefix:
            return idx
    raise HeaderNotFoundError("Expected header row was not found in CSV file")


def compute_projection(header: Sequence[str]) -> list[int]:
    """Indices of the first occurrence of each column name (case-insensitive)."""
    seen: set[str] = set()
    projection: list[int] = []
    for idx, name in enumerate(header):
        key = _fold(name)
        if key in seen:
            continue
        seen.add(key)
        projection.append(idx)
    return projection


def normalize_table(
    rows: Sequence[RawRow],
    header_index: int,
    projection: list[int] | None = None,
) -> TableData:
    """Project every row (header included) onto the deduplicated columns.

    Cells missing from short rows become empty strings, so every resulting
    row has exactly ``len(projection)`` fields.
    """
    if projection is None:
        projection = compute_projection(rows[header_index])
    frame = pd.DataFrame(list(rows), dtype=object)
    projected = frame.reindex(columns=projection).fillna("")
    normalized = [
        tuple(str(v) for v in record)
        for record in projected.itertuples(index=False, name=None)
    ]
    return TableData(rows=normalized, header_index=header_index, projection=list(projection))


def validate_header(header: Sequence[str], expected: Sequence[str]) -> None:
    """Check the leading header fields against the expected schema.

    Raises:
        SchemaTooShortError: header narrower than the schema
        SchemaMismatchError: first position whose name differs (1-based)
    """
    if len(header) < len(expected):
        raise SchemaTooShortError(len(expected), len(header))
    for i, expected_name in enumerate(expected):
        actual = (header[i] or "").strip()
        if _fold(actual) != _fold(expected_name):
            raise SchemaMismatchError(i + 1, expected_name, actual)


def column_index(header: Sequence[str], name: str) -> int:
    """Position of ``name`` in the normalized header (case-insensitive)."""
    key = _fold(name)
    for idx, cell in enumerate(header):
        if _fold(cell) == key:
            return idx
    raise MissingColumnError(f"column '{name}' not found in header")


def read_statement(
    data: bytes,
    expected: Sequence[str],
    fingerprint_width: int = 3,
) -> TableData:
    """Parse, locate, normalize and validate in one call."""
    rows = parse_csv_bytes(data)
    header_index = locate_header(rows, expected, fingerprint_width)
    table = normalize_table(rows, header_index)
    validate_header(table.header, expected)
    return table
