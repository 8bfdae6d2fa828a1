from __future__ import annotations

from dataclasses import dataclass, replace

"""RowData model: one normalized data row in the row arena."""

__all__ = [
    "RowData",
]


@dataclass(frozen=True)
class RowData:
    """A single data row after column normalization.

    Rows are never mutated in place. Enrichment builds a replacement with
    ``with_value`` and stores it at the same arena index.
    """
    row_number: int  # 1-based position among parsed (non-blank) rows
    values: tuple[str, ...]  # projected fields, uniform width across the table

    def value(self, column: int) -> str:
        """Return the field at ``column`` or an empty string when absent."""
        if column < len(self.values):
            return self.values[column]
        return ""

    def with_value(self, column: int, text: str) -> RowData:
        values = list(self.values)
        values[column] = text
        return replace(self, values=tuple(values))
