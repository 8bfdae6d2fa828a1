from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

"""Processing result model.

The terminal record of one upload. Built once by the pipeline and handed
to the reporting layer (CLI summary / JSON report); never mutated.
"""


@dataclass(frozen=True)
class ProcessingResult:
    """Outcome of processing a single upload."""
    file_name: str  # original upload name
    rows_processed: int  # qualifying data rows (non-blank description)
    descriptions: tuple[str, ...]  # final description values, worklist order
    content: str  # full serialized CSV
    output_path: Path  # where content was written
    enriched_rows: int = 0  # rows whose description was replaced
    failed_rows: int = 0  # rows skipped after an extraction failure
    elapsed_seconds: float = 0.0
    error_log_path: Path | None = None  # set when failures were flushed

    @property
    def has_failures(self) -> bool:
        return self.failed_rows > 0
