from __future__ import annotations

import logging
import time

from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import EnricherConfig
from ..models.processing_result import ProcessingResult
from ..models.row_data import RowData
from ..models.upload_file import UploadFile
from ..tabular.reader import (
    column_index,
    locate_header,
    normalize_table,
    parse_csv_bytes,
    validate_header,
)
from ..tabular.writer import OutputWriteError, save_output, serialize_rows
from .enrichment import build_worklist, enrich_descriptions
from .extraction_client import ExtractionClient
from .progress import ProgressTracker
from .upload_validation import InputValidationError, ProcessingError, ensure_processable

logger = logging.getLogger(__name__)

"""Pipeline orchestration for a single upload.

Stages: input check -> parse -> locate header -> normalize -> validate ->
enrich -> serialize -> save.

Error propagation:
- InputValidationError / MalformedInputError / CsvStructureError raised
  before enrichment abort the upload with no extraction call made
- extraction failures are row-scoped and only counted in the result
- OutputWriteError aborts the upload; no result is returned
"""

__all__ = [
    "InputValidationError",
    "OutputWriteError",
    "ProcessingError",
    "process_upload",
]


async def process_upload(
    upload: UploadFile,
    client: ExtractionClient,
    config: EnricherConfig | None = None,
    *,
    error_log: ErrorLogBuffer | None = None,
) -> ProcessingResult:
    """Process one uploaded statement end to end.

    Args:
        upload: Named byte stream (size ceiling already enforced by caller)
        client: Extraction collaborator, called once per qualifying row
        config: Schema / output / extraction settings (defaults when None)
        error_log: Buffer receiving per-row failure records; flushed at the end

    Returns:
        ProcessingResult describing the written file

    Raises:
        InputValidationError: empty upload or non-.csv name
        MalformedInputError: bytes are not CSV text
        CsvStructureError: header not found or schema mismatch
        OutputWriteError: output could not be persisted
    """
    cfg = config or EnricherConfig()
    errors = error_log if error_log is not None else ErrorLogBuffer()
    started = time.perf_counter()

    ensure_processable(upload)

    raw_rows = parse_csv_bytes(upload.content)
    header_index = locate_header(raw_rows, cfg.expected_headers, cfg.header_fingerprint_width)
    table = normalize_table(raw_rows, header_index)
    logger.debug(
        f"file={upload.name} rows={len(raw_rows)} header_index={header_index} "
        f"projection={table.projection}"
    )
    validate_header(table.header, cfg.expected_headers)
    description_col = column_index(table.header, cfg.description_column)

    first_data_row = header_index + 2  # 1-based row number of the first data row
    arena = [
        RowData(row_number=first_data_row + i, values=values)
        for i, values in enumerate(table.data_rows)
    ]

    extraction = cfg.extraction
    with ProgressTracker(len(build_worklist(arena, description_col))) as progress:
        batch = await enrich_descriptions(
            arena,
            description_col,
            client,
            instruction=extraction.instruction,
            file_name=upload.name,
            event_sink=errors,
            timeout_seconds=extraction.timeout_seconds,
            no_match_sentinel=extraction.no_match_sentinel,
            progress=progress,
        )

    content = serialize_rows(table.header, batch.rows, description_col)
    output_path = await save_output(
        content, upload.name, cfg.output_directory, suffix=cfg.output_suffix
    )

    error_log_path = None
    try:
        error_log_path = errors.flush()
    except OSError as e:
        logger.warning(f"error log flush failed: {e}")

    elapsed = time.perf_counter() - started
    logger.info(
        f"file={upload.name} rows={len(batch.units)} enriched={batch.enriched} "
        f"failed={batch.failures} output={output_path}"
    )
    return ProcessingResult(
        file_name=upload.name,
        rows_processed=len(batch.units),
        descriptions=tuple(batch.descriptions),
        content=content,
        output_path=output_path,
        enriched_rows=batch.enriched,
        failed_rows=batch.failures,
        elapsed_seconds=elapsed,
        error_log_path=error_log_path,
    )
