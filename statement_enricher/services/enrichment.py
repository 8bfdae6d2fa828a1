from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import replace
from typing import Protocol

import httpx

from ..models.enrichment import EnrichmentBatch, EnrichmentOutcome, EnrichmentUnit
from ..models.error_record import ErrorRecord
from ..models.row_data import RowData
from .extraction_client import ExtractionClient, ExtractionError
from .progress import ProgressTracker

"""Description enrichment driver.

Every qualifying row's description is sent to the extraction service, one
call at a time and in row order. Each call yields an ``EnrichmentOutcome``;
the driver folds the outcomes into a new row arena:

- success with non-blank text -> the row is replaced by a copy carrying the
  trimmed reply (the no-match sentinel is an ordinary reply)
- success with blank text     -> row unchanged
- failure                     -> row unchanged, WARN logged, ErrorRecord sent
                                 to the event sink, next row continues

Exactly one attempt is made per row. Cancellation is not an outcome: it
propagates out of the current await and nothing from that call is applied.
"""

__all__ = [
    "EventSink",
    "build_prompt",
    "build_worklist",
    "enrich_descriptions",
]

logger = logging.getLogger(__name__)


class EventSink(Protocol):
    def append(self, record: ErrorRecord) -> None: ...


def build_prompt(instruction: str, description: str) -> str:
    return f"{instruction}: {description}"


def build_worklist(rows: Sequence[RowData], column: int) -> list[EnrichmentUnit]:
    """One unit per row that has a non-blank value at ``column``."""
    units: list[EnrichmentUnit] = []
    for idx, row in enumerate(rows):
        if len(row.values) <= column:
            continue
        description = row.values[column].strip()
        if description:
            units.append(EnrichmentUnit(row_index=idx, original_text=description))
    return units


async def _attempt(
    client: ExtractionClient, prompt: str, timeout_seconds: float | None
) -> EnrichmentOutcome:
    try:
        if timeout_seconds is None:
            reply = await client.extract(prompt)
        else:
            reply = await asyncio.wait_for(client.extract(prompt), timeout=timeout_seconds)
    except (TimeoutError, httpx.TimeoutException) as e:
        return EnrichmentOutcome.failed("EXTRACTION_TIMEOUT", str(e) or "extraction call timed out")
    except httpx.RequestError as e:
        return EnrichmentOutcome.failed("EXTRACTION_TRANSPORT_ERROR", str(e) or type(e).__name__)
    except ExtractionError as e:
        return EnrichmentOutcome.failed("EXTRACTION_BAD_RESPONSE", str(e))
    except Exception as e:
        # Any collaborator failure is row-scoped
        return EnrichmentOutcome.failed("EXTRACTION_ERROR", f"{type(e).__name__}: {e}")
    return EnrichmentOutcome.success(reply if isinstance(reply, str) else "")


async def enrich_descriptions(
    rows: Sequence[RowData],
    column: int,
    client: ExtractionClient,
    *,
    instruction: str,
    file_name: str = "",
    event_sink: EventSink | None = None,
    timeout_seconds: float | None = None,
    no_match_sentinel: str | None = None,
    progress: ProgressTracker | None = None,
) -> EnrichmentBatch:
    """Enrich the description column of ``rows``.

    Args:
        rows: Data rows (header excluded) after normalization
        column: Description column index in the normalized header
        client: Extraction collaborator
        instruction: Fixed instruction placed before each description
        file_name: Upload name, recorded in error records
        event_sink: Receives one ErrorRecord per failed row
        timeout_seconds: Upper bound per call; exceeding it counts as a failure
        no_match_sentinel: Reply meaning "nothing found" (only used for logging)
        progress: Optional progress bar advanced once per call

    Returns:
        EnrichmentBatch with the new arena, the units in worklist order and
        the number of failed calls
    """
    arena = list(rows)
    worklist = build_worklist(arena, column)
    logger.debug(f"enrichment worklist size={len(worklist)} column={column}")

    units: list[EnrichmentUnit] = []
    failures = 0
    for unit in worklist:
        row = arena[unit.row_index]
        outcome = await _attempt(
            client, build_prompt(instruction, unit.original_text), timeout_seconds
        )

        if outcome.failure is not None:
            failures += 1
            logger.warning(
                f"row={row.row_number} description='{unit.original_text}' "
                f"kept: {outcome.failure.error_type} {outcome.failure.message}"
            )
            if event_sink is not None:
                event_sink.append(
                    ErrorRecord.create(
                        file=file_name,
                        row=row.row_number,
                        error_type=outcome.failure.error_type,
                        message=outcome.failure.message,
                    )
                )
            units.append(unit)
        else:
            text = (outcome.text or "").strip()
            if text:
                arena[unit.row_index] = row.with_value(column, text)
                units.append(replace(unit, enriched_text=text))
                if no_match_sentinel is not None and text == no_match_sentinel:
                    logger.debug(f"row={row.row_number} no name found (sentinel)")
            else:
                logger.debug(f"row={row.row_number} blank reply, description kept")
                units.append(unit)

        if progress is not None:
            progress.advance(success=outcome.ok)

    return EnrichmentBatch(rows=arena, units=units, failures=failures)
