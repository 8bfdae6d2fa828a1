from __future__ import annotations

from dataclasses import dataclass

from .row_data import RowData

"""Enrichment domain models.

An ``EnrichmentUnit`` tracks one qualifying row's description through the
driver; an ``EnrichmentOutcome`` is the per-call result the driver folds
over (either reply text or a failure, never both).
"""

__all__ = [
    "EnrichmentBatch",
    "EnrichmentFailure",
    "EnrichmentOutcome",
    "EnrichmentUnit",
]


@dataclass(frozen=True)
class EnrichmentUnit:
    """Description of one qualifying row, before and after enrichment."""
    row_index: int  # index into the data row arena
    original_text: str  # trimmed description as read
    enriched_text: str | None = None  # trimmed reply, None when unchanged

    @property
    def final_text(self) -> str:
        if self.enriched_text is not None:
            return self.enriched_text
        return self.original_text


@dataclass(frozen=True)
class EnrichmentFailure:
    """Why a single extraction call produced no usable reply."""
    error_type: str  # UPPER_SNAKE, mirrored into ErrorRecord.error_type
    message: str


@dataclass(frozen=True)
class EnrichmentOutcome:
    """Result of one extraction call."""
    text: str | None = None
    failure: EnrichmentFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @staticmethod
    def success(text: str) -> EnrichmentOutcome:
        return EnrichmentOutcome(text=text)

    @staticmethod
    def failed(error_type: str, message: str) -> EnrichmentOutcome:
        return EnrichmentOutcome(failure=EnrichmentFailure(error_type, message))


@dataclass(frozen=True)
class EnrichmentBatch:
    """What the driver hands back: the new arena plus per-unit results."""
    rows: list[RowData]
    units: list[EnrichmentUnit]
    failures: int = 0

    @property
    def enriched(self) -> int:
        return sum(1 for u in self.units if u.enriched_text is not None)

    @property
    def descriptions(self) -> list[str]:
        return [u.final_text for u in self.units]
