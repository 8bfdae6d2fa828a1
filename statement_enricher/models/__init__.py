"""Domain models for the statement enricher.

This package contains the configuration, row, enrichment and result models
shared by the tabular reader/writer and the pipeline services.
"""

from .config_models import EnricherConfig, ExtractionConfig
from .enrichment import EnrichmentBatch, EnrichmentFailure, EnrichmentOutcome, EnrichmentUnit
from .error_record import ErrorRecord
from .processing_result import ProcessingResult
from .row_data import RowData
from .upload_file import UploadFile

__all__ = [
    # Configuration models
    "EnricherConfig",
    "ExtractionConfig",
    # Processing models
    "RowData",
    "UploadFile",
    "EnrichmentBatch",
    "EnrichmentFailure",
    "EnrichmentOutcome",
    "EnrichmentUnit",
    "ProcessingResult",
    "ErrorRecord",
]
