from __future__ import annotations

from pathlib import PureWindowsPath

from ..models.config_models import DEFAULT_MAX_UPLOAD_BYTES
from ..models.upload_file import UploadFile

"""Upload boundary checks.

``check_upload`` is what a caller runs before handing a file to the
pipeline (presence, non-empty, size ceiling, extension). The pipeline
itself repeats the cheap checks through ``ensure_processable``.
"""

PERMITTED_EXTENSIONS = (".csv",)


class ProcessingError(Exception):
    """Base exception for pipeline-level failures."""


class InputValidationError(ProcessingError):
    """Raised when an upload is rejected before any processing."""


def _extension(name: str) -> str:
    suffix = PureWindowsPath(name).suffix
    return suffix.lower()


def check_upload(upload: UploadFile | None, max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES) -> None:
    """Caller-side validation of an upload.

    Raises:
        InputValidationError: with a user-facing message
    """
    if upload is None:
        raise InputValidationError("Please upload a file.")
    if upload.size == 0:
        raise InputValidationError("The file is empty.")
    if upload.size > max_bytes:
        raise InputValidationError(
            f"File too large. Maximum allowed is {max_bytes // 1024 // 1024} MB."
        )
    if _extension(upload.name) not in PERMITTED_EXTENSIONS:
        raise InputValidationError("Unsupported file type. Only .csv files are allowed.")


def ensure_processable(upload: UploadFile | None) -> None:
    """Re-check performed by the pipeline itself."""
    if upload is None or upload.size == 0:
        raise InputValidationError("File is empty or null")
    if not upload.name.lower().endswith(".csv"):
        raise InputValidationError("File must be a CSV file")
