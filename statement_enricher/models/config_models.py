from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the statement enricher.

The loader in ``statement_enricher/config/loader.py`` builds these from
``config/enricher.yml``; constructing them directly gives the built-in
defaults, which is what the pipeline uses when no config is passed.
"""

DEFAULT_EXPECTED_HEADERS: tuple[str, ...] = (
    "Date",
    "Description",
    "Reference Number",
    "Currency",
    "Amount",
    "Cr/Dr",
    "Balance",
)

# Albanian: find the first and last name of a person in this description,
# answer only with the name, or '----' when there is no real name.
DEFAULT_INSTRUCTION = (
    "Gjej emrin dhe mbiemrin e nje personi ne kete pershkrin dhe pergjigja jote "
    "duhet te jete vetem emri dhe mbiemri . Nese ne pershkrim nuk ka emer real  "
    "atehere pergjigja jote do te jete '----'."
)

DEFAULT_SENTINEL = "----"
DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024


@dataclass(frozen=True)
class ExtractionConfig:
    """Settings for the external extraction service (Gemini generateContent)."""
    model: str = "gemini-1.5-flash"
    api_base: str = "https://generativelanguage.googleapis.com/v1beta"
    timeout_seconds: float = 30.0  # per request; a timeout skips the row
    instruction: str = DEFAULT_INSTRUCTION  # prefixed to every description
    no_match_sentinel: str = DEFAULT_SENTINEL  # reply meaning "no name found"


@dataclass(frozen=True)
class EnricherConfig:
    """Root configuration object for processing uploads."""
    expected_headers: tuple[str, ...] = DEFAULT_EXPECTED_HEADERS
    header_fingerprint_width: int = 3  # leading columns compared when locating the header
    description_column: str = "Description"
    output_directory: str = "uploads"  # relative to the working directory
    output_suffix: str = "_processed"
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
