"""Bank statement CSV enrichment pipeline.

Locates the header row of an uploaded statement, normalizes its columns,
rewrites every Description cell through an extraction service and saves
the result under ``uploads/``.
"""

__version__ = "0.1.0"
