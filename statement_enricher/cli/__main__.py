from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from dotenv import load_dotenv

from statement_enricher.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from statement_enricher.logging.error_log import ErrorLogBuffer
from statement_enricher.logging.init import log_summary, set_debug, setup_logging
from statement_enricher.models.config_models import EnricherConfig
from statement_enricher.models.upload_file import UploadFile
from statement_enricher.services.extraction_client import build_client
from statement_enricher.services.orchestrator import process_upload
from statement_enricher.services.summary import build_report, render_summary_line
from statement_enricher.services.upload_validation import ProcessingError, check_upload
from statement_enricher.tabular.reader import CsvStructureError, MalformedInputError, read_statement
from statement_enricher.tabular.writer import OutputWriteError

"""CLI entrypoint.

Flow:
- Load .env (GEMINI_API_KEY) and config/enricher.yml
- Validate the upload (presence, size ceiling, extension)
- Run the pipeline and print the SUMMARY line (or the JSON report)

Exit codes: 0 all rows enriched without failure, 2 output written but some
rows failed extraction, 1 fatal (config / input / structure / output).
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

INSPECT_SAMPLE_ROWS = 3


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env via python-dotenv; values override the process environment."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="statement-enricher",
        description="Rewrite statement descriptions through an extraction service",
    )
    p.add_argument("file", type=Path, help="Statement CSV to process")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Config YAML path")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--offline", action="store_true", help="Skip extraction calls; keep descriptions")
    p.add_argument("--json", action="store_true", help="Print the JSON report after processing")
    p.add_argument(
        "--inspect-data", action="store_true", help="Print located header & first rows then exit"
    )
    return p.parse_args(argv)


def _inspect_data(upload: UploadFile, cfg: EnricherConfig) -> int:
    try:
        table = read_statement(upload.content, cfg.expected_headers, cfg.header_fingerprint_width)
    except (MalformedInputError, CsvStructureError) as e:
        print(f"inspect: {e}")
        return EXIT_FATAL
    print(f"FILE: {upload.name}")
    print(f"  header_row={table.header_index + 1} projection={table.projection}")
    print(f"  columns={list(table.header)}")
    for row in table.data_rows[:INSPECT_SAMPLE_ROWS]:
        print(f"    {list(row)}")
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # argv=[] must not fall back to sys.argv (pytest args would leak in)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    path: Path = args.file
    if not path.is_file():
        logger.error(f"input: file not found: {path}")
        return EXIT_FATAL
    upload = UploadFile.from_path(path)

    try:
        check_upload(upload, cfg.max_upload_bytes)
    except ProcessingError as e:
        logger.error(f"input: {e}")
        return EXIT_FATAL

    if args.inspect_data:
        return _inspect_data(upload, cfg)

    logger.info(f"Processing file: {path}")
    client = build_client(cfg.extraction, offline=args.offline)
    try:
        result = asyncio.run(process_upload(upload, client, cfg, error_log=ErrorLogBuffer()))
    except ProcessingError as e:
        logger.error(f"input: {e}")
        return EXIT_FATAL
    except MalformedInputError as e:
        logger.error(f"input: {e}")
        return EXIT_FATAL
    except CsvStructureError as e:
        logger.error(f"structure: {e}")
        return EXIT_FATAL
    except OutputWriteError as e:
        logger.error(f"output: {e}")
        return EXIT_FATAL

    if result.error_log_path is not None:
        logger.warning(f"{result.failed_rows} row(s) kept original description; see {result.error_log_path}")

    if args.json:
        print(json.dumps(build_report(result), ensure_ascii=False, indent=2))

    # log_summary adds the "SUMMARY " prefix itself
    log_summary(render_summary_line(result)[len("SUMMARY "):])

    if result.has_failures:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
