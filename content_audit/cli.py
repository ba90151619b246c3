"""Command-line interface for content-audit."""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback

from .config import Settings
from .errors import InvalidArgument, PersistenceFailure
from .pipeline import run_batch
from .sink import append_log
from .sources import validate_window
from .validate import run_validation

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    p = argparse.ArgumentParser(
        prog="content-audit",
        description="Fetch a window of URLs, extract page content, append to CSV.",
    )
    p.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    sub = p.add_subparsers(dest="cmd", required=True)

    # --- run ---
    run = sub.add_parser("run", help="Process one page window of the URL list")
    run.add_argument(
        "--pagestart", type=int, default=0,
        help="0-based index of the first URL to process (default: 0)",
    )
    run.add_argument(
        "--pagesize", type=int, default=None,
        help="Number of URLs to process (default: CONTENT_AUDIT_DEFAULT_PAGE_SIZE)",
    )

    # --- validate ---
    sub.add_parser("validate", help="Check the results CSV for integrity")

    return p


def _configure_logging(verbose: bool) -> None:
    """Set up root logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def _log_critical(exc: BaseException, settings: Settings | None) -> None:
    """Best-effort write of an unexpected failure to the audit log."""
    if settings is None:
        return
    detail = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    try:
        append_log(f"CRITICAL ERROR: {exc}\n{detail}", settings.log_path)
    except PersistenceFailure as log_exc:
        logger.error("Failed to write critical error to audit log: %s", log_exc)


def main(argv: list[str] | None = None) -> int:
    """Entry point for the CLI."""
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    settings: Settings | None = None
    try:
        settings = Settings()

        if args.cmd == "run":
            size = args.pagesize if args.pagesize is not None else settings.default_page_size
            validate_window(args.pagestart, size)
            settings.ensure_dirs()
            summary = run_batch(args.pagestart, size, settings=settings)
            print(json.dumps(summary.model_dump(mode="json"), indent=2))
            return 0

        if args.cmd == "validate":
            report = run_validation(settings)
            print(report.summary())
            return 0 if report.passed else 1

    except InvalidArgument as exc:
        logger.error("%s", exc)
        return 2
    except Exception as exc:
        logger.exception("An unexpected error occurred during execution")
        _log_critical(exc, settings)
        return 1

    return 2


if __name__ == "__main__":
    raise SystemExit(main())
