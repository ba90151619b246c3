"""Batch entry point: window -> fetch -> extract -> persist."""

from __future__ import annotations

import logging
from typing import List, Optional

from .config import Settings, get_settings
from .errors import PersistenceFailure
from .extract import CONTENT_SELECTOR
from .fetcher import RateLimitedFetcher
from .models import BatchSummary, OutputRecord
from .records import build_record, make_batch_id, row_number
from .sink import append_log, append_records
from .sources import load_urls, page_window, validate_window

logger = logging.getLogger(__name__)


def process_window(
    urls: List[str],
    start: int,
    batch_id: str,
    fetcher: RateLimitedFetcher,
    *,
    fingerprint: str = "",
) -> List[OutputRecord]:
    """Fetch every URL in order and return one record per URL."""
    records: List[OutputRecord] = []
    for i, url in enumerate(urls):
        row = row_number(start, i)
        logger.info("Processing row %d (%d of %d): %s", row, i + 1, len(urls), url)
        outcome = fetcher.fetch(url)
        records.append(
            build_record(url, row, batch_id, outcome, fingerprint=fingerprint)
        )
    return records


def run_batch(
    start: int,
    size: int,
    *,
    settings: Optional[Settings] = None,
    fetcher: Optional[RateLimitedFetcher] = None,
    batch_id: Optional[str] = None,
) -> BatchSummary:
    """Process one page window of the URL list and append the results.

    Args:
        start: 0-based index of the first URL to process.
        size: Maximum number of URLs to process.
        settings: Run settings. Loaded from the environment if not provided.
        fetcher: Fetcher to use. A new one is created (and closed) if omitted.
        batch_id: Run identifier stamped on every row. Derived from the
            current time if not provided.

    Returns:
        BatchSummary describing the window and its outcome.

    Raises:
        InvalidArgument: On a negative start or non-positive size.
        PersistenceFailure: If the results CSV or audit log cannot be written.
    """
    validate_window(start, size)
    s = settings or get_settings()
    batch_id = batch_id or make_batch_id()

    urls = load_urls(s.input_path)
    window = page_window(start, size, len(urls))
    if not window:
        logger.warning(
            "Start index (%d) is beyond the total number of URLs (%d). Nothing to process.",
            start, len(urls),
        )
        return BatchSummary(batch_id=batch_id, start=start, end=start, total=len(urls))

    end = window.stop
    logger.info(
        "Checking URLs %d to %d (batch size: %d URLs) of %d total; batch %s",
        start + 1, end, len(window), len(urls), batch_id,
    )

    batch = urls[window.start:window.stop]
    if fetcher is None:
        with RateLimitedFetcher(s) as own:
            records = process_window(batch, start, batch_id, own, fingerprint=s.fingerprint)
    else:
        records = process_window(batch, start, batch_id, fetcher, fingerprint=s.fingerprint)

    summary = BatchSummary(
        batch_id=batch_id,
        start=start,
        end=end,
        total=len(urls),
        processed=len(records),
        failures=sum(1 for r in records if r.is_failure),
        output_path=str(s.output_path),
    )
    _persist(records, summary, s)
    return summary


def _persist(records: List[OutputRecord], summary: BatchSummary, s: Settings) -> None:
    """Write the CSV and the audit log independently of each other."""
    span = f"URLs {summary.start + 1} to {summary.end} ({summary.processed} URLs)"

    csv_error: Optional[PersistenceFailure] = None
    try:
        append_records(records, s.output_path)
    except PersistenceFailure as exc:
        logger.error("%s", exc)
        csv_error = exc

    if csv_error is None:
        message = f"Checked batch: {span}. Extracted content from {CONTENT_SELECTOR}."
    else:
        message = f"FAILED to persist batch {summary.batch_id}: {span}. {csv_error}"

    try:
        append_log(message, s.log_path)
    except PersistenceFailure as exc:
        logger.error("%s", exc)
        if csv_error is None:
            raise
    else:
        logger.info("Logged completion to %s", s.log_path)

    if csv_error is not None:
        raise csv_error
