"""Turn fetch outcomes into output rows."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from .extract import META_FIELDS, extract
from .models import FetchFailure, FetchOutcome, OutputRecord

logger = logging.getLogger(__name__)

FETCH_ERROR_STATUS = "FETCH_ERROR"


def make_batch_id(now: Optional[datetime] = None) -> str:
    """Timestamp-derived run id, e.g. ``2026-10-18T09-30-00-123Z``."""
    now = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return now.strftime("%Y-%m-%dT%H-%M-%S-") + f"{now.microsecond // 1000:03d}Z"


def row_number(window_start: int, local_index: int) -> int:
    """1-based row number, stable across runs whatever the window size."""
    return window_start + local_index + 1


def build_record(
    original_url: str,
    row: int,
    batch_id: str,
    outcome: FetchOutcome,
    *,
    fingerprint: str = "",
) -> OutputRecord:
    """Build the single output row for one URL.

    A response without a body (non-2xx or non-HTML) is an observed outcome,
    not an error: its extraction fields stay empty and ``error`` is blank.
    """
    if isinstance(outcome, FetchFailure):
        return OutputRecord(
            row=row,
            batch_run_id=batch_id,
            original_url=original_url,
            status_code=FETCH_ERROR_STATUS,
            error=outcome.describe(),
        )

    record = OutputRecord(
        row=row,
        batch_run_id=batch_id,
        original_url=original_url,
        final_url=outcome.final_url,
        status_code=str(outcome.status_code),
        redirected="true" if outcome.redirected else "false",
        content_type=outcome.content_type,
    )
    if outcome.body is None:
        return record

    result = extract(outcome.body, fingerprint=fingerprint)
    meta = {column: result.metadata.get(name, "") for column, name in META_FIELDS.items()}
    return record.model_copy(
        update={
            "is_swe": result.classification_flag,
            "main_content_text": result.main_content_text,
            "body_classes": result.body_classes,
            **meta,
        }
    )
