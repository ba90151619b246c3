"""content-audit: windowed fetch, extract and CSV append over a URL list."""

from .config import Settings, get_settings
from .errors import InvalidArgument, PersistenceFailure, PipelineError
from .extract import extract
from .fetcher import RateLimitedFetcher, RateLimiter
from .models import (
    CSV_COLUMNS,
    BatchSummary,
    ExtractionResult,
    FetchFailure,
    FetchOutcome,
    FetchSuccess,
    OutputRecord,
)
from .pipeline import run_batch
from .records import build_record, make_batch_id
from .sink import append_log, append_records, read_records
from .sources import load_urls, page_window
from .validate import ValidationReport, ValidationResult, run_validation

__all__ = [
    "Settings",
    "get_settings",
    "InvalidArgument",
    "PersistenceFailure",
    "PipelineError",
    "extract",
    "RateLimitedFetcher",
    "RateLimiter",
    "CSV_COLUMNS",
    "BatchSummary",
    "ExtractionResult",
    "FetchFailure",
    "FetchOutcome",
    "FetchSuccess",
    "OutputRecord",
    "run_batch",
    "build_record",
    "make_batch_id",
    "append_log",
    "append_records",
    "read_records",
    "load_urls",
    "page_window",
    "run_validation",
    "ValidationReport",
    "ValidationResult",
]
