"""Integrity checks for the results CSV.

Checks the store after one or more runs: header, column counts, duplicate
and missing row numbers, and batch stamping.
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .config import Settings, get_settings
from .models import CSV_COLUMNS

logger = logging.getLogger(__name__)

# Cap on offending lines/rows listed per failed check.
MAX_DETAILS = 20


@dataclass
class ValidationResult:
    """Outcome of one check against the results store."""

    name: str
    passed: bool
    message: str
    details: List[str] = field(default_factory=list)

    @classmethod
    def ok(cls, name: str, message: str) -> "ValidationResult":
        return cls(name=name, passed=True, message=message)

    @classmethod
    def fail(cls, name: str, message: str, *details: str) -> "ValidationResult":
        return cls(name=name, passed=False, message=message, details=list(details))

    def lines(self) -> List[str]:
        status = "PASS" if self.passed else "FAIL"
        return [f"[{status}] {self.name}: {self.message}"] + [
            f"    {d}" for d in self.details
        ]


@dataclass
class ValidationReport:
    """All checks run against one results file."""

    path: Optional[Path] = None
    checks: List[ValidationResult] = field(default_factory=list)
    row_count: int = 0
    next_start: Optional[int] = None

    @property
    def failures(self) -> List[ValidationResult]:
        return [c for c in self.checks if not c.passed]

    @property
    def passed(self) -> bool:
        return not self.failures

    def summary(self) -> str:
        lines = [f"Results: {self.path} ({self.row_count} rows)"] if self.path else []
        for check in self.checks:
            lines.extend(check.lines())
        if self.next_start is not None:
            lines.append(f"Next --pagestart: {self.next_start}")
        lines.append(
            f"\n{len(self.checks) - len(self.failures)} passed, {len(self.failures)} failed"
        )
        return "\n".join(lines)


def _read_raw_rows(path: Path) -> List[List[str]]:
    with path.open("r", encoding="utf-8", newline="") as f:
        return [row for row in csv.reader(f) if row]


def check_file_exists(path: Path) -> ValidationResult:
    """Check that the results file exists and is non-empty."""
    if not path.exists():
        return ValidationResult.fail("results_exists", f"{path} does not exist")
    size = path.stat().st_size
    if size == 0:
        return ValidationResult.fail("results_exists", f"{path} is empty (0 bytes)")
    return ValidationResult.ok("results_exists", f"{path} exists ({size} bytes)")


def check_header(rows: List[List[str]], columns: Sequence[str] = CSV_COLUMNS) -> ValidationResult:
    """The first row is the header and it never repeats."""
    header = list(columns)
    if not rows or rows[0] != header:
        return ValidationResult.fail(
            "header", "First row is not the expected header", f"Got: {rows[0] if rows else []}"
        )
    repeats = [i for i, row in enumerate(rows[1:], 2) if row == header]
    if repeats:
        return ValidationResult.fail(
            "header",
            f"Header repeated {len(repeats)} time(s)",
            f"Header found again at line(s) {repeats[:MAX_DETAILS]}",
        )
    return ValidationResult.ok("header", "Header written once")


def check_column_count(rows: List[List[str]], columns: Sequence[str] = CSV_COLUMNS) -> ValidationResult:
    """Every row has exactly one value per column."""
    errors = [
        f"Line {i}: {len(row)} values, expected {len(columns)}"
        for i, row in enumerate(rows, 1)
        if len(row) != len(columns)
    ]
    if errors:
        return ValidationResult.fail(
            "column_count", f"{len(errors)} malformed row(s)", *errors[:MAX_DETAILS]
        )
    return ValidationResult.ok(
        "column_count", f"All {len(rows)} rows have {len(columns)} columns"
    )


def _row_numbers(records: List[Dict[str, str]]) -> List[int]:
    out: List[int] = []
    for rec in records:
        try:
            out.append(int(rec.get("row") or ""))
        except ValueError:
            continue
    return out


def check_rows_no_duplicates(records: List[Dict[str, str]]) -> ValidationResult:
    """Check for row numbers written more than once (a window re-run)."""
    seen: Dict[int, int] = {}
    for n in _row_numbers(records):
        seen[n] = seen.get(n, 0) + 1
    duplicates = sorted(n for n, count in seen.items() if count > 1)

    if duplicates:
        return ValidationResult.fail(
            "rows_no_duplicates",
            f"{len(duplicates)} row number(s) appear more than once",
            f"Duplicated row(s): {duplicates[:MAX_DETAILS]}",
        )
    return ValidationResult.ok("rows_no_duplicates", f"{len(seen)} unique rows, no duplicates")


def check_rows_gaps(records: List[Dict[str, str]]) -> ValidationResult:
    """Check for windows that were skipped between runs."""
    numbers = sorted(set(_row_numbers(records)))
    if not numbers:
        return ValidationResult.fail("rows_gaps", "No rows found")

    missing = sorted(set(range(1, numbers[-1] + 1)) - set(numbers))
    if missing:
        return ValidationResult.fail(
            "rows_gaps",
            f"{len(missing)} gap(s) in row numbering",
            f"Missing row(s): {missing[:MAX_DETAILS]}",
        )
    return ValidationResult.ok("rows_gaps", f"Rows 1-{numbers[-1]} contiguous, no gaps")


def check_batch_ids(records: List[Dict[str, str]]) -> ValidationResult:
    """Every row carries the id of the run that wrote it."""
    missing = [rec.get("row", "?") for rec in records if not rec.get("batchRunId")]
    if missing:
        return ValidationResult.fail(
            "batch_ids",
            f"{len(missing)} row(s) without a batch id",
            f"Row(s): {missing[:MAX_DETAILS]}",
        )
    batches = {rec["batchRunId"] for rec in records}
    return ValidationResult.ok("batch_ids", f"{len(batches)} batch run(s) recorded")


def next_start(records: List[Dict[str, str]]) -> int:
    """The ``--pagestart`` that continues after the highest row written."""
    numbers = _row_numbers(records)
    return max(numbers) if numbers else 0


def run_validation(settings: Optional[Settings] = None) -> ValidationReport:
    """Run all checks against the configured results CSV."""
    s = settings or get_settings()
    report = ValidationReport(path=s.output_path)

    exists = check_file_exists(report.path)
    report.checks.append(exists)
    if not exists.passed:
        logger.error("Cannot run full validation: %s", exists.message)
        return report

    rows = _read_raw_rows(report.path)
    report.checks.append(check_header(rows))
    report.checks.append(check_column_count(rows))

    records = [dict(zip(CSV_COLUMNS, row)) for row in rows[1:] if row != CSV_COLUMNS]
    report.row_count = len(records)
    logger.info("Validating %d result rows in %s", len(records), report.path)

    for check in (check_rows_no_duplicates, check_rows_gaps, check_batch_ids):
        report.checks.append(check(records))
    report.next_start = next_start(records)
    return report
