"""Append-only persistence: the results CSV and the audit log.

Both stores assume a single writer. Nothing here locks the files, so two
runs must never target the same output at once.
"""

from __future__ import annotations

import csv
import logging
import re
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from .errors import PersistenceFailure
from .models import CSV_COLUMNS, OutputRecord

logger = logging.getLogger(__name__)

_NEWLINE_RE = re.compile(r"\r\n|\n|\r")


def escape_field(value: object) -> str:
    """Quote one CSV value: newlines become spaces, quotes are doubled."""
    text = _NEWLINE_RE.sub(" ", str(value))
    return '"' + text.replace('"', '""') + '"'


def format_row(values: Iterable[object]) -> str:
    return ",".join(escape_field(v) for v in values)


def _needs_header(path: Path) -> bool:
    return not path.exists() or path.stat().st_size == 0


def _ends_with_newline(path: Path) -> bool:
    with path.open("rb") as f:
        f.seek(-1, 2)
        return f.read(1) in (b"\n", b"\r")


def append_records(
    records: Sequence[OutputRecord],
    path: Path,
    columns: Sequence[str] = CSV_COLUMNS,
) -> int:
    """Append a batch of records to the CSV at ``path``.

    The header is written only when the file is absent or empty. The batch
    lands all at once: it is appended to a copy of the file which then
    replaces the original, so a failure leaves prior content untouched.

    Returns:
        Number of records written.

    Raises:
        PersistenceFailure: If the store cannot be written.
    """
    if not records:
        return 0

    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        write_header = _needs_header(path)

        lines: List[str] = []
        if write_header:
            lines.append(format_row(columns))
        for record in records:
            row = record.as_row()
            lines.append(format_row(row[c] for c in columns))
        payload = "\n".join(lines) + "\n"

        if write_header:
            tmp.write_bytes(b"")
        else:
            shutil.copyfile(path, tmp)
            if not _ends_with_newline(tmp):
                payload = "\n" + payload

        with tmp.open("a", encoding="utf-8", newline="") as f:
            f.write(payload)
        tmp.replace(path)
    except OSError as exc:
        tmp.unlink(missing_ok=True)
        raise PersistenceFailure(
            f"Failed to append {len(records)} rows to {path}: {exc}"
        ) from exc

    logger.info(
        "Appended %d rows to %s%s",
        len(records), path, " (with header)" if write_header else "",
    )
    return len(records)


def _timestamp(now: Optional[datetime] = None) -> str:
    now = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def append_log(message: str, path: Path, *, now: Optional[datetime] = None) -> None:
    """Append one ``"{timestamp}: {message}"`` line to the audit log.

    Raises:
        PersistenceFailure: If the log cannot be written.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as f:
            f.write(f"{_timestamp(now)}: {message}\n")
    except OSError as exc:
        raise PersistenceFailure(f"Failed to write audit log {path}: {exc}") from exc


def read_records(path: Path) -> List[Dict[str, str]]:
    """Parse the results CSV back into dicts keyed by header column."""
    if not path.exists():
        raise FileNotFoundError(f"Results file not found: {path}")
    with path.open("r", encoding="utf-8", newline="") as f:
        return list(csv.DictReader(f))
