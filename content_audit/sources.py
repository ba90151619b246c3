"""URL list loading and page-window arithmetic."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from .errors import InvalidArgument

logger = logging.getLogger(__name__)


def load_urls(path: Path) -> List[str]:
    """Read newline-delimited URLs, dropping blank lines and keeping order.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    if not path.exists():
        raise FileNotFoundError(f"URL list file not found: {path}")
    text = path.read_text(encoding="utf-8")

    urls = [line.strip() for line in text.splitlines()]
    urls = [u for u in urls if u]
    logger.info("Loaded %d URLs from %s", len(urls), path)
    return urls


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_window(start: int, size: int) -> None:
    """Reject out-of-range window parameters."""
    if not _is_int(start) or start < 0:
        raise InvalidArgument(
            f"Invalid page start {start!r}: must be a non-negative integer."
        )
    if not _is_int(size) or size <= 0:
        raise InvalidArgument(
            f"Invalid page size {size!r}: must be a positive integer."
        )


def page_window(start: int, size: int, total: int) -> range:
    """Return the index range ``[start, start + size)`` clamped to ``total``.

    The range is empty when ``start >= total``; callers treat that as a
    successful no-op.
    """
    validate_window(start, size)
    if start >= total:
        return range(0)
    return range(start, min(start + size, total))
