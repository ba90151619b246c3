"""Content extraction: pull main text, body classes and metadata out of HTML."""

from __future__ import annotations

import logging
from typing import Dict, List

from bs4 import BeautifulSoup

from .models import ExtractionResult

logger = logging.getLogger(__name__)

CONTENT_SELECTOR = "#qg-primary-content"
IGNORE_SELECTORS: List[str] = [
    "#qg-page-options",
    "#qg-options",
    ".qg-content-footer",
]

# CSV column -> <meta name="..."> looked up in the document head.
META_FIELDS: Dict[str, str] = {
    "meta_title": "DCTERMS.title",
    "meta_description": "DCTERMS.description",
    "meta_created": "DCTERMS.created",
    "meta_modified": "DCTERMS.modified",
    "meta_assetid": "matrix.id",
}

CONTENT_NOT_FOUND = "Content selector not found"
META_NOT_FOUND = "Meta tag not found"
EXTRACTION_ERROR = "Error during content extraction"

CLASSIFICATION_MARK = "Yes"


def collapse_whitespace(text: str) -> str:
    """Collapse every whitespace run (newlines included) to one space and trim."""
    return " ".join(text.split())


def _main_content_text(soup: BeautifulSoup) -> str:
    matches = soup.select(CONTENT_SELECTOR)
    if not matches:
        return CONTENT_NOT_FOUND

    for element in matches:
        for selector in IGNORE_SELECTORS:
            for node in element.select(selector):
                node.decompose()

    return collapse_whitespace("".join(el.get_text() for el in matches))


def _body_classes(soup: BeautifulSoup) -> str:
    body = soup.body
    if body is None:
        return ""
    classes = body.get("class") or ""
    if isinstance(classes, str):
        return classes
    return " ".join(classes)


def _meta_content(soup: BeautifulSoup, name: str) -> str:
    tag = soup.select_one(f'meta[name="{name}"]')
    if tag is None:
        return META_NOT_FOUND
    return tag.get("content") or ""


def _parse(html: str, *, raw_attributes: bool = False) -> BeautifulSoup:
    if raw_attributes:
        # keep class="..." as the literal attribute string
        return BeautifulSoup(html, "lxml", multi_valued_attributes=None)
    return BeautifulSoup(html, "lxml")


def extract(html: str, *, fingerprint: str = "") -> ExtractionResult:
    """Extract structured content from one HTML document.

    Every field is computed independently: a failure in one step degrades
    that field to ``EXTRACTION_ERROR`` and leaves the others untouched.

    Args:
        html: Raw HTML body.
        fingerprint: Substring whose presence in the raw body sets the
            classification flag. Empty disables the check.

    Returns:
        ExtractionResult with sentinel values in place of missing structure.
    """
    # The content step mutates its tree, so it gets a parse of its own.
    try:
        main_text = _main_content_text(_parse(html))
    except Exception as exc:
        logger.warning("Content extraction failed: %s", exc)
        main_text = EXTRACTION_ERROR

    try:
        soup = _parse(html, raw_attributes=True)
    except Exception as exc:
        logger.warning("HTML parse failed: %s", exc)
        return ExtractionResult(
            main_content_text=main_text,
            body_classes=EXTRACTION_ERROR,
            metadata={name: EXTRACTION_ERROR for name in META_FIELDS.values()},
            classification_flag=_classify(html, fingerprint),
        )

    try:
        body_classes = _body_classes(soup)
    except Exception as exc:
        logger.warning("Body class extraction failed: %s", exc)
        body_classes = EXTRACTION_ERROR

    metadata: Dict[str, str] = {}
    for name in META_FIELDS.values():
        try:
            metadata[name] = _meta_content(soup, name)
        except Exception as exc:
            logger.warning("Meta extraction failed for %s: %s", name, exc)
            metadata[name] = EXTRACTION_ERROR

    logger.debug(
        "Extracted %d chars of content, %d meta fields found",
        len(main_text),
        sum(1 for v in metadata.values() if v != META_NOT_FOUND),
    )
    return ExtractionResult(
        main_content_text=main_text,
        body_classes=body_classes,
        metadata=metadata,
        classification_flag=_classify(html, fingerprint),
    )


def _classify(html: str, fingerprint: str) -> str:
    """Return ``"Yes"`` when the fingerprint occurs in the raw body, else blank."""
    if fingerprint and fingerprint in html:
        return CLASSIFICATION_MARK
    return ""
