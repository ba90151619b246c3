"""Unit tests for HTML content extraction."""

from unittest.mock import patch

from content_audit.extract import (
    CONTENT_NOT_FOUND,
    EXTRACTION_ERROR,
    META_NOT_FOUND,
    _meta_content,
    collapse_whitespace,
    extract,
)

FINGERPRINT = "qg-main.css"


class TestCollapseWhitespace:
    def test_collapses_runs_and_newlines(self) -> None:
        assert collapse_whitespace("  a \n\n b\t\tc\r\n") == "a b c"

    def test_empty(self) -> None:
        assert collapse_whitespace(" \n ") == ""


class TestExtract:
    def test_happy_path(self, sample_page_html: str) -> None:
        result = extract(sample_page_html, fingerprint=FINGERPRINT)

        assert result.main_content_text == "Apply for a licence You can apply online."
        assert result.body_classes == "qg-layout  qg-guide"
        assert result.classification_flag == "Yes"
        assert result.metadata == {
            "DCTERMS.title": "Apply for a licence",
            "DCTERMS.description": 'How to apply "online".',
            "DCTERMS.created": "2019-03-01",
            "DCTERMS.modified": "2024-07-15",
            "matrix.id": "123456",
        }

    def test_noise_removed_from_content(self, sample_page_html: str) -> None:
        text = extract(sample_page_html).main_content_text
        assert "Print this page" not in text
        assert "Share" not in text
        assert "Last updated" not in text

    def test_content_outside_selector_ignored(self, sample_page_html: str) -> None:
        text = extract(sample_page_html).main_content_text
        assert "Site navigation" not in text
        assert "Copyright" not in text

    def test_missing_content_selector(self, no_content_html: str) -> None:
        result = extract(no_content_html, fingerprint=FINGERPRINT)
        assert result.main_content_text == CONTENT_NOT_FOUND
        # the other fields are still extracted
        assert result.body_classes == "home"
        assert result.metadata["DCTERMS.title"] == "Landing"

    def test_missing_meta_only_affects_that_field(self, no_content_html: str) -> None:
        result = extract(no_content_html)
        assert result.metadata["DCTERMS.title"] == "Landing"
        for name in ("DCTERMS.description", "DCTERMS.created", "DCTERMS.modified", "matrix.id"):
            assert result.metadata[name] == META_NOT_FOUND

    def test_meta_without_content_attribute(self) -> None:
        html = '<html><head><meta name="DCTERMS.title"></head><body></body></html>'
        assert extract(html).metadata["DCTERMS.title"] == ""

    def test_fingerprint_absent_is_blank(self, no_content_html: str) -> None:
        assert extract(no_content_html, fingerprint=FINGERPRINT).classification_flag == ""

    def test_empty_fingerprint_disables_flag(self, sample_page_html: str) -> None:
        assert extract(sample_page_html, fingerprint="").classification_flag == ""

    def test_body_without_class(self) -> None:
        html = '<html><body><div id="qg-primary-content">x</div></body></html>'
        result = extract(html)
        assert result.body_classes == ""
        assert result.main_content_text == "x"

    def test_empty_content_is_empty_string(self) -> None:
        html = '<html><body><div id="qg-primary-content">  \n </div></body></html>'
        assert extract(html).main_content_text == ""

    def test_fragment_without_body(self) -> None:
        result = extract("")
        assert result.main_content_text == CONTENT_NOT_FOUND
        assert result.body_classes == ""
        assert set(result.metadata.values()) == {META_NOT_FOUND}

    def test_malformed_html_degrades_gracefully(self) -> None:
        html = '<html><body class="x"><div id="qg-primary-content"><p>Unclosed <b>bold'
        result = extract(html)
        assert result.main_content_text == "Unclosed bold"
        assert result.body_classes == "x"

    def test_inline_markup_does_not_split_words(self) -> None:
        html = '<div id="qg-primary-content"><p>Queens<b>land</b> e<i>mail</i></p></div>'
        assert extract(html).main_content_text == "Queensland email"

    def test_block_text_joined_without_separator(self) -> None:
        html = '<div id="qg-primary-content"><h2>Fees</h2><p>Free</p></div>'
        assert extract(html).main_content_text == "FeesFree"

    def test_body_class_kept_verbatim(self) -> None:
        html = '<html><body class=" qg-a   qg-b "></body></html>'
        assert extract(html).body_classes == " qg-a   qg-b "


class TestExtractFaultIsolation:
    def test_content_failure_leaves_metadata(self, sample_page_html: str) -> None:
        with patch("content_audit.extract._main_content_text", side_effect=RuntimeError("boom")):
            result = extract(sample_page_html, fingerprint=FINGERPRINT)
        assert result.main_content_text == EXTRACTION_ERROR
        assert result.metadata["DCTERMS.title"] == "Apply for a licence"
        assert result.classification_flag == "Yes"

    def test_body_class_failure_is_isolated(self, sample_page_html: str) -> None:
        with patch("content_audit.extract._body_classes", side_effect=RuntimeError("boom")):
            result = extract(sample_page_html)
        assert result.body_classes == EXTRACTION_ERROR
        assert result.main_content_text.startswith("Apply for a licence")

    def test_single_meta_failure_is_isolated(self, sample_page_html: str) -> None:
        def flaky(soup, name):
            if name == "matrix.id":
                raise RuntimeError("boom")
            return _meta_content(soup, name)

        with patch("content_audit.extract._meta_content", side_effect=flaky):
            result = extract(sample_page_html)
        assert result.metadata["matrix.id"] == EXTRACTION_ERROR
        assert result.metadata["DCTERMS.created"] == "2019-03-01"

    def test_parse_failure_sets_error_sentinels(self, sample_page_html: str) -> None:
        with patch("content_audit.extract._parse", side_effect=RuntimeError("boom")):
            result = extract(sample_page_html, fingerprint=FINGERPRINT)
        assert result.main_content_text == EXTRACTION_ERROR
        assert result.body_classes == EXTRACTION_ERROR
        assert set(result.metadata.values()) == {EXTRACTION_ERROR}
        assert result.classification_flag == "Yes"

    def test_sentinels_are_distinct(self) -> None:
        sentinels = {CONTENT_NOT_FOUND, META_NOT_FOUND, EXTRACTION_ERROR}
        assert len(sentinels) == 3
        assert "" not in sentinels
