"""Shared test fixtures for content-audit tests."""

from pathlib import Path

import pytest

from content_audit.config import Settings


@pytest.fixture
def sample_page_html() -> str:
    """HTML page with primary content, noise blocks, body classes and metadata."""
    return """
    <html>
    <head>
        <title>Apply for a licence</title>
        <meta name="DCTERMS.title" content="Apply for a licence">
        <meta name="DCTERMS.description" content="How to apply &quot;online&quot;.">
        <meta name="DCTERMS.created" content="2019-03-01">
        <meta name="DCTERMS.modified" content="2024-07-15">
        <meta name="matrix.id" content="123456">
        <link rel="stylesheet" href="/assets/v4/latest/css/qg-main.css">
    </head>
    <body class="qg-layout  qg-guide">
        <nav>Site navigation</nav>
        <div id="qg-primary-content">
            <h1>Apply for a licence</h1>
            <p>You can apply
               online.</p>
            <div id="qg-page-options">Print this page</div>
            <ul id="qg-options"><li>Share</li></ul>
            <div class="qg-content-footer">Last updated 15 July 2024</div>
        </div>
        <footer>Copyright</footer>
    </body>
    </html>
    """


@pytest.fixture
def no_content_html() -> str:
    """HTML page without the primary content container."""
    return """
    <html>
    <head><meta name="DCTERMS.title" content="Landing"></head>
    <body class="home"><main><p>Welcome</p></main></body>
    </html>
    """


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings rooted in a temp dir with no request delay."""
    s = Settings(
        project_root=tmp_path,
        request_delay_seconds=0.0,
        timeout_seconds=5.0,
    )
    s.ensure_dirs()
    return s


@pytest.fixture
def write_urls(settings: Settings):
    """Write the given lines to the configured URL list file."""

    def _write(lines) -> Path:
        settings.input_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return settings.input_path

    return _write
