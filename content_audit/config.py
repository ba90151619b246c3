"""Configuration for content-audit using pydantic-settings.

All settings are driven by environment variables with the CONTENT_AUDIT_
prefix, or a local .env file.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Run configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CONTENT_AUDIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    project_root: Path = Path(".")
    input_file: Path = Path("source-urls.txt")
    output_csv: Path = Path("url-results-with-content.csv")
    log_file: Path = Path("url-results-log.txt")

    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
    )
    accept_language: str = "en-AU,en;q=0.9"

    request_delay_seconds: float = 0.3
    timeout_seconds: float = 20.0

    default_page_size: int = 20

    # Marker of the CMS-generated stylesheet; presence sets isSWE.
    fingerprint: str = "qg-main.css"

    @property
    def input_path(self) -> Path:
        return self.project_root / self.input_file

    @property
    def output_path(self) -> Path:
        return self.project_root / self.output_csv

    @property
    def log_path(self) -> Path:
        return self.project_root / self.log_file

    def ensure_dirs(self) -> None:
        """Create parent directories of the output stores if they don't exist."""
        for path in (self.output_path, self.log_path):
            path.parent.mkdir(parents=True, exist_ok=True)
            logger.debug("Ensured directory: %s", path.parent)


def get_settings() -> Settings:
    """Load settings from environment and ensure output directories exist."""
    s = Settings()
    s.ensure_dirs()
    return s
