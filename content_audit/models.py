"""Pydantic models shared across the pipeline."""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field, model_validator

CSV_COLUMNS: List[str] = [
    "row",
    "batchRunId",
    "originalUrl",
    "finalUrl",
    "statusCode",
    "redirected",
    "contentType",
    "isSWE",
    "mainContentText",
    "bodyClasses",
    "meta_title",
    "meta_description",
    "meta_created",
    "meta_modified",
    "meta_assetid",
    "error",
]


class ErrorKind(str, Enum):
    """Why a request produced no response."""

    TIMEOUT = "Timeout"
    TRANSPORT = "TransportFailure"


class FetchSuccess(BaseModel):
    """A response was received, whatever its status."""

    final_url: str
    status_code: int
    redirected: bool = False
    content_type: str = ""
    body: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @model_validator(mode="after")
    def check_body_only_on_success(self) -> "FetchSuccess":
        if self.body is not None and not self.is_success:
            raise ValueError(f"body present on HTTP {self.status_code} response")
        return self


class FetchFailure(BaseModel):
    """No response: DNS, connection, protocol error or deadline exceeded."""

    error_kind: ErrorKind
    error_message: str

    def describe(self) -> str:
        return f"{self.error_kind.value}: {self.error_message}"


FetchOutcome = Union[FetchSuccess, FetchFailure]


class ExtractionResult(BaseModel):
    """Fields pulled out of one HTML body.

    Every field always carries a value; "not found" and "failed" are
    sentinel strings, never None.
    """

    main_content_text: str
    body_classes: str
    metadata: Dict[str, str] = Field(default_factory=dict)
    classification_flag: str = ""


class OutputRecord(BaseModel):
    """One row of the results CSV. Exactly one per URL in a window."""

    row: int
    batch_run_id: str
    original_url: str
    final_url: str = ""
    status_code: str = ""
    redirected: str = ""
    content_type: str = ""
    is_swe: str = ""
    main_content_text: str = ""
    body_classes: str = ""
    meta_title: str = ""
    meta_description: str = ""
    meta_created: str = ""
    meta_modified: str = ""
    meta_assetid: str = ""
    error: str = ""

    def as_row(self) -> Dict[str, str]:
        """Return the record keyed by CSV column, in column order."""
        return {
            "row": str(self.row),
            "batchRunId": self.batch_run_id,
            "originalUrl": self.original_url,
            "finalUrl": self.final_url,
            "statusCode": self.status_code,
            "redirected": self.redirected,
            "contentType": self.content_type,
            "isSWE": self.is_swe,
            "mainContentText": self.main_content_text,
            "bodyClasses": self.body_classes,
            "meta_title": self.meta_title,
            "meta_description": self.meta_description,
            "meta_created": self.meta_created,
            "meta_modified": self.meta_modified,
            "meta_assetid": self.meta_assetid,
            "error": self.error,
        }

    @property
    def is_failure(self) -> bool:
        return bool(self.error)


class BatchSummary(BaseModel):
    """What one invocation did."""

    batch_id: str
    start: int
    end: int
    total: int
    processed: int = 0
    failures: int = 0
    output_path: Optional[str] = None
