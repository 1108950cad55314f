"""Pydantic schemas for request bodies, status records and law API payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_VERSION = "v1.0.0"


class GenerateEpubRequest(BaseModel):
    """Validated body of an EPUB generation request."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=1)
    version: str | None = None

    @field_validator("id")
    @classmethod
    def _strip_id(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("value cannot be blank.")
        return stripped

    @field_validator("version", mode="before")
    @classmethod
    def _blank_version_is_unset(cls, value: Any) -> Any:
        # Null or blank falls back to the configured default.
        if isinstance(value, str):
            return value.strip() or None
        return value


class GenerateEpubResponse(BaseModel):
    """Successful generation response payload."""

    model_config = ConfigDict(extra="forbid")

    status: str = "success"
    id: str


class StatusRecord(BaseModel):
    """Status object polled by clients while a generation is in flight.

    Success has no status value: the record is deleted once the EPUB is
    published.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    status: Literal["PROCESSING", "FAILED"]
    updated_at: datetime = Field(alias="updatedAt")
    error: str | None = None

    @model_validator(mode="after")
    def _error_only_when_failed(self) -> StatusRecord:
        if self.status == "FAILED" and not self.error:
            raise ValueError("FAILED status requires a non-empty error.")
        if self.status != "FAILED" and self.error is not None:
            raise ValueError("error is only allowed on FAILED status.")
        return self

    def to_json_bytes(self) -> bytes:
        """Serialize with wire field names, omitting an absent error."""
        return self.model_dump_json(by_alias=True, exclude_none=True).encode("utf-8")


class LawDataResponse(BaseModel):
    """Subset of the e-Gov ``law_data`` response used for generation."""

    model_config = ConfigDict(extra="allow")

    law_full_text: Any = None
    law_info: dict[str, Any] | None = None
    revision_info: dict[str, Any] | None = None


class LawRevision(BaseModel):
    """One entry of the e-Gov ``law_revisions`` response."""

    model_config = ConfigDict(extra="ignore")

    law_revision_id: str | None = None
    law_title: str | None = None
    law_title_kana: str | None = None
    amendment_promulgate_date: str | None = None
    amendment_enforcement_date: str | None = None
    amendment_law_id: str | None = None
    amendment_law_title: str | None = None
    current_revision_status: str | None = None


class LawRevisionsResponse(BaseModel):
    """Subset of the e-Gov ``law_revisions`` response."""

    model_config = ConfigDict(extra="ignore")

    law_info: dict[str, Any] | None = None
    revisions: list[LawRevision] = Field(default_factory=list)
