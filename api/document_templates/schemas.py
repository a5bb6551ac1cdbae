"""
Pydantic schemas for document template endpoints.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


class SaveTemplateRequest(BaseModel):
    content: Any = Field(...)
    description: str = Field(..., min_length=1, max_length=2000)
    bump: Literal["patch", "minor", "major"] = "patch"


class PreviewRequest(BaseModel):
    type: str = Field(..., min_length=1, max_length=100)
    # Unsaved editor content; when omitted the active version is previewed.
    content: Any | None = None
    test_data: dict[str, Any] | None = None


class TemplateVersionResponse(BaseModel):
    id: str
    type: str
    version: str
    content: Any
    is_active: bool
    description: str | None = None
    created_at: datetime
    created_by: int | None = None


class DiffChangeResponse(BaseModel):
    path: str
    type: Literal["added", "removed", "modified"]
    old_value: str | None = None
    new_value: str | None = None
    display_path: str


class DiffSummaryResponse(BaseModel):
    added: int
    removed: int
    modified: int


class DiffResponse(BaseModel):
    from_version: str
    to_version: str
    changes: list[DiffChangeResponse]
    summary: DiffSummaryResponse


class DeleteResponse(BaseModel):
    message: str
    deleted_version: str
    reactivated_version: str | None = None
