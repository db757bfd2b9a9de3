"""Document domain models."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from backend.app.models.analysis import AnalysisResult
from backend.app.models.common import AnalysisMode


class Document(BaseModel):
    """Persisted document.

    ``plain_text`` is always the markup-stripped projection of ``rich_content``;
    repositories derive it on every write.
    """

    id: int
    user_id: int
    title: str
    plain_text: str
    rich_content: str
    analysis_mode: AnalysisMode | None = None
    analysis_result: AnalysisResult | None = None
    created_at: datetime
    updated_at: datetime


class DocumentCreate(BaseModel):
    """Request body for POST /api/documents."""

    title: str = Field(..., min_length=1, max_length=200, description="Document title")
    rich_content: str = Field(..., min_length=1, description="Serialized rich-text HTML")
    analysis_mode: AnalysisMode | None = None
    analysis_result: AnalysisResult | None = None


class DocumentUpdate(BaseModel):
    """Partial update; unset fields are left untouched."""

    title: str | None = Field(None, min_length=1, max_length=200)
    rich_content: str | None = Field(None, min_length=1)
    analysis_mode: AnalysisMode | None = None
    analysis_result: AnalysisResult | None = None


def update_fields(data: DocumentUpdate) -> dict[str, Any]:
    """Fields explicitly set on an update, with typed values.

    ``title`` and ``rich_content`` cannot be cleared, so an explicit null for
    them is ignored; the analysis fields may be reset to null.
    """
    changes: dict[str, Any] = {}
    for name in data.model_fields_set:
        value = getattr(data, name)
        if value is None and name in ("title", "rich_content"):
            continue
        changes[name] = value
    return changes


class DocumentListResponse(BaseModel):
    """Response for GET /api/documents."""

    documents: list[Document]
