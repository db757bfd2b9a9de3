"""Analysis models - issues, results, classification and mode suggestions."""

from pydantic import BaseModel, ConfigDict, Field

from backend.app.models.common import AnalysisMode, DetectedType, Severity


class Issue(BaseModel):
    """A flagged passage with a suggested replacement.

    Offsets are not part of the issue: they are recomputed against the live
    document every time highlights are applied.
    """

    model_config = ConfigDict(frozen=True)

    text: str = Field(..., min_length=1)
    suggestion: str
    reason: str = ""
    severity: Severity = Severity.low


class AnalysisResult(BaseModel):
    """Issues produced by one analysis call. Never patched after creation."""

    model_config = ConfigDict(frozen=True)

    issues: tuple[Issue, ...] = ()


class Classification(BaseModel):
    """Content-type detection returned by the classification prompt."""

    model_config = ConfigDict(frozen=True)

    detected_type: DetectedType
    confidence: float = Field(..., ge=0.0, le=1.0)
    explanation: str = ""


class ModeSuggestion(BaseModel):
    """Hint that another rubric fits the content better. Not persisted."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    suggested_mode: AnalysisMode = Field(..., serialization_alias="suggestedMode")
    explanation: str


class Span(BaseModel):
    """Half-open character range into a plain-text snapshot."""

    model_config = ConfigDict(frozen=True)

    start: int = Field(..., ge=0)
    end: int = Field(..., ge=0)


class AppliedHighlight(BaseModel):
    """Highlight produced for one issue during an apply pass."""

    model_config = ConfigDict(frozen=True)

    issue_index: int
    span: Span
    severity: Severity


class AnalysisOutcome(BaseModel):
    """Combined result of one orchestrated analysis."""

    model_config = ConfigDict(frozen=True)

    analysis: AnalysisResult
    mode_suggestion: ModeSuggestion | None = None
    highlights: tuple[AppliedHighlight, ...] = ()
    applied: bool = False


class AnalyzeRequest(BaseModel):
    """Request body for POST /api/analyze.

    ``mode`` is required but typed as a plain string: it is validated by the
    orchestrator so that unknown modes surface as ``InvalidModeError`` (400)
    instead of a schema error.
    """

    content: str
    mode: str
    document_id: int | None = None


class AnalyzeResponse(BaseModel):
    """Response body for POST /api/analyze."""

    model_config = ConfigDict(populate_by_name=True)

    analysis: AnalysisResult
    mode_suggestion: ModeSuggestion | None = Field(
        default=None, serialization_alias="modeSuggestion"
    )
