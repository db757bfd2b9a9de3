"""Models package - re-exports for convenience."""

from backend.app.models.analysis import (
    AnalysisOutcome,
    AnalysisResult,
    AnalyzeRequest,
    AnalyzeResponse,
    AppliedHighlight,
    Classification,
    Issue,
    ModeSuggestion,
    Span,
)
from backend.app.models.common import AnalysisMode, DetectedType, Severity
from backend.app.models.documents import (
    Document,
    DocumentCreate,
    DocumentListResponse,
    DocumentUpdate,
)

__all__ = [
    # Common
    "AnalysisMode",
    "DetectedType",
    "Severity",
    # Analysis
    "Issue",
    "AnalysisResult",
    "Classification",
    "ModeSuggestion",
    "Span",
    "AppliedHighlight",
    "AnalysisOutcome",
    "AnalyzeRequest",
    "AnalyzeResponse",
    # Documents
    "Document",
    "DocumentCreate",
    "DocumentUpdate",
    "DocumentListResponse",
]
