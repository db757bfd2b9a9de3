"""Boundary validation of analysis engine responses.

The engine returns free-form JSON. The envelope is validated strictly (a bad
envelope fails the whole call) while individual issues degrade gracefully (a
bad issue is dropped and the rest are kept).
"""

import logging
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ValidationError, field_validator

from backend.app.analysis.errors import MalformedResponseError
from backend.app.models.analysis import AnalysisResult, Issue
from backend.app.models.common import Severity

logger = logging.getLogger(__name__)


class _RawIssue(BaseModel):
    """One issue as emitted by the engine. Offsets, if any, are ignored."""

    text: str
    suggestion: str
    reason: str = ""
    severity: Severity = Severity.low

    @field_validator("severity", mode="before")
    @classmethod
    def _default_severity(cls, value: object) -> object:
        if value is None:
            return Severity.low
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("reason", mode="before")
    @classmethod
    def _default_reason(cls, value: object) -> object:
        return "" if value is None else value


class _RawAnalysisResponse(BaseModel):
    issues: list[Any]


@dataclass(frozen=True)
class ParsedAnalysis:
    """Normalized analysis plus how many raw issues were dropped."""

    result: AnalysisResult
    dropped: int = 0


def normalize_issue(item: Any) -> Issue | None:
    """Convert one raw engine issue into an Issue.

    Missing severity defaults to ``low``. Returns None (drop) when the item is
    not an object, ``text`` is missing or blank, ``suggestion`` is missing, a
    field has the wrong type, or the severity is not low/medium/high.
    """
    if not isinstance(item, dict):
        return None

    try:
        raw = _RawIssue.model_validate(item)
    except ValidationError:
        return None

    if not raw.text.strip():
        return None

    return Issue(text=raw.text, suggestion=raw.suggestion, reason=raw.reason, severity=raw.severity)


def parse_analysis_response(raw: str) -> ParsedAnalysis:
    """Validate and normalize an analysis response.

    Args:
        raw: JSON text returned by the engine

    Returns:
        ParsedAnalysis with the surviving issues in engine order

    Raises:
        MalformedResponseError: If ``raw`` is not JSON, not an object, or has
            no ``issues`` array
    """
    try:
        envelope = _RawAnalysisResponse.model_validate_json(raw)
    except ValidationError as e:
        logger.warning(f"Engine response failed envelope validation: {e.error_count()} error(s)")
        raise MalformedResponseError() from e

    issues: list[Issue] = []
    dropped = 0
    for index, item in enumerate(envelope.issues):
        issue = normalize_issue(item)
        if issue is None:
            dropped += 1
            logger.warning(f"Dropping malformed issue at index {index}")
            continue
        issues.append(issue)

    return ParsedAnalysis(result=AnalysisResult(issues=tuple(issues)), dropped=dropped)
