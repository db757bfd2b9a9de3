"""Mode rubric selector and content-type arbitration."""

from pydantic import BaseModel, ValidationError, field_validator

from backend.app.analysis.errors import InvalidModeError, MalformedResponseError
from backend.app.llm.client import AnalysisEngine
from backend.app.llm.prompts import CLASSIFICATION_INSTRUCTIONS, RUBRICS
from backend.app.models.analysis import Classification, ModeSuggestion
from backend.app.models.common import AnalysisMode, DetectedType

MODE_SUGGESTION_THRESHOLD = 0.7


class _RawClassification(BaseModel):
    """Classification payload as returned by the engine."""

    type: DetectedType
    confidence: float
    explanation: str = ""

    @field_validator("type", mode="before")
    @classmethod
    def _lowercase_type(cls, value: object) -> object:
        return value.strip().lower() if isinstance(value, str) else value


def coerce_mode(mode: AnalysisMode | str) -> AnalysisMode:
    """Validate a requested mode without ever defaulting.

    Raises:
        InvalidModeError: If ``mode`` is not a known analysis mode
    """
    if isinstance(mode, AnalysisMode):
        return mode
    try:
        return AnalysisMode(mode)
    except ValueError as e:
        raise InvalidModeError(mode) from e


def select_rubric(mode: AnalysisMode | str) -> str:
    """Return the system instructions for ``mode``.

    Raises:
        InvalidModeError: If ``mode`` is not a known analysis mode
    """
    return RUBRICS[coerce_mode(mode)]


def parse_classification(raw: str) -> Classification:
    """Validate a classification response.

    Raises:
        MalformedResponseError: If the payload is not valid JSON, has an
            unknown type, or a confidence outside [0, 1]
    """
    try:
        parsed = _RawClassification.model_validate_json(raw)
        return Classification(
            detected_type=parsed.type,
            confidence=parsed.confidence,
            explanation=parsed.explanation,
        )
    except ValidationError as e:
        raise MalformedResponseError(
            "The analysis service returned an unexpected classification."
        ) from e


async def classify_content(engine: AnalysisEngine, text: str) -> Classification:
    """Ask the engine which kind of document ``text`` is."""
    raw = await engine.complete(system_instructions=CLASSIFICATION_INSTRUCTIONS, user_content=text)
    return parse_classification(raw)


def suggest_mode(
    requested: AnalysisMode,
    classification: Classification,
    threshold: float = MODE_SUGGESTION_THRESHOLD,
) -> ModeSuggestion | None:
    """Suggest another mode when the detected type disagrees with ``requested``.

    ``general`` counts as ``language``. The confidence must be strictly above
    ``threshold``: 0.70 is suppressed, 0.71 is suggested.
    """
    detected = classification.detected_type.as_mode()
    if detected == requested or classification.confidence <= threshold:
        return None

    explanation = classification.explanation or (
        f"This text looks like {detected.value} content; "
        f"the {detected.value} rubric may give more relevant feedback."
    )
    return ModeSuggestion(suggested_mode=detected, explanation=explanation)
