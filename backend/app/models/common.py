"""Common types and enums shared across all models."""

from enum import Enum


class AnalysisMode(str, Enum):
    """Rubric the analysis engine applies to submitted content."""

    language = "language"
    policy = "policy"
    recruitment = "recruitment"


class Severity(str, Enum):
    """Issue severity, drives the highlight treatment."""

    low = "low"
    medium = "medium"
    high = "high"


class DetectedType(str, Enum):
    """Content type reported by the classification prompt.

    ``general`` has no rubric of its own and compares equal to ``language``
    when arbitrating mode suggestions.
    """

    general = "general"
    language = "language"
    policy = "policy"
    recruitment = "recruitment"

    def as_mode(self) -> AnalysisMode:
        """Collapse the detected type onto the closest analysis mode."""
        if self in (DetectedType.general, DetectedType.language):
            return AnalysisMode.language
        return AnalysisMode(self.value)
