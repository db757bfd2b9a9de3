"""Analysis engine clients with OpenAI integration.

Security: Reads API key from environment only, never hardcoded.
Provides a deterministic lexicon engine when no key is present for testing
and offline development.
"""

import json
import logging
import re
from typing import Any, Protocol

from openai import APIConnectionError, APIStatusError, AsyncOpenAI

from backend.app.analysis.errors import (
    AnalysisError,
    EngineAuthError,
    EngineError,
    MalformedResponseError,
    RateLimitedError,
)
from backend.app.config import get_settings
from backend.app.llm.prompts import CLASSIFICATION_INSTRUCTIONS

logger = logging.getLogger(__name__)


class AnalysisEngine(Protocol):
    """Protocol for language-analysis engines.

    Any engine that honours this contract is interchangeable.
    """

    async def complete(self, *, system_instructions: str, user_content: str) -> str:
        """Run one structured request.

        Args:
            system_instructions: Rubric or classification instructions
            user_content: Text under analysis

        Returns:
            Raw JSON text produced by the engine

        Raises:
            RateLimitedError: Provider returned 429
            EngineAuthError: Provider returned 401
            EngineError: Any other provider failure
        """
        ...


def error_for_status(
    status: int, message: str, *, retry_after: int | None = None
) -> AnalysisError:
    """Map a provider status code onto the analysis error taxonomy."""
    if status == 429:
        return RateLimitedError(retry_after=retry_after)
    if status == 401:
        return EngineAuthError()
    return EngineError(message, status=status)


def _parse_retry_after(headers: Any) -> int | None:
    value = headers.get("retry-after") if headers is not None else None
    if value is None:
        return None
    try:
        return max(1, int(float(value)))
    except (TypeError, ValueError):
        return None


# (term, suggestion, reason, severity). Terms must not overlap one another.
STUB_LEXICON: tuple[tuple[str, str, str, str], ...] = (
    ("chairman", "chairperson", "Gendered term; use a gender-neutral title.", "medium"),
    ("salesman", "salesperson", "Gendered term; use a gender-neutral title.", "medium"),
    ("manpower", "workforce", "Gendered term for a group of workers.", "medium"),
    ("mankind", "humankind", "Gendered term for people in general.", "medium"),
    ("handicapped parking", "accessible parking", "Outdated, ableist term.", "high"),
    ("wheelchair-bound", "wheelchair user", "Defines a person by their mobility aid.", "high"),
    ("blacklist", "blocklist", "Associates 'black' with something negative.", "medium"),
    ("whitelist", "allowlist", "Associates 'white' with something positive.", "medium"),
    ("guys", "everyone", "Gendered form of address for a mixed group.", "low"),
    ("crazy", "surprising", "Trivializes mental illness.", "low"),
    ("he or she", "they", "Excludes non-binary people.", "low"),
    ("rockstar", "skilled professional", "Jargon that is gender- and culture-coded.", "medium"),
    ("ninja", "expert", "Jargon that is gender- and culture-coded.", "medium"),
    ("digital native", "comfortable with digital tools", "Age-coded phrase.", "high"),
    ("young and dynamic", "energetic", "Age-coded phrase.", "high"),
)

_POLICY_CUES = ("policy", "employees must", "shall", "procedure", "compliance", "entitled to")
_RECRUITMENT_CUES = (
    "we are looking for",
    "we're hiring",
    "candidate",
    "apply",
    "job",
    "role",
    "requirements",
    "years of experience",
)


class DeterministicStubEngine:
    """Deterministic lexicon engine (no API key required)."""

    async def complete(self, *, system_instructions: str, user_content: str) -> str:
        """Answer analysis and classification requests from fixed word lists."""
        if system_instructions == CLASSIFICATION_INSTRUCTIONS:
            return json.dumps(self._classify(user_content))
        return json.dumps({"issues": self._find_issues(user_content)})

    def _find_issues(self, text: str) -> list[dict[str, str]]:
        issues = []
        for term, suggestion, reason, severity in STUB_LEXICON:
            match = re.search(rf"\b{re.escape(term)}\b", text, flags=re.IGNORECASE)
            if match is None:
                continue
            issues.append(
                {
                    "text": match.group(0),
                    "suggestion": suggestion,
                    "reason": reason,
                    "severity": severity,
                }
            )
        return issues

    def _classify(self, text: str) -> dict[str, Any]:
        lowered = text.lower()
        policy_hits = sum(lowered.count(cue) for cue in _POLICY_CUES)
        recruitment_hits = sum(lowered.count(cue) for cue in _RECRUITMENT_CUES)

        if policy_hits == recruitment_hits:
            return {
                "type": "general",
                "confidence": 0.5,
                "explanation": "No strong policy or recruitment signals found.",
            }

        detected = "policy" if policy_hits > recruitment_hits else "recruitment"
        winning = max(policy_hits, recruitment_hits)
        confidence = round(min(0.95, 0.5 + 0.1 * (winning - min(policy_hits, recruitment_hits))), 2)
        return {
            "type": detected,
            "confidence": confidence,
            "explanation": f"The text contains {winning} typical {detected} phrase(s).",
        }


class OpenAIEngine:
    """OpenAI-backed analysis engine."""

    def __init__(self, api_key: str, model: str = "gpt-4o", timeout_seconds: float = 30.0):
        """Initialize OpenAI engine.

        Args:
            api_key: OpenAI API key (read from environment)
            model: Model name to use
            timeout_seconds: Per-request timeout
        """
        # Retries are the caller's decision; the SDK would otherwise retry 429s
        self.client = AsyncOpenAI(api_key=api_key, timeout=timeout_seconds, max_retries=0)
        self.model = model

    async def complete(self, *, system_instructions: str, user_content: str) -> str:
        """Run one JSON-mode chat completion."""
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_instructions},
                    {"role": "user", "content": user_content},
                ],
                response_format={"type": "json_object"},
                temperature=0,
            )
        except APIStatusError as e:
            logger.error(f"OpenAI API call failed with status {e.status_code}: {e.message}")
            raise error_for_status(
                e.status_code, e.message, retry_after=_parse_retry_after(e.response.headers)
            ) from e
        except APIConnectionError as e:
            logger.error(f"OpenAI API connection failed: {e}")
            raise EngineError(str(e) or "connection failed") from e

        content = response.choices[0].message.content
        if not content or not content.strip():
            logger.warning("OpenAI returned empty response")
            raise MalformedResponseError()

        return content


async def get_analysis_engine() -> AnalysisEngine:
    """Factory function to get appropriate engine based on config.

    Returns:
        OpenAIEngine if API key is configured, DeterministicStubEngine otherwise
    """
    settings = get_settings()
    api_key = settings.openai_api_key

    if api_key and api_key.get_secret_value():
        logger.info("Using OpenAI engine for analysis")
        return OpenAIEngine(
            api_key=api_key.get_secret_value(),
            model=settings.openai_model,
            timeout_seconds=settings.engine_timeout_seconds,
        )

    logger.warning("No OpenAI API key configured, using deterministic stub engine")
    return DeterministicStubEngine()
