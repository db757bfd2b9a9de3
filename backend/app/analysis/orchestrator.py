"""Analysis orchestrator - one analysis request end to end.

validate -> (rubric request || classification) -> parse/normalize ->
highlight against the live editor -> combined outcome.
"""

import asyncio
import logging
import time
from typing import Protocol

from backend.app.analysis.errors import (
    AnalysisError,
    ContentTooLongError,
    EmptyContentError,
    MalformedResponseError,
)
from backend.app.analysis.parsing import ParsedAnalysis, parse_analysis_response
from backend.app.analysis.rubrics import (
    MODE_SUGGESTION_THRESHOLD,
    classify_content,
    coerce_mode,
    select_rubric,
    suggest_mode,
)
from backend.app.editor.state import EditorState
from backend.app.editor.sync import EditorSynchronizer
from backend.app.llm.client import AnalysisEngine
from backend.app.models.analysis import AnalysisOutcome, AppliedHighlight, ModeSuggestion
from backend.app.models.common import AnalysisMode
from backend.app.utils.logging import StructuredAnalysisLogger
from backend.app.utils.metrics import PrometheusAnalysisMetrics

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORDS = 10_000


class AnalysisMetrics(Protocol):
    """Metrics interface for analysis requests."""

    def record_request(self, mode: str, outcome: str, latency_ms: float) -> None: ...

    def inc_engine_error(self, kind: str) -> None: ...

    def inc_dropped(self, count: int) -> None: ...

    def inc_highlight(self, severity: str) -> None: ...

    def inc_mode_suggestion(self, requested: str, suggested: str) -> None: ...


def count_words(content: str) -> int:
    """Words in ``content``, split on whitespace after trimming."""
    return len(content.strip().split())


def validate_content(content: str, max_words: int = DEFAULT_MAX_WORDS) -> int:
    """Reject content that must never reach the engine.

    Returns:
        Word count of ``content``

    Raises:
        EmptyContentError: If content is empty or whitespace only
        ContentTooLongError: If content has more than ``max_words`` words
    """
    if not content.strip():
        raise EmptyContentError()

    word_count = count_words(content)
    if word_count > max_words:
        raise ContentTooLongError(word_count, max_words)
    return word_count


class AnalysisOrchestrator:
    """Drives one analysis request; holds no per-request state.

    All collaborators are injected so tests can run against fakes.
    """

    def __init__(
        self,
        engine: AnalysisEngine,
        *,
        synchronizer: EditorSynchronizer | None = None,
        metrics: AnalysisMetrics | None = None,
        structured_logger: StructuredAnalysisLogger | None = None,
        max_words: int = DEFAULT_MAX_WORDS,
        suggestion_threshold: float = MODE_SUGGESTION_THRESHOLD,
    ) -> None:
        self._engine = engine
        self._synchronizer = synchronizer or EditorSynchronizer()
        self._metrics = metrics or PrometheusAnalysisMetrics()
        self._log = structured_logger or StructuredAnalysisLogger()
        self._max_words = max_words
        self._suggestion_threshold = suggestion_threshold

    async def analyze(
        self,
        content: str,
        mode: AnalysisMode | str,
        *,
        editor: EditorState | None = None,
    ) -> AnalysisOutcome:
        """Analyze ``content`` with the rubric for ``mode``.

        Validation happens before any engine call. The rubric request and the
        classification request run concurrently and both finish before the
        outcome is built. When ``editor`` is given, highlights are computed
        against its content as it is *after* the engine responds (the user may
        have kept typing), and a response for an editor that has since been
        cleared is discarded.

        Args:
            content: Text to analyze
            mode: Requested analysis mode
            editor: Live editor to highlight, if any

        Returns:
            AnalysisOutcome with the analysis, optional mode suggestion and
            the highlights that were applied

        Raises:
            InvalidModeError, EmptyContentError, ContentTooLongError: Before
                any engine call
            MalformedResponseError: Engine response is not a valid analysis
            RateLimitedError, EngineAuthError, EngineError: Engine failures,
                never retried here
        """
        started = time.perf_counter()
        mode_label = mode.value if isinstance(mode, AnalysisMode) else "unknown"
        word_count = 0

        try:
            requested = coerce_mode(mode)
            mode_label = requested.value
            word_count = validate_content(content, self._max_words)

            parsed, suggestion = await self._run_engine_calls(content, requested)

            highlights: tuple[AppliedHighlight, ...] = ()
            applied = False
            if editor is not None:
                outcome = self._synchronizer.apply_analysis(editor, parsed.result.issues)
                if outcome is not None:
                    highlights = outcome.highlights
                    applied = True
        except AnalysisError as e:
            self._record_failure(
                mode_label, e.code, started, word_count, engine_error=e.status_code != 400
            )
            raise
        except Exception:
            self._record_failure(mode_label, "internal_error", started, word_count)
            raise

        latency_ms = (time.perf_counter() - started) * 1000
        self._metrics.record_request(mode_label, "success", latency_ms)
        self._metrics.inc_dropped(parsed.dropped)
        for highlight in highlights:
            self._metrics.inc_highlight(highlight.severity.value)
        if suggestion is not None:
            self._metrics.inc_mode_suggestion(mode_label, suggestion.suggested_mode.value)

        self._log.log_analysis(
            mode=mode_label,
            outcome="success",
            latency_ms=latency_ms,
            word_count=word_count,
            issue_count=len(parsed.result.issues),
            dropped_count=parsed.dropped,
            highlight_count=len(highlights),
            mode_suggestion=suggestion.suggested_mode.value if suggestion else None,
        )

        return AnalysisOutcome(
            analysis=parsed.result,
            mode_suggestion=suggestion,
            highlights=highlights,
            applied=applied,
        )

    async def _run_engine_calls(
        self, content: str, requested: AnalysisMode
    ) -> tuple[ParsedAnalysis, ModeSuggestion | None]:
        instructions = select_rubric(requested)

        # Both calls always run to completion; errors are re-raised afterwards
        raw, suggestion = await asyncio.gather(
            self._engine.complete(system_instructions=instructions, user_content=content),
            self._suggest_mode(content, requested),
            return_exceptions=True,
        )
        if isinstance(raw, BaseException):
            raise raw
        if isinstance(suggestion, BaseException):
            raise suggestion

        return parse_analysis_response(raw), suggestion

    async def _suggest_mode(self, content: str, requested: AnalysisMode) -> ModeSuggestion | None:
        try:
            classification = await classify_content(self._engine, content)
        except MalformedResponseError:
            logger.warning("Classification response was malformed, skipping mode suggestion")
            return None
        return suggest_mode(requested, classification, self._suggestion_threshold)

    def _record_failure(
        self,
        mode_label: str,
        code: str,
        started: float,
        word_count: int,
        engine_error: bool = False,
    ) -> None:
        latency_ms = (time.perf_counter() - started) * 1000
        if engine_error:
            self._metrics.inc_engine_error(code)
        self._metrics.record_request(mode_label, code, latency_ms)
        self._log.log_analysis(
            mode=mode_label,
            outcome="error",
            latency_ms=latency_ms,
            word_count=word_count,
            error_code=code,
        )
