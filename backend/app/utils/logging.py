"""Structured logging for analysis requests."""

import logging
from typing import Any

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for the API process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


class StructuredAnalysisLogger:
    """Structured logger for analysis requests."""

    def log_analysis(
        self,
        mode: str,
        outcome: str,
        latency_ms: float,
        word_count: int,
        issue_count: int = 0,
        dropped_count: int = 0,
        highlight_count: int = 0,
        mode_suggestion: str | None = None,
        error_code: str | None = None,
    ) -> None:
        """Log one analysis request with structured data."""
        log_data: dict[str, Any] = {
            "mode": mode,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
            "word_count": word_count,
            "issues": issue_count,
            "dropped": dropped_count,
            "highlights": highlight_count,
        }

        if mode_suggestion:
            log_data["mode_suggestion"] = mode_suggestion
        if error_code:
            log_data["error_code"] = error_code

        log_msg = f"Analysis: mode={mode} - {outcome}"

        if outcome == "success":
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})
