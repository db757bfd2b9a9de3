"""Prometheus metrics for the analysis pipeline."""

from prometheus_client import Counter, Histogram

analysis_requests_total = Counter(
    "analysis_requests_total",
    "Total analysis requests by mode and outcome",
    ["mode", "outcome"],
)

analysis_latency_ms = Histogram(
    "analysis_latency_ms",
    "End-to-end analysis latency in milliseconds",
    ["mode"],
    buckets=[100, 250, 500, 1000, 2000, 4000, 8000, 16000, 30000],
)

engine_errors_total = Counter(
    "engine_errors_total",
    "Total analysis engine errors",
    ["kind"],
)

issues_dropped_total = Counter(
    "issues_dropped_total",
    "Engine issues dropped during normalization",
)

highlights_applied_total = Counter(
    "highlights_applied_total",
    "Highlights applied to documents",
    ["severity"],
)

mode_suggestions_total = Counter(
    "mode_suggestions_total",
    "Mode suggestions emitted",
    ["requested", "suggested"],
)


class PrometheusAnalysisMetrics:
    """Prometheus-based analysis metrics implementation."""

    def record_request(self, mode: str, outcome: str, latency_ms: float) -> None:
        """Record one finished analysis."""
        analysis_requests_total.labels(mode=mode, outcome=outcome).inc()
        analysis_latency_ms.labels(mode=mode).observe(latency_ms)

    def inc_engine_error(self, kind: str) -> None:
        engine_errors_total.labels(kind=kind).inc()

    def inc_dropped(self, count: int) -> None:
        if count:
            issues_dropped_total.inc(count)

    def inc_highlight(self, severity: str) -> None:
        highlights_applied_total.labels(severity=severity).inc()

    def inc_mode_suggestion(self, requested: str, suggested: str) -> None:
        mode_suggestions_total.labels(requested=requested, suggested=suggested).inc()
