"""Span locator - maps flagged text to offsets in a plain-text snapshot."""

from backend.app.models.analysis import Span


def locate(plain_text: str, issue_text: str) -> Span | None:
    """Find the first occurrence of ``issue_text`` in ``plain_text``.

    Pure function. The search is exact and case-sensitive, and only the first
    occurrence is ever returned even when the text repeats. A miss is an
    expected outcome (the passage was edited away, or the engine paraphrased
    instead of quoting) and is reported as ``None``, never raised.

    Args:
        plain_text: Plain-text projection of the document
        issue_text: Passage quoted by the analysis engine

    Returns:
        Span covering the first match, or None when absent or ``issue_text``
        is empty (no zero-length spans are produced)
    """
    if not issue_text:
        return None

    start = plain_text.find(issue_text)
    if start < 0:
        return None

    return Span(start=start, end=start + len(issue_text))
