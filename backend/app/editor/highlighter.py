"""Highlight applier - turns analysis issues into severity-tagged marks."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from backend.app.editor.document import HIGHLIGHT, Mark, RichDocument
from backend.app.editor.locator import locate
from backend.app.editor.state import EditorState
from backend.app.models.analysis import AppliedHighlight, Issue
from backend.app.models.common import Severity

logger = logging.getLogger(__name__)

# One visual treatment per severity (class names understood by the web editor)
SEVERITY_CLASSES: dict[Severity, str] = {
    Severity.high: "bg-red-200",
    Severity.medium: "bg-yellow-200",
    Severity.low: "bg-blue-200",
}


@dataclass(frozen=True)
class HighlightOutcome:
    """New document state plus the highlights that made it in."""

    document: RichDocument
    highlights: tuple[AppliedHighlight, ...]


def highlight_mark(severity: Severity) -> Mark:
    """Build the highlight mark for a severity."""
    return Mark.create(HIGHLIGHT, **{"class": SEVERITY_CLASSES[severity], "severity": severity.value})


def clear_highlights(document: RichDocument) -> RichDocument:
    """Remove every highlight mark, leaving text and other formatting intact."""
    return document.remove_marks(HIGHLIGHT)


def apply_highlights(
    source: EditorState | RichDocument, issues: Sequence[Issue]
) -> HighlightOutcome:
    """Produce a new document with one highlight per locatable issue.

    Existing highlights are cleared first, so applying the same issues twice
    gives the same document as applying them once. Issues are processed in
    input order; an issue overlapping an earlier one takes over the overlap.
    Issues whose text is not in the document are skipped without error.

    The editor itself is never written here: pushing the returned document
    into a live editor is the synchronizer's job, and persisting it is the
    caller's.

    Args:
        source: Live editor (its current document is read) or a document
        issues: Normalized issues from the analysis engine

    Returns:
        HighlightOutcome with the highlighted document and applied spans
    """
    document = source.document if isinstance(source, EditorState) else source
    document = clear_highlights(document)

    applied: list[AppliedHighlight] = []
    for index, issue in enumerate(issues):
        # Re-read the snapshot for every issue rather than caching offsets
        span = locate(document.plain_text, issue.text)
        if span is None:
            logger.debug(f"Issue {index} text not found in document, skipping highlight")
            continue

        document = document.add_mark(span.start, span.end, highlight_mark(issue.severity))
        applied.append(AppliedHighlight(issue_index=index, span=span, severity=issue.severity))

    return HighlightOutcome(document=document, highlights=tuple(applied))
