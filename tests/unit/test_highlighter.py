"""Tests for the highlight applier."""

from backend.app.editor.document import HIGHLIGHT, RichDocument
from backend.app.editor.highlighter import (
    SEVERITY_CLASSES,
    apply_highlights,
    clear_highlights,
    highlight_mark,
)
from backend.app.editor.html import from_html, to_html
from backend.app.editor.state import EditorState
from backend.app.models.analysis import AppliedHighlight, Issue, Span
from backend.app.models.common import Severity


def _issue(text: str, severity: Severity = Severity.medium) -> Issue:
    return Issue(text=text, suggestion="replacement", reason="", severity=severity)


def test_each_severity_has_distinct_treatment() -> None:
    assert set(SEVERITY_CLASSES) == set(Severity)
    assert len(set(SEVERITY_CLASSES.values())) == 3
    assert highlight_mark(Severity.high).attr("class") == "bg-red-200"
    assert highlight_mark(Severity.low).attr("severity") == "low"


def test_apply_highlights_marks_located_issue() -> None:
    document = RichDocument.from_plain_text("The chairman will decide.")

    outcome = apply_highlights(document, [_issue("chairman")])

    assert outcome.highlights == (
        AppliedHighlight(issue_index=0, span=Span(start=4, end=12), severity=Severity.medium),
    )
    assert to_html(outcome.document) == (
        '<p>The <mark class="bg-yellow-200" data-severity="medium">chairman</mark>'
        " will decide.</p>"
    )


def test_apply_highlights_skips_missing_issue_and_keeps_indexes() -> None:
    document = RichDocument.from_plain_text("Hey guys, welcome.")

    outcome = apply_highlights(document, [_issue("chairman"), _issue("guys", Severity.low)])

    assert [h.issue_index for h in outcome.highlights] == [1]
    assert outcome.highlights[0].span == Span(start=4, end=8)


def test_apply_highlights_is_idempotent() -> None:
    document = RichDocument.from_plain_text("The chairman and the salesman.")
    issues = [_issue("chairman"), _issue("salesman", Severity.high)]

    once = apply_highlights(document, issues)
    twice = apply_highlights(once.document, issues)

    assert twice.document == once.document
    assert twice.highlights == once.highlights


def test_apply_highlights_clears_previous_highlights() -> None:
    document = apply_highlights(
        RichDocument.from_plain_text("The chairman will decide."), [_issue("chairman")]
    ).document

    outcome = apply_highlights(document, [])

    assert outcome.document.mark_spans(HIGHLIGHT) == []
    assert outcome.highlights == ()


def test_later_overlapping_issue_takes_over_overlap() -> None:
    document = RichDocument.from_plain_text("the chairman of mankind")

    outcome = apply_highlights(
        document, [_issue("chairman of"), _issue("of mankind", Severity.high)]
    )

    spans = [
        (start, end, mark.attr("severity"))
        for start, end, mark in outcome.document.mark_spans(HIGHLIGHT)
    ]
    assert spans == [(4, 13, "medium"), (13, 23, "high")]
    assert len(outcome.highlights) == 2


def test_apply_highlights_preserves_other_formatting() -> None:
    document = from_html("<p>The <strong>chairman</strong> said</p>")

    outcome = apply_highlights(document, [_issue("chairman")])

    assert to_html(outcome.document) == (
        '<p>The <strong><mark class="bg-yellow-200" data-severity="medium">chairman</mark>'
        "</strong> said</p>"
    )


def test_apply_highlights_reads_editor_without_writing_it() -> None:
    editor = EditorState(RichDocument.from_plain_text("The chairman will decide."))
    before = editor.serialize()

    outcome = apply_highlights(editor, [_issue("chairman")])

    assert editor.serialize() == before
    assert editor.history_depth == 0
    assert len(outcome.highlights) == 1


def test_repeated_issue_highlights_first_occurrence_only() -> None:
    document = RichDocument.from_plain_text("guys and guys")

    outcome = apply_highlights(document, [_issue("guys", Severity.low)])

    assert [(s, e) for s, e, _ in outcome.document.mark_spans(HIGHLIGHT)] == [(0, 4)]


def test_clear_highlights_keeps_text() -> None:
    highlighted = apply_highlights(
        RichDocument.from_plain_text("The chairman"), [_issue("chairman")]
    ).document

    assert clear_highlights(highlighted) == RichDocument.from_plain_text("The chairman")
