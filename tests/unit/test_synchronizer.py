"""Tests for the editor state synchronizer."""

from backend.app.editor.document import HIGHLIGHT, RichDocument
from backend.app.editor.state import EditorState, EditorStatus, Selection
from backend.app.editor.sync import EditorSynchronizer, is_still_relevant
from backend.app.models.analysis import Issue
from backend.app.models.common import Severity

CHAIRMAN = Issue(text="chairman", suggestion="chairperson", severity=Severity.medium)


def test_identical_content_is_noop() -> None:
    editor = EditorState.from_html("<p>Hello</p>")
    editor.set_selection(3)

    changed = EditorSynchronizer().sync_external_content(editor, "<p>Hello</p>")

    assert changed is False
    assert editor.selection == Selection.cursor(3)
    assert editor.history_depth == 0


def test_equivalent_markup_is_noop() -> None:
    editor = EditorState.from_html("<p><b>Hi</b></p>")

    changed = EditorSynchronizer().sync_external_content(editor, "<p><b>Hi</b></p>")

    assert changed is False
    assert editor.history_depth == 0


def test_changed_content_replaces_and_is_undoable() -> None:
    editor = EditorState.from_html("<p>Hello</p>")

    changed = EditorSynchronizer().sync_external_content(editor, "<p>Goodbye</p>")

    assert changed is True
    assert editor.plain_text == "Goodbye"
    assert editor.status is EditorStatus.clean
    assert editor.history_depth == 1

    editor.undo()
    assert editor.plain_text == "Hello"


def test_selection_is_clamped_to_new_content() -> None:
    editor = EditorState.from_html("<p>Hello world</p>")
    editor.set_selection(11)

    EditorSynchronizer().sync_external_content(editor, "<p>Hi</p>")

    assert editor.selection == Selection.cursor(2)


def test_external_content_wins_over_local_edits() -> None:
    editor = EditorState.from_html("<p>Hello</p>")
    editor.set_selection(5)
    editor.type_text(" there")
    assert editor.status is EditorStatus.dirty

    EditorSynchronizer().sync_external_content(editor, "<p>Server copy</p>")

    assert editor.plain_text == "Server copy"
    assert editor.status is EditorStatus.clean


def test_is_still_relevant() -> None:
    assert is_still_relevant(EditorState.from_html("<p>text</p>")) is True
    assert is_still_relevant(EditorState()) is False
    assert is_still_relevant(EditorState.from_html("<p>   </p>")) is False


def test_apply_analysis_discards_stale_response() -> None:
    editor = EditorState()

    outcome = EditorSynchronizer().apply_analysis(editor, [CHAIRMAN])

    assert outcome is None
    assert editor.serialize() == ""
    assert editor.history_depth == 0


def test_apply_analysis_locates_against_current_content() -> None:
    """Text typed while the request was in flight shifts the highlight."""
    editor = EditorState(RichDocument.from_plain_text("The chairman will decide."))
    editor.type_text("Today, ")

    outcome = EditorSynchronizer().apply_analysis(editor, [CHAIRMAN])

    assert outcome is not None
    assert outcome.highlights[0].span.start == 11
    assert [(s, e) for s, e, _ in editor.document.mark_spans(HIGHLIGHT)] == [(11, 19)]
    assert editor.status is EditorStatus.clean


def test_apply_analysis_twice_does_not_grow_history() -> None:
    editor = EditorState(RichDocument.from_plain_text("The chairman will decide."))
    synchronizer = EditorSynchronizer()

    synchronizer.apply_analysis(editor, [CHAIRMAN])
    depth = editor.history_depth
    synchronizer.apply_analysis(editor, [CHAIRMAN])

    assert depth == 1
    assert editor.history_depth == 1


def test_push_document_keeps_cursor_when_in_range() -> None:
    editor = EditorState(RichDocument.from_plain_text("The chairman will decide."))
    editor.set_selection(8)

    EditorSynchronizer().apply_analysis(editor, [CHAIRMAN])

    assert editor.selection == Selection.cursor(8)
