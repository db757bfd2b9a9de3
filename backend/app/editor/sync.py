"""Editor state synchronizer - the single writer of external content."""

import logging
from collections.abc import Sequence

from backend.app.editor.document import RichDocument
from backend.app.editor.highlighter import HighlightOutcome, apply_highlights
from backend.app.editor.html import from_html, to_html
from backend.app.editor.state import EditorState, EditorStatus
from backend.app.models.analysis import Issue

logger = logging.getLogger(__name__)


def is_still_relevant(editor: EditorState) -> bool:
    """Whether an analysis response may still be applied to this editor.

    A response that arrives after the user cleared the editor is stale.
    """
    return bool(editor.plain_text.strip())


class EditorSynchronizer:
    """Pushes externally supplied content into a live editor.

    Content is only replaced when it actually differs from what the editor
    holds, so repeated no-op updates keep the cursor and undo history intact.
    External content wins over local edits (no merge is attempted).
    """

    def sync_external_content(self, editor: EditorState, new_rich_content: str) -> bool:
        """Overwrite the editor with ``new_rich_content`` if it differs.

        Args:
            editor: Live editor
            new_rich_content: Serialized rich content (HTML)

        Returns:
            True if the editor content was replaced, False for a no-op
        """
        current = editor.serialize()
        if new_rich_content == current:
            editor._mark_synced(current)
            return False

        document = from_html(new_rich_content)
        canonical = to_html(document)
        if canonical == current:
            # Same content, different spelling of the markup
            editor._mark_synced(current)
            return False

        if editor.status is EditorStatus.dirty:
            logger.info("External content replaces unsynced local edits")

        previous = editor.selection
        selection = previous.clamp(len(document.plain_text))
        if selection != previous:
            logger.debug(
                f"Selection {previous.anchor}-{previous.head} clamped to "
                f"{selection.anchor}-{selection.head} after external update"
            )

        editor._replace_content(document, selection, canonical)
        return True

    def push_document(self, editor: EditorState, document: RichDocument) -> bool:
        """Push a document produced elsewhere (e.g. by the highlight applier)."""
        return self.sync_external_content(editor, to_html(document))

    def apply_analysis(
        self, editor: EditorState, issues: Sequence[Issue]
    ) -> HighlightOutcome | None:
        """Highlight ``issues`` against the editor's current content and push the result.

        Returns:
            The highlight outcome, or None when the response is stale and was
            discarded without touching the editor
        """
        if not is_still_relevant(editor):
            logger.info("Discarding stale analysis response: editor is empty")
            return None

        outcome = apply_highlights(editor, issues)
        self.push_document(editor, outcome.document)
        return outcome
