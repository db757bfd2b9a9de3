"""Live editor state - document, selection and undo history.

The state has exactly two kinds of writers: the user-input operations on this
class (typing, deleting, moving the selection, undo) and the
``EditorSynchronizer``, which is the only component allowed to push external
content in. Everything else reads snapshots (``document``, ``plain_text``,
``serialize()``).
"""

from dataclasses import dataclass
from enum import Enum

from backend.app.editor.document import RichDocument
from backend.app.editor.html import from_html, to_html


class EditorStatus(str, Enum):
    """Whether the content still matches the last externally synced value."""

    clean = "clean"
    dirty = "dirty"


@dataclass(frozen=True)
class Selection:
    """Selection in plain-text offsets. A collapsed selection is the cursor."""

    anchor: int
    head: int

    @classmethod
    def cursor(cls, offset: int) -> "Selection":
        return cls(anchor=offset, head=offset)

    @property
    def start(self) -> int:
        return min(self.anchor, self.head)

    @property
    def end(self) -> int:
        return max(self.anchor, self.head)

    @property
    def collapsed(self) -> bool:
        return self.anchor == self.head

    def clamp(self, length: int) -> "Selection":
        """Keep both ends within [0, length]."""
        return Selection(
            anchor=max(0, min(self.anchor, length)),
            head=max(0, min(self.head, length)),
        )


class EditorState:
    """Mutable live editor."""

    def __init__(
        self,
        document: RichDocument | None = None,
        *,
        selection: Selection | None = None,
        history_limit: int = 100,
    ) -> None:
        self._document = document or RichDocument()
        self._selection = (selection or Selection.cursor(0)).clamp(len(self._document.plain_text))
        self._undo: list[tuple[RichDocument, Selection]] = []
        self._history_limit = history_limit
        self._last_synced = to_html(self._document)

    @classmethod
    def from_html(cls, content: str, **kwargs: object) -> "EditorState":
        """Open an editor on serialized rich content (e.g. a stored document)."""
        return cls(from_html(content), **kwargs)  # type: ignore[arg-type]

    @property
    def document(self) -> RichDocument:
        return self._document

    @property
    def plain_text(self) -> str:
        return self._document.plain_text

    @property
    def selection(self) -> Selection:
        return self._selection

    @property
    def status(self) -> EditorStatus:
        if self.serialize() == self._last_synced:
            return EditorStatus.clean
        return EditorStatus.dirty

    @property
    def history_depth(self) -> int:
        return len(self._undo)

    def serialize(self) -> str:
        return to_html(self._document)

    # User input

    def set_selection(self, anchor: int, head: int | None = None) -> None:
        """Move the selection; offsets inside a block separator snap to the block end."""
        selection = Selection(anchor=anchor, head=anchor if head is None else head)
        selection = selection.clamp(len(self.plain_text))
        self._selection = Selection(
            anchor=self._document.snap_offset(selection.anchor),
            head=self._document.snap_offset(selection.head),
        )

    def type_text(self, text: str) -> None:
        """Replace the selection with ``text`` and place the cursor after it."""
        if not text and self._selection.collapsed:
            return

        self._push_history()
        start, end = self._selection.start, self._selection.end
        document = self._document.delete_range(start, end)
        cursor = 0
        if document.blocks:
            cursor = document.offset_of(*document.resolve(start))
        self._document = document.insert_text(cursor, text)
        self._selection = Selection.cursor(cursor + len(text))

    def delete_backward(self) -> None:
        """Backspace: delete the selection, or the character before the cursor."""
        start, end = self._selection.start, self._selection.end
        if self._selection.collapsed:
            if start == 0:
                return
            # Backspace at a block start removes the whole separator
            start = self._document.snap_offset(start - 1)

        self._push_history()
        self._document = self._document.delete_range(start, end)
        self._selection = Selection.cursor(start).clamp(len(self.plain_text))

    def undo(self) -> bool:
        """Restore the previous document. Returns False when history is empty."""
        if not self._undo:
            return False
        self._document, selection = self._undo.pop()
        self._selection = selection.clamp(len(self.plain_text))
        return True

    # Synchronizer-only

    def _replace_content(self, document: RichDocument, selection: Selection, serialized: str) -> None:
        self._push_history()
        self._document = document
        self._selection = selection
        self._last_synced = serialized

    def _mark_synced(self, serialized: str) -> None:
        self._last_synced = serialized

    def _push_history(self) -> None:
        self._undo.append((self._document, self._selection))
        if len(self._undo) > self._history_limit:
            del self._undo[0]
