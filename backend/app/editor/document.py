"""Immutable rich-text document model.

A document is a sequence of blocks (paragraphs, headings, list items, quotes).
Each block is a sequence of text runs and each run carries a set of marks
(bold, italic, highlight, ...). All offsets exposed by this module are
character offsets into the plain-text projection, where blocks are joined with
``BLOCK_SEPARATOR``. Separator characters never carry marks.

Every operation returns a new document; runs are kept normalized (no empty
runs, no two adjacent runs with identical marks) so that structurally equal
documents compare equal.
"""

from collections.abc import Iterable
from dataclasses import dataclass, replace
from itertools import pairwise

BLOCK_SEPARATOR = "\n\n"

BLOCK_TYPES = ("paragraph", "heading", "bullet_item", "ordered_item", "blockquote")

HIGHLIGHT = "highlight"

# Outermost first when serialized
MARK_ORDER = ("bold", "italic", "underline", "strike", "code", HIGHLIGHT)


@dataclass(frozen=True)
class Mark:
    """Inline annotation. ``attrs`` is a sorted tuple of pairs to stay hashable."""

    type: str
    attrs: tuple[tuple[str, str], ...] = ()

    @classmethod
    def create(cls, type: str, **attrs: str) -> "Mark":
        return cls(type=type, attrs=tuple(sorted(attrs.items())))

    def attr(self, name: str, default: str | None = None) -> str | None:
        for key, value in self.attrs:
            if key == name:
                return value
        return default


@dataclass(frozen=True)
class TextRun:
    """Contiguous text sharing one set of marks."""

    text: str
    marks: frozenset[Mark] = frozenset()

    def mark(self, type: str) -> Mark | None:
        for mark in self.marks:
            if mark.type == type:
                return mark
        return None

    def with_mark(self, mark: Mark) -> "TextRun":
        """Add ``mark``, replacing any mark of the same type."""
        kept = frozenset(m for m in self.marks if m.type != mark.type)
        return TextRun(self.text, kept | {mark})

    def without_mark(self, type: str) -> "TextRun":
        return TextRun(self.text, frozenset(m for m in self.marks if m.type != type))


def normalize_runs(runs: Iterable[TextRun]) -> tuple[TextRun, ...]:
    """Drop empty runs and merge neighbours with identical marks."""
    out: list[TextRun] = []
    for run in runs:
        if not run.text:
            continue
        if out and out[-1].marks == run.marks:
            out[-1] = TextRun(out[-1].text + run.text, run.marks)
        else:
            out.append(run)
    return tuple(out)


def slice_runs(runs: Iterable[TextRun], start: int, end: int) -> tuple[TextRun, ...]:
    """Cut the runs down to the local character range [start, end)."""
    out: list[TextRun] = []
    pos = 0
    for run in runs:
        run_end = pos + len(run.text)
        lo = max(start, pos)
        hi = min(end, run_end)
        if lo < hi:
            out.append(TextRun(run.text[lo - pos : hi - pos], run.marks))
        pos = run_end
    return tuple(out)


@dataclass(frozen=True)
class Block:
    """Block-level node holding inline runs."""

    type: str = "paragraph"
    runs: tuple[TextRun, ...] = ()
    level: int | None = None

    @property
    def text(self) -> str:
        return "".join(run.text for run in self.runs)

    def apply_mark(self, start: int, end: int, mark: Mark) -> "Block":
        """Apply ``mark`` over the local range [start, end)."""
        length = len(self.text)
        start = max(0, min(start, length))
        end = max(start, min(end, length))
        if start == end:
            return self

        head = slice_runs(self.runs, 0, start)
        middle = tuple(run.with_mark(mark) for run in slice_runs(self.runs, start, end))
        tail = slice_runs(self.runs, end, length)
        return replace(self, runs=normalize_runs(head + middle + tail))

    def remove_mark(self, type: str) -> "Block":
        return replace(self, runs=normalize_runs(run.without_mark(type) for run in self.runs))

    def insert_text(self, offset: int, text: str) -> "Block":
        """Insert ``text`` at a local offset, inheriting the preceding run's marks.

        Highlights are never inherited: freshly typed text has not been analyzed.
        """
        length = len(self.text)
        offset = max(0, min(offset, length))

        inherited: frozenset[Mark] = frozenset()
        before = slice_runs(self.runs, 0, offset)
        if before:
            inherited = before[-1].without_mark(HIGHLIGHT).marks
        elif self.runs:
            inherited = self.runs[0].without_mark(HIGHLIGHT).marks

        after = slice_runs(self.runs, offset, length)
        return replace(self, runs=normalize_runs(before + (TextRun(text, inherited),) + after))

    def delete(self, start: int, end: int) -> "Block":
        length = len(self.text)
        head = slice_runs(self.runs, 0, max(0, start))
        tail = slice_runs(self.runs, min(end, length), length)
        return replace(self, runs=normalize_runs(head + tail))


@dataclass(frozen=True)
class RichDocument:
    """Immutable rich-text document."""

    blocks: tuple[Block, ...] = ()

    @classmethod
    def from_plain_text(cls, text: str) -> "RichDocument":
        """Build unformatted paragraphs, one per ``BLOCK_SEPARATOR``-delimited chunk."""
        if not text:
            return cls()
        return cls(
            blocks=tuple(
                Block(runs=normalize_runs([TextRun(chunk)]))
                for chunk in text.split(BLOCK_SEPARATOR)
            )
        )

    @property
    def plain_text(self) -> str:
        return BLOCK_SEPARATOR.join(block.text for block in self.blocks)

    def block_ranges(self) -> list[tuple[int, int]]:
        """Plain-text (start, end) of each block."""
        ranges: list[tuple[int, int]] = []
        pos = 0
        for index, block in enumerate(self.blocks):
            if index:
                pos += len(BLOCK_SEPARATOR)
            end = pos + len(block.text)
            ranges.append((pos, end))
            pos = end
        return ranges

    def resolve(self, offset: int) -> tuple[int, int]:
        """Map a plain-text offset to (block index, local offset).

        Offsets that fall inside a separator resolve to the end of the
        preceding block. Raises IndexError on an empty document.
        """
        if not self.blocks:
            raise IndexError("cannot resolve an offset in an empty document")

        ranges = self.block_ranges()
        for index, (start, end) in enumerate(ranges):
            next_start = ranges[index + 1][0] if index + 1 < len(ranges) else None
            if next_start is None or offset < next_start:
                return index, max(0, min(offset - start, end - start))
        # Unreachable: the last block always matches
        raise IndexError(offset)

    def snap_offset(self, offset: int) -> int:
        """Move an offset inside a block separator to the end of the preceding block."""
        for (_, end), (next_start, _) in pairwise(self.block_ranges()):
            if end < offset < next_start:
                return end
        return offset

    def offset_of(self, index: int, local: int) -> int:
        """Inverse of ``resolve``: plain-text offset of a (block, local) position."""
        return self.block_ranges()[index][0] + local

    def add_mark(self, start: int, end: int, mark: Mark) -> "RichDocument":
        """Apply ``mark`` over every block segment covered by [start, end)."""
        if start >= end:
            return self

        blocks = list(self.blocks)
        for index, (block_start, block_end) in enumerate(self.block_ranges()):
            lo = max(start, block_start)
            hi = min(end, block_end)
            if lo < hi:
                blocks[index] = blocks[index].apply_mark(lo - block_start, hi - block_start, mark)
        return RichDocument(blocks=tuple(blocks))

    def remove_marks(self, type: str) -> "RichDocument":
        return RichDocument(blocks=tuple(block.remove_mark(type) for block in self.blocks))

    def mark_spans(self, type: str) -> list[tuple[int, int, Mark]]:
        """Plain-text ranges carrying a mark of ``type``.

        Adjacent runs that carry the same mark (for instance a highlight split
        by a bold word) are reported as one range.
        """
        spans: list[tuple[int, int, Mark]] = []
        for block, (block_start, _) in zip(self.blocks, self.block_ranges(), strict=True):
            pos = block_start
            for run in block.runs:
                run_end = pos + len(run.text)
                mark = run.mark(type)
                if mark is not None:
                    if spans and spans[-1][1] == pos and spans[-1][2] == mark:
                        spans[-1] = (spans[-1][0], run_end, mark)
                    else:
                        spans.append((pos, run_end, mark))
                pos = run_end
        return spans

    def insert_text(self, offset: int, text: str) -> "RichDocument":
        if not text:
            return self
        if not self.blocks:
            return RichDocument.from_plain_text(text)

        index, local = self.resolve(offset)
        blocks = list(self.blocks)
        blocks[index] = blocks[index].insert_text(local, text)
        return RichDocument(blocks=tuple(blocks))

    def delete_range(self, start: int, end: int) -> "RichDocument":
        """Delete [start, end); a range spanning blocks joins them into the first."""
        if start >= end or not self.blocks:
            return self

        first, first_local = self.resolve(start)
        last, last_local = self.resolve(end)
        blocks = list(self.blocks)

        if first == last:
            blocks[first] = blocks[first].delete(first_local, last_local)
            return RichDocument(blocks=tuple(blocks))

        head = blocks[first]
        tail = blocks[last]
        merged = replace(
            head,
            runs=normalize_runs(
                slice_runs(head.runs, 0, first_local)
                + slice_runs(tail.runs, last_local, len(tail.text))
            ),
        )
        return RichDocument(blocks=tuple(blocks[:first] + [merged] + blocks[last + 1 :]))
