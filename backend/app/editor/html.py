"""HTML serialization for rich-text documents.

The HTML produced here is the persisted ``rich_content`` format and the format
the browser editor exchanges with the API. Serialization is deterministic so
that string comparison of two serializations is a reliable change check.
"""

import html
import re
from html.parser import HTMLParser

from backend.app.editor.document import (
    HIGHLIGHT,
    MARK_ORDER,
    Block,
    Mark,
    RichDocument,
    TextRun,
    normalize_runs,
)

MARK_TAGS = {
    "bold": "strong",
    "italic": "em",
    "underline": "u",
    "strike": "s",
    "code": "code",
    HIGHLIGHT: "mark",
}

PARSED_MARK_TAGS = {
    "strong": "bold",
    "b": "bold",
    "em": "italic",
    "i": "italic",
    "u": "underline",
    "s": "strike",
    "strike": "strike",
    "del": "strike",
    "code": "code",
    "mark": HIGHLIGHT,
}

HEADING_TAGS = {f"h{level}": level for level in range(1, 7)}
LIST_ITEM_TYPES = {"ul": "bullet_item", "ol": "ordered_item"}

# ASCII whitespace as defined by HTML; \xa0 (&nbsp;) is content
WHITESPACE = re.compile(r"[ \t\n\r\f]+")


def _render_attrs(mark: Mark) -> str:
    parts = []
    for name, value in mark.attrs:
        attr_name = name if name == "class" else f"data-{name}"
        parts.append(f' {attr_name}="{html.escape(value, quote=True)}"')
    return "".join(parts)


def _render_run(run: TextRun) -> str:
    text = html.escape(run.text, quote=False).replace("\n", "<br>")
    marks = sorted(
        run.marks,
        key=lambda m: (MARK_ORDER.index(m.type) if m.type in MARK_ORDER else len(MARK_ORDER), m.type),
    )
    opening = "".join(f"<{MARK_TAGS.get(m.type, 'span')}{_render_attrs(m)}>" for m in marks)
    closing = "".join(f"</{MARK_TAGS.get(m.type, 'span')}>" for m in reversed(marks))
    return f"{opening}{text}{closing}"


def to_html(document: RichDocument) -> str:
    """Serialize a document to HTML."""
    parts: list[str] = []
    open_list: str | None = None

    for block in document.blocks:
        list_tag = {"bullet_item": "ul", "ordered_item": "ol"}.get(block.type)
        if list_tag != open_list:
            if open_list:
                parts.append(f"</{open_list}>")
            if list_tag:
                parts.append(f"<{list_tag}>")
            open_list = list_tag

        inner = "".join(_render_run(run) for run in block.runs)
        if block.type == "heading":
            level = block.level or 1
            parts.append(f"<h{level}>{inner}</h{level}>")
        elif list_tag:
            parts.append(f"<li>{inner}</li>")
        elif block.type == "blockquote":
            parts.append(f"<blockquote><p>{inner}</p></blockquote>")
        else:
            parts.append(f"<p>{inner}</p>")

    if open_list:
        parts.append(f"</{open_list}>")
    return "".join(parts)


class _DocumentParser(HTMLParser):
    """Builds a RichDocument from editor HTML.

    Unknown inline tags are transparent; text outside any block opens an
    implicit paragraph unless it is whitespace only. Source whitespace collapses
    the way a browser renders it, so only <br> produces a line break.
    """

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.blocks: list[Block] = []
        self._containers: list[str] = []
        self._marks: list[Mark] = []
        self._block_type: str | None = None
        self._block_level: int | None = None
        self._runs: list[TextRun] = []

    def _current_marks(self) -> frozenset[Mark]:
        by_type: dict[str, Mark] = {}
        for mark in self._marks:
            by_type[mark.type] = mark
        return frozenset(by_type.values())

    def _open_block(self, type: str, level: int | None = None) -> None:
        self._close_block()
        self._block_type = type
        self._block_level = level

    def _close_block(self) -> None:
        if self._block_type is None:
            return
        while self._runs and self._runs[-1].text.endswith(" "):
            last = self._runs.pop()
            trimmed = last.text.rstrip(" ")
            if trimmed:
                self._runs.append(TextRun(trimmed, last.marks))
                break
        self.blocks.append(
            Block(type=self._block_type, runs=normalize_runs(self._runs), level=self._block_level)
        )
        self._block_type = None
        self._block_level = None
        self._runs = []

    def _list_item_type(self) -> str:
        for container in reversed(self._containers):
            if container in LIST_ITEM_TYPES:
                return LIST_ITEM_TYPES[container]
        return "bullet_item"

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag in ("ul", "ol", "blockquote"):
            self._close_block()
            self._containers.append(tag)
        elif tag == "li":
            self._open_block(self._list_item_type())
            self._containers.append("li")
        elif tag == "p":
            in_item = bool(self._containers) and self._containers[-1] == "li"
            if in_item and self._block_type is not None and not self._runs:
                # <li><p>..</p></li> - the paragraph is the list item itself
                return
            if in_item:
                self._open_block(self._list_item_type())
            elif "blockquote" in self._containers:
                self._open_block("blockquote")
            else:
                self._open_block("paragraph")
        elif tag in HEADING_TAGS:
            self._open_block("heading", HEADING_TAGS[tag])
        elif tag == "br":
            self._append_text("\n")
        elif tag in PARSED_MARK_TAGS:
            mark_attrs: dict[str, str] = {}
            for name, value in attrs:
                if value is None:
                    continue
                if name == "class":
                    mark_attrs["class"] = value
                elif name.startswith("data-"):
                    mark_attrs[name[len("data-") :]] = value
            self._marks.append(Mark.create(PARSED_MARK_TAGS[tag], **mark_attrs))

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag == "br":
            self._append_text("\n")

    def handle_endtag(self, tag: str) -> None:
        if tag == "p" or tag in HEADING_TAGS:
            if tag == "p" and self._containers and self._containers[-1] == "li":
                return
            self._close_block()
        elif tag == "li":
            self._close_block()
            self._pop_container("li")
        elif tag in ("ul", "ol", "blockquote"):
            self._close_block()
            self._pop_container(tag)
        elif tag in PARSED_MARK_TAGS:
            mark_type = PARSED_MARK_TAGS[tag]
            for index in range(len(self._marks) - 1, -1, -1):
                if self._marks[index].type == mark_type:
                    del self._marks[index]
                    break

    def handle_data(self, data: str) -> None:
        text = WHITESPACE.sub(" ", data)
        if self._block_type is None and not text.strip():
            return
        if text.startswith(" ") and self._at_line_start():
            text = text[1:]
        if text:
            self._append_text(text)

    def _at_line_start(self) -> bool:
        if self._block_type is None or not self._runs:
            return True
        return self._runs[-1].text.endswith((" ", "\n"))

    def _append_text(self, text: str) -> None:
        if self._block_type is None:
            self._open_block("paragraph")
        self._runs.append(TextRun(text, self._current_marks()))

    def _pop_container(self, tag: str) -> None:
        while self._containers:
            if self._containers.pop() == tag:
                break

    def close(self) -> None:
        super().close()
        self._close_block()


def from_html(content: str) -> RichDocument:
    """Parse editor HTML into a document."""
    parser = _DocumentParser()
    parser.feed(content)
    parser.close()
    return RichDocument(blocks=tuple(parser.blocks))


def html_to_plain_text(content: str) -> str:
    """Markup-stripped projection of serialized rich content."""
    return from_html(content).plain_text
